"""Single-page application serving with client-side routing fallback."""

from pathlib import Path

from fastapi import APIRouter, Request
from fastapi.responses import FileResponse

from ..exceptions import EnvelopeError

router = APIRouter(tags=["frontend"])


def resolve_asset(dist_dir: Path, full_path: str) -> Path:
    """Map a request path to a file under ``dist_dir``.

    Paths that do not name an existing file, or that escape ``dist_dir``,
    resolve to ``index.html``.
    """
    root = dist_dir.resolve()
    if full_path:
        candidate = (root / full_path).resolve()
        if candidate.is_relative_to(root) and candidate.is_file():
            return candidate
    return root / "index.html"


@router.get("/{full_path:path}", include_in_schema=False)
async def serve_spa(full_path: str, request: Request) -> FileResponse:
    """Serve a static asset, or the SPA entry document for client routes."""
    api_prefix = request.app.state.api_prefix.strip("/")
    if api_prefix and (full_path == api_prefix or full_path.startswith(f"{api_prefix}/")):
        raise EnvelopeError(404, "Not found")

    asset = resolve_asset(Path(request.app.state.dist_dir), full_path)
    if not asset.is_file():
        raise EnvelopeError(404, "Frontend not built")
    return FileResponse(asset)
