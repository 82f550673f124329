"""Response classes for the API."""

import json
from typing import Any

from fastapi.responses import JSONResponse


class EnvelopeJSONResponse(JSONResponse):
    """JSONResponse that escapes non-ASCII text when content holds lone surrogates.

    Backup documents may carry ``\\udXXX`` escapes that are valid JSON but
    cannot be encoded as UTF-8 once decoded.
    """

    def render(self, content: Any) -> bytes:
        try:
            return super().render(content)
        except UnicodeEncodeError:
            return json.dumps(
                content,
                ensure_ascii=True,
                allow_nan=False,
                indent=None,
                separators=(",", ":"),
            ).encode("utf-8")
