"""Pydantic models for API requests and responses."""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List, Any, Union


class Envelope(BaseModel):
    """Uniform response shape for every API route."""
    success: bool
    message: Optional[str] = None
    data: Optional[Any] = None


class ChunkUpload(BaseModel):
    chunk: str
    index: int
    total: int
    timestamp: Union[int, float, str]


class ChunkResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    chunk_id: str = Field(..., alias="chunkId")


class CombineRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    chunk_ids: List[str] = Field(..., alias="chunkIds")
    timestamp: Union[int, float, str]
    checksum: Optional[str] = None
