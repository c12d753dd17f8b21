"""Error payload returned by every endpoint."""

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Body of a 4xx/5xx response produced by the server's exception handlers."""
    detail: str
    code: str = Field(description="Machine-readable error code, e.g. FILE_NOT_FOUND or EMPTY_MANIFEST")
