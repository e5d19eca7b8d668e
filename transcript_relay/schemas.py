"""Pydantic request/response schemas."""

from pydantic import BaseModel, ConfigDict, Field, StrictStr


class FetchTranscriptRequest(BaseModel):
    """Request body for POST /api/fetch-transcript."""

    model_config = ConfigDict(populate_by_name=True)

    # Optional here so a missing URL gets the handler's own 400 label.
    video_url: StrictStr | None = Field(None, alias="videoUrl")


class TranscriptResponse(BaseModel):
    transcript: StrictStr


class ErrorResponse(BaseModel):
    error: str
