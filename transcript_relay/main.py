"""FastAPI app exposing POST /api/fetch-transcript."""

from functools import lru_cache
from pathlib import Path
from uuid import uuid4

import structlog
import uvicorn
from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.datastructures import Headers
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from transcript_relay.config import settings
from transcript_relay.downloader import AudioDownloader, YtDlpDownloader
from transcript_relay.errors import (
    VIDEO_URL_REQUIRED,
    InvalidInput,
    ResponseSerializationError,
    TranscriptRelayError,
)
from transcript_relay.logging_config import setup_logging
from transcript_relay.pipeline import fetch_transcript
from transcript_relay.schemas import ErrorResponse, FetchTranscriptRequest, TranscriptResponse
from transcript_relay.tracing import setup_tracing
from transcript_relay.transcriber import OpenAITranscriber, Transcriber

SERVICE_NAME = "transcript-relay"

logger = structlog.get_logger()


def _configure_api_observability() -> None:
    setup_logging(service_name=SERVICE_NAME, environment=settings.ENV)
    setup_tracing(
        service_name=SERVICE_NAME,
        environment=settings.ENV,
        endpoint=settings.OTEL_EXPORTER_OTLP_ENDPOINT,
    )
    if not settings.OPENAI_API_KEY:
        logger.warning(
            "startup.missing_openai_api_key",
            message="The transcription step will fail until OPENAI_API_KEY is set.",
        )


_configure_api_observability()

BODY_TOO_LARGE = "Request body too large."


class BodySizeLimitMiddleware:
    """Answer 413 once a request body passes max_bytes.

    Declared Content-Length is checked up front. Chunked bodies carry none, so
    the bytes are also counted as the endpoint reads them.
    """

    def __init__(self, app: ASGIApp, max_bytes: int) -> None:
        self.app = app
        self.max_bytes = max_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        content_length = Headers(scope=scope).get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > self.max_bytes:
            response = JSONResponse(status_code=413, content={"error": BODY_TOO_LARGE})
            await response(scope, receive, send)
            return

        received = 0

        async def limited_receive() -> Message:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_bytes:
                    # Re-raised by FastAPI's body parsing, rendered by http_exception_handler.
                    raise HTTPException(status_code=413, detail=BODY_TOO_LARGE)
            return message

        await self.app(scope, limited_receive, send)


app = FastAPI(title=SERVICE_NAME)
app.add_middleware(BodySizeLimitMiddleware, max_bytes=settings.MAX_BODY_BYTES)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ALLOW_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def bind_request_id(request: Request, call_next):
    """Tag every log line of the request with a request id."""
    with structlog.contextvars.bound_contextvars(request_id=uuid4().hex):
        return await call_next(request)


@app.exception_handler(StarletteHTTPException)
def http_exception_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Same {"error": label} shape for framework errors (404, 405, 413)."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
def validation_exception_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return 400 for bodies that are not a JSON object with a string videoUrl."""
    logger.warning("fetch_transcript.invalid_body", errors=str(exc.errors()))
    return JSONResponse(status_code=400, content={"error": VIDEO_URL_REQUIRED})


@app.exception_handler(TranscriptRelayError)
def relay_error_handler(_request: Request, exc: TranscriptRelayError) -> JSONResponse:
    """Log the failure with its diagnostics; send only the label to the caller."""
    log = logger.warning if isinstance(exc, InvalidInput) else logger.error
    log(
        "fetch_transcript.failed",
        error_type=type(exc).__name__,
        label=exc.label,
        cause=repr(exc.__cause__) if exc.__cause__ else None,
        details=exc.details,
    )
    return JSONResponse(status_code=exc.status_code, content={"error": exc.label})


def get_downloader() -> AudioDownloader:
    return YtDlpDownloader(settings.YTDLP_PATH)


@lru_cache
def get_transcriber() -> Transcriber:
    return OpenAITranscriber(
        api_key=settings.OPENAI_API_KEY,
        model=settings.TRANSCRIPTION_MODEL,
        temperature=settings.TRANSCRIPTION_TEMPERATURE,
    )


def get_scratch_root() -> Path:
    return Path(settings.SCRATCH_DIR)


@app.get("/health")
def health() -> dict[str, str]:
    """Health check: returns 200 when API is up."""
    return {"status": "ok"}


@app.post(
    "/api/fetch-transcript",
    response_model=TranscriptResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def fetch_transcript_endpoint(
    body: FetchTranscriptRequest,
    downloader: AudioDownloader = Depends(get_downloader),
    transcriber: Transcriber = Depends(get_transcriber),
    scratch_root: Path = Depends(get_scratch_root),
) -> TranscriptResponse:
    """Download the video's audio, transcribe it and return the text."""
    transcript = fetch_transcript(
        body.video_url,
        downloader=downloader,
        transcriber=transcriber,
        scratch_root=scratch_root,
    )
    try:
        return TranscriptResponse(transcript=transcript)
    except ValidationError as e:
        raise ResponseSerializationError(reason=str(e)) from e


def run() -> None:
    """Serve the app with uvicorn on settings.HOST:settings.PORT."""
    # log_config=None leaves uvicorn's loggers propagating to the JSON root handler.
    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_config=None)


if __name__ == "__main__":
    run()
