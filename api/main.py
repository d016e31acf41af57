"""Video Digest — FastAPI application."""

import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile as StarletteUploadFile
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import load_settings
from errors import ConfigurationError, PipelineError
from models import ErrorResponse, HealthResponse, ProcessResponse
from pipeline import VideoPipeline, build_pipeline
from stages.artifacts import safe_extension

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s — %(message)s",
)
logger = logging.getLogger(__name__)

MAX_UPLOAD_BYTES = 200 * 1024 * 1024  # 200 MiB
MULTIPART_OVERHEAD_BYTES = 64 * 1024  # boundaries and part headers

settings = load_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the pipeline once; log instead of failing if it cannot be built."""
    app.state.pipeline = None
    app.state.config_error = None

    try:
        app.state.pipeline = build_pipeline(settings)
    except (ConfigurationError, ValueError) as e:
        # Don't hard-fail startup; /process answers 501 until configured.
        app.state.config_error = str(e)
        logger.warning("Pipeline not configured — /process will return 501: %s", e)
    else:
        try:
            app.state.pipeline.runner.check_available()
            logger.info("ffmpeg is available")
        except PipelineError:
            logger.error("ffmpeg is NOT available — /process will fail until it is installed")

    yield


app = FastAPI(
    title="Video Digest API",
    description="Upload a video → get its transcript and a short summary as JSON",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    """Render every HTTP error as {"error": ...}."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Flatten FastAPI's 422 detail list into a single {"error": ...} string."""
    messages = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ()))
        messages.append(f"{loc}: {err.get('msg', 'invalid')}" if loc else err.get("msg", "invalid"))
    return JSONResponse(status_code=422, content={"error": "; ".join(messages) or "invalid request"})


def get_pipeline(request: Request) -> VideoPipeline:
    pipeline = getattr(request.app.state, "pipeline", None)
    if pipeline is None:
        reason = getattr(request.app.state, "config_error", None) or "pipeline is not configured"
        raise HTTPException(status_code=501, detail=reason)
    return pipeline


@app.get("/")
def root():
    """Liveness probe."""
    return {"ok": True, "msg": "Video processor running"}


@app.get("/health", response_model=HealthResponse)
def health(request: Request):
    """Health check with effective runtime configuration (never secret values)."""
    pipeline: Optional[VideoPipeline] = getattr(request.app.state, "pipeline", None)

    ffmpeg_available = False
    if pipeline is not None:
        try:
            pipeline.runner.check_available()
            ffmpeg_available = True
        except PipelineError:
            pass

    return HealthResponse(
        ok=True,
        configured=pipeline is not None,
        transcribe_provider=settings.transcribe_provider,
        asr_model=settings.asr_model,
        summary_model=settings.summary_model,
        has_deepgram_key=bool(settings.deepgram_api_key),
        has_openai_key=bool(settings.openai_api_key),
        has_hf_token=bool(settings.hf_token),
        ffmpeg_binary=pipeline.runner.binary if pipeline is not None else None,
        ffmpeg_available=ffmpeg_available,
    )


@app.post(
    "/process",
    response_model=ProcessResponse,
    responses={
        400: {"model": ErrorResponse},
        413: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
        501: {"model": ErrorResponse},
    },
)
async def process(request: Request):
    """Upload a video (multipart field `video`) and get back its transcription and summary."""
    # Reject oversized bodies before the multipart parser spools them
    content_length = request.headers.get("content-length", "")
    if content_length.isdigit() and int(content_length) > MAX_UPLOAD_BYTES + MULTIPART_OVERHEAD_BYTES:
        raise HTTPException(status_code=413, detail="video file too large")

    async with request.form() as form:
        video = form.get("video")
        if not isinstance(video, StarletteUploadFile):
            raise HTTPException(status_code=400, detail="video file required")

        content = await video.read(MAX_UPLOAD_BYTES + 1)
        if len(content) > MAX_UPLOAD_BYTES:
            raise HTTPException(status_code=413, detail="video file too large")

        filename = f"upload_{int(time.time() * 1000)}{safe_extension(video.filename)}"

    pipeline = get_pipeline(request)

    try:
        return await run_in_threadpool(pipeline.run, content, filename)
    except PipelineError as e:
        logger.error("Processing failed: %s", e)
        raise HTTPException(status_code=500, detail=str(e))
    except Exception as e:
        logger.exception("Pipeline error")
        raise HTTPException(status_code=500, detail=str(e))


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=settings.port)
