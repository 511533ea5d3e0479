from fastapi import FastAPI, Response
from fastapi.responses import StreamingResponse
from contextlib import asynccontextmanager
from loguru import logger
import uvicorn

from printer_lens.core.config import settings
from printer_lens.core.errors import ModelLoadFailure
from printer_lens.core.logging import setup_logging
from printer_lens.engine.camera import LatestFrameSource
from printer_lens.engine.pipeline import DetectionPipeline
from printer_lens.engine.stream import VisionStream
from printer_lens.vision.factory import get_runner


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    logger.info(f"🚀 {settings.PROJECT_NAME} is Waking Up...")

    try:
        runner = get_runner()
    except ModelLoadFailure as e:
        logger.critical(f"🔥 FATAL ERROR: detection unavailable, model failed to load! {e}")
        raise

    source = LatestFrameSource(settings.camera_device, rotation=settings.CAMERA_ROTATION)
    try:
        source.open()
    except Exception as e:
        logger.critical(f"🔥 FATAL ERROR: camera unavailable! {e}")
        runner.close()
        raise
    app.state.stream = VisionStream(
        DetectionPipeline.from_settings(runner),
        source,
        jpeg_quality=settings.STREAM_JPEG_QUALITY,
    )
    logger.success("✅ Vision Pipeline initialized successfully")

    yield

    logger.warning("🛑 System Shutting Down...")
    app.state.stream = None
    source.close()
    runner.close()


app = FastAPI(title=settings.PROJECT_NAME, lifespan=lifespan)
app.state.stream = None


@app.get("/")
def health_check():
    return {
        "status": "online" if app.state.stream is not None else "initializing",
        "backend": settings.MODEL_BACKEND.value,
        "device": settings.DEVICE.value,
        "label": settings.CLASS_LABEL,
    }


@app.get("/stream/video")
def video_feed():
    """
    Streams the annotated camera feed.
    Usage: <img src="http://localhost:8000/stream/video" />
    """
    stream = app.state.stream
    if stream is None:
        return Response("System initializing...", status_code=503)

    return StreamingResponse(
        stream.generate_frames(),
        media_type="multipart/x-mixed-replace; boundary=frame"
    )


def run() -> None:
    uvicorn.run("printer_lens.server.main:app", host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    run()
