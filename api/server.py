"""FastAPI server for the Nano Try-On session.

Exposes one in-memory session to a browser client:
- asset uploads and selection for persons and garments
- garment generation from a text prompt
- try-on composition, step navigation and result download
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Response
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from nano_tryon import __version__
from nano_tryon.config import load_config
from nano_tryon.models import AssetKind, SessionSnapshot, Step
from nano_tryon.pipeline import TryOnSession, create_session


# Initialize session (will be done on first request)
_session: TryOnSession | None = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Close the session's HTTP client on shutdown."""
    global _session
    yield
    if _session is not None:
        await _session.close()
        _session = None


app = FastAPI(
    title="Nano Try-On API",
    description="Guided virtual try-on using Gemini image generation",
    version=__version__,
    lifespan=lifespan,
)

# Enable CORS for the browser client
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class UploadRequest(BaseModel):
    """Request body for an asset upload."""
    image: str  # Base64 data URL or raw base64
    display_ref: str | None = None


class SelectRequest(BaseModel):
    asset_id: str


class GarmentPromptRequest(BaseModel):
    prompt: str


class StepRequest(BaseModel):
    step: Step


def get_session() -> TryOnSession:
    """Get or create the session instance."""
    global _session
    if _session is None:
        config = load_config()  # Loads from .env automatically via pydantic-settings
        _session = create_session(config)
    return _session


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "Nano Try-On API", "version": __version__}


@app.get("/health")
async def health():
    """Detailed health check."""
    session = get_session()
    configured = session.pipeline.provider.is_configured

    return {
        "status": "ok" if configured else "degraded",
        "provider": "configured" if configured else "missing API key",
    }


@app.get("/api/session", response_model=SessionSnapshot)
async def get_state():
    return get_session().snapshot()


@app.post("/api/assets/{kind}/upload", response_model=SessionSnapshot)
async def upload_asset(kind: AssetKind, request: UploadRequest):
    """Add an uploaded person or garment image and select it."""
    session = get_session()
    if kind == AssetKind.PERSON:
        session.upload_person(request.image, request.display_ref)
    else:
        session.upload_garment(request.image, request.display_ref)
    return session.snapshot()


@app.post("/api/assets/{kind}/select", response_model=SessionSnapshot)
async def select_asset(kind: AssetKind, request: SelectRequest):
    session = get_session()
    if kind == AssetKind.PERSON:
        session.select_person(request.asset_id)
    else:
        session.select_garment(request.asset_id)
    return session.snapshot()


@app.post("/api/garments/generate", response_model=SessionSnapshot)
async def generate_garment(request: GarmentPromptRequest):
    """Generate a garment image from a text description."""
    session = get_session()
    await session.generate_garment_from_prompt(request.prompt)
    return session.snapshot()


@app.post("/api/tryon", response_model=SessionSnapshot)
async def start_tryon():
    """Compose the selected person and garment.

    Failures are reported through ``state.last_error``, not HTTP status.
    """
    session = get_session()
    await session.start_try_on()
    return session.snapshot()


@app.post("/api/step", response_model=SessionSnapshot)
async def go_to_step(request: StepRequest):
    session = get_session()
    session.go_to_step(request.step)
    return session.snapshot()


@app.post("/api/error/dismiss", response_model=SessionSnapshot)
async def dismiss_error():
    session = get_session()
    session.dismiss_error()
    return session.snapshot()


@app.get("/api/result")
async def download_result():
    """Return the current try-on result as an image file."""
    result = get_session().result_image()
    if result is None:
        raise HTTPException(status_code=404, detail="No try-on result available")
    image_bytes, media_type = result
    extension = media_type.split("/")[-1]
    return Response(
        content=image_bytes,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="try-on.{extension}"'},
    )


if __name__ == "__main__":
    import uvicorn
    load_config().setup_logging()
    uvicorn.run(app, host="0.0.0.0", port=8000)
