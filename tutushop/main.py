# tutushop/main.py
import logging
from contextlib import contextmanager
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, FastAPI, File, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles

from .catalog import ProductService
from .config import Settings
from .errors import InternalError, StoreError, register_error_handlers
from .logging_config import configure_logger
from .models import HealthStatus, Message, UploadResult
from .store import FileStore
from .uploads import UploadHandler, audio_handler, image_handler

logger = logging.getLogger(__name__)

router = APIRouter()

# ---------------------------
# Dependencies
# ---------------------------
def get_service(request: Request) -> ProductService:
    return request.app.state.products

def get_image_handler(request: Request) -> UploadHandler:
    return request.app.state.image_uploads

def get_audio_handler(request: Request) -> UploadHandler:
    return request.app.state.audio_uploads


@contextmanager
def failure_message(message: str):
    """Turn anything outside the error taxonomy into a logged 500 with `message`."""
    try:
        yield
    except StoreError:
        raise
    except Exception as exc:
        logger.exception(message)
        raise InternalError(message) from exc

# ---------------------------
# Product endpoints
# ---------------------------
@router.get("/api/products/{category}")
async def list_products(category: str, service: ProductService = Depends(get_service)) -> List[Dict[str, Any]]:
    with failure_message("Failed to load products"):
        return await service.list_products(category)

@router.get("/api/products/{category}/{product_id}")
async def get_product(category: str, product_id: str, service: ProductService = Depends(get_service)) -> Dict[str, Any]:
    with failure_message("Failed to load product"):
        return await service.get_product(category, product_id)

@router.post("/api/products/{category}", status_code=201)
async def create_product(
    category: str,
    fields: Optional[Dict[str, Any]] = Body(None),
    service: ProductService = Depends(get_service),
) -> Dict[str, Any]:
    with failure_message("Failed to create product"):
        return await service.create_product(category, fields or {})

@router.put("/api/products/{category}/{product_id}")
async def update_product(
    category: str,
    product_id: str,
    fields: Optional[Dict[str, Any]] = Body(None),
    service: ProductService = Depends(get_service),
) -> Dict[str, Any]:
    with failure_message("Failed to update product"):
        return await service.update_product(category, product_id, fields or {})

@router.delete("/api/products/{category}/{product_id}", response_model=Message)
async def delete_product(category: str, product_id: str, service: ProductService = Depends(get_service)):
    with failure_message("Failed to delete product"):
        return await service.delete_product(category, product_id)

# ---------------------------
# Upload endpoints
# ---------------------------
@router.post("/api/upload/image", response_model=UploadResult)
async def upload_image(
    image: Optional[UploadFile] = File(None),
    handler: UploadHandler = Depends(get_image_handler),
):
    with failure_message("Failed to upload file"):
        return await handler.save(image)

@router.post("/api/upload/audio", response_model=UploadResult)
async def upload_audio(
    audio: Optional[UploadFile] = File(None),
    handler: UploadHandler = Depends(get_audio_handler),
):
    with failure_message("Failed to upload file"):
        return await handler.save(audio)

# ---------------------------
# Health
# ---------------------------
@router.get("/api/health", response_model=HealthStatus)
async def health():
    return {"status": "ok", "message": "TUTU Shop API is running"}


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    configure_logger("tutushop", settings.log_level, settings.log_dir)
    settings.ensure_directories()

    app = FastAPI(title="TUTU Shop API")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.settings = settings
    app.state.products = ProductService(FileStore(settings), settings.uploads_dir)
    app.state.image_uploads = image_handler(settings)
    app.state.audio_uploads = audio_handler(settings)

    register_error_handlers(app)
    app.include_router(router)

    index_path = settings.static_dir / settings.index_file

    @app.get("/", include_in_schema=False)
    async def index():
        return FileResponse(index_path)

    # mounts go last so the API routes above take precedence
    app.mount("/uploads", StaticFiles(directory=settings.uploads_dir), name="uploads")
    app.mount("/", StaticFiles(directory=settings.static_dir), name="static")
    return app


def main(settings: Optional[Settings] = None) -> None:
    import uvicorn

    settings = settings or Settings.from_env()
    app = create_app(settings)
    logger.info("TUTU Shop backend running on http://localhost:%d", settings.port)
    logger.info("Data directory: %s", settings.data_dir)
    logger.info("Uploads directory: %s", settings.uploads_dir)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
