import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response

from app.api.endpoints import health, products
from app.services.related.exceptions import (
    INTERNAL_ERROR_MESSAGE,
    RelatedProductsError,
    RequestCancelledError,
)
from app.settings import settings

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_name)

app.include_router(products.router, prefix="/api/products", tags=["Products"])
app.include_router(health.router, prefix="/api/health", tags=["Health"])


@app.exception_handler(RelatedProductsError)
async def related_products_error_handler(request: Request, exc: RelatedProductsError):
    if isinstance(exc, RequestCancelledError):
        # 클라이언트가 이미 떠났거나 데드라인 만료: 본문 없이 종료
        logger.info(f"Request cancelled: {request.url.path} operation={exc.operation}")
        return Response(status_code=exc.status_code)
    if exc.status_code >= 500:
        logger.error(f"{exc.error_code}: {request.url.path} context={exc.context}")
    else:
        logger.info(f"{exc.error_code}: {request.url.path} message={exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request parameters", "code": "INVALID_ARGUMENT"},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error: {request.url.path} ({type(exc).__name__})")
    return JSONResponse(
        status_code=500,
        content={"error": INTERNAL_ERROR_MESSAGE, "code": "INTERNAL_ERROR"},
    )


@app.get("/health")
def health_check() -> dict:
    return {"status": "ok"}
