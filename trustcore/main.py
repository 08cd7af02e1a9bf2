import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from trustcore.core.config import settings
from trustcore.core.errors import TrustSafetyError, ValidationError
from trustcore.core.logging import configure_logging

configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url=f"{settings.API_V1_STR}/openapi.json"
)

@app.exception_handler(TrustSafetyError)
async def trust_safety_error_handler(request: Request, exc: TrustSafetyError):
    if exc.status_code >= 500:
        logger.error(f"[API] {request.method} {request.url.path} -> {exc.status_code}: {exc.detail}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail, "error": exc.code})

@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    detail = f"{location}: {message}" if location else message
    return JSONResponse(status_code=ValidationError.status_code, content={"detail": detail, "error": ValidationError.code})

@app.get("/")
def root():
    return {"message": f"Welcome to {settings.PROJECT_NAME}", "docs": "/docs"}

from trustcore.modules.blocks.router import router as blocks_router
from trustcore.modules.privacy.router import router as privacy_router
from trustcore.modules.reports.router import router as reports_router
from trustcore.modules.content.router import router as content_router
from trustcore.modules.moderation.router import router as moderation_router
from trustcore.modules.admin.router import router as admin_router

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(blocks_router, prefix=f"{settings.API_V1_STR}/blocks", tags=["blocks"])
app.include_router(privacy_router, prefix=f"{settings.API_V1_STR}/privacy", tags=["privacy"])
app.include_router(reports_router, prefix=f"{settings.API_V1_STR}/reports", tags=["reports"])
app.include_router(content_router, prefix=f"{settings.API_V1_STR}/content", tags=["content"])
app.include_router(moderation_router, prefix=f"{settings.API_V1_STR}/moderation", tags=["moderation"])
app.include_router(admin_router, prefix=f"{settings.API_V1_STR}/admin", tags=["admin"])
