import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from shared.config.database import engine, Base
from shared.observability import setup_observability
from shared.security import limiter

# IMPORTANT: import models so they register with Base
from services.auth_service import models as auth_models
from services.product_service import models as product_models
from services.order_service import models as order_models

from services.auth_service.router import router as auth_router
from services.product_service.router import router as product_router
from services.order_service.router import router as order_router
from services.rider_service.router import router as rider_router

logger = structlog.get_logger(__name__)

app = FastAPI(
    title="Storefront API",
    version="1.0.0",
    description="Catalog, checkout, order lifecycle and rider management.",
)

# --- OBSERVABILITY BOOTSTRAP ---
setup_observability(app, "storefront_api")

# --- SECURITY SETUP ---
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error("unhandled_exception", path=request.url.path, method=request.method, exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Something went wrong!"})


app.include_router(auth_router)
app.include_router(product_router)
app.include_router(order_router)
app.include_router(rider_router)


@app.get("/health", include_in_schema=False)
async def health_check():
    return {"service": "storefront", "status": "running"}


@app.on_event("startup")
async def startup_event():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("database_ready", tables=sorted(Base.metadata.tables.keys()))
