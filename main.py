import logging

from fastapi import FastAPI
from dotenv import load_dotenv

from app.config import settings
from app.controllers import demo
from app.errors import register_error_handlers
from app.obs.middleware import ObservabilityMiddleware
from app.obs.metrics import get_metrics_snapshot

load_dotenv()

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)


api = FastAPI(
    title="API Call Logger",
    version="1.0.0",
)
register_error_handlers(api)

# Controllers (call-logged)
api.include_router(demo.router)


@api.get("/health")
async def health():
    return {"status": "healthy", "service": "api-call-logger", "env": settings.APP_ENV}


@api.get("/metrics")
async def metrics():
    return get_metrics_snapshot()


# Apply middleware
app = ObservabilityMiddleware(api)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8001,
        reload=settings.APP_ENV == "dev",
        log_level=settings.LOG_LEVEL.lower(),
    )
