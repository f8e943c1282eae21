import logging

from fastapi import FastAPI

from .config import get_settings
from .routers.analytics import router as analytics_router
from .routers.plans import router as plans_router

logging.basicConfig(
    level=get_settings().log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="Journey Goals Service", version="0.1.0")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


app.include_router(analytics_router)
app.include_router(plans_router)
