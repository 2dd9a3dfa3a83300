import logging

from fastapi import APIRouter
from fastapi.responses import HTMLResponse

from devon_farm.api.templating import render
from devon_farm.core.config import settings
from devon_farm.core.health import check_postgres

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_class=HTMLResponse)
async def index() -> HTMLResponse:
    return render("index.html", title=settings.APP_NAME)


@router.get("/health")
async def health_check() -> dict[str, str]:
    try:
        await check_postgres()
        return {"status": "healthy", "version": settings.APP_VERSION}
    except Exception as e:
        logger.error(f"[Health] Database check failed: {e.__class__.__name__}")
        return {"status": "unhealthy", "error": e.__class__.__name__}
