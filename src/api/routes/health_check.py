import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel.ext.asyncio.session import AsyncSession

from src.adapter.services.sweep_scheduler import SweepScheduler
from src.app.services.background_jobs import BackgroundJobRunner
from src.depends import get_job_runner, get_session, get_sweep_scheduler

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health")
async def health_check(
    session: AsyncSession = Depends(get_session),
    scheduler: SweepScheduler = Depends(get_sweep_scheduler),
    job_runner: BackgroundJobRunner = Depends(get_job_runner),
):
    """Liveness plus a database round trip."""
    database = "ok"
    try:
        await session.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.exception("Health check database query failed")
        database = "unavailable"

    body = {
        "status": "ok" if database == "ok" else "degraded",
        "database": database,
        "scheduler": "running" if scheduler.started else "stopped",
        "background_jobs": job_runner.pending,
    }
    code = status.HTTP_200_OK if database == "ok" else status.HTTP_503_SERVICE_UNAVAILABLE
    return JSONResponse(status_code=code, content=body)
