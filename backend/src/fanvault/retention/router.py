"""FastAPI router for retention management endpoints.

Provides APIs for:
- Triggering a cleanup run immediately (admin)
- Viewing and updating retention settings (admin)
- Previewing what the next cleanup would delete (reviewer or admin)
"""

import logging
from typing import Annotated, Any, Dict

from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from ..auth.dependencies import Actor, require_admin, require_reviewer
from ..database import get_db
from ..dependencies import get_retention_config_store, get_staging_store
from ..infrastructure.storage.staging_store import LocalStagingStore
from .config_store import RetentionConfigStore
from .lock import CleanupLock, get_redis_client
from .schemas import CleanupResult, RetentionSettings, RetentionStats
from .service import RetentionService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/retention", tags=["retention"])


def get_cleanup_lock() -> CleanupLock:
    return CleanupLock(redis_client=get_redis_client())


def get_retention_service(
    db: Annotated[Session, Depends(get_db)],
    staging: Annotated[LocalStagingStore, Depends(get_staging_store)],
    config_store: Annotated[RetentionConfigStore, Depends(get_retention_config_store)],
) -> RetentionService:
    """Service for read and settings endpoints; never takes the cleanup lock."""
    return RetentionService(db, staging, config_store)


def get_cleanup_service(
    db: Annotated[Session, Depends(get_db)],
    staging: Annotated[LocalStagingStore, Depends(get_staging_store)],
    config_store: Annotated[RetentionConfigStore, Depends(get_retention_config_store)],
    lock: Annotated[CleanupLock, Depends(get_cleanup_lock)],
) -> RetentionService:
    return RetentionService(db, staging, config_store, lock)


@router.post("/cleanup", response_model=CleanupResult)
def trigger_cleanup(
    actor: Annotated[Actor, Depends(require_admin)],
    service: Annotated[RetentionService, Depends(get_cleanup_service)],
) -> CleanupResult:
    """Run retention cleanup now.

    Runs synchronously and always answers 200; the body's success flag and
    error field report a busy lock or a failed run.
    """
    result = service.manual_cleanup()

    logger.info(
        f"Manual retention cleanup requested: success={result.success}",
        extra={"user_id": actor.user_id},
    )
    return result


@router.get("/settings", response_model=RetentionSettings)
def get_retention_settings(
    actor: Annotated[Actor, Depends(require_admin)],
    service: Annotated[RetentionService, Depends(get_retention_service)],
) -> RetentionSettings:
    """Current retention settings"""
    return service.get_config()


@router.patch("/settings", response_model=RetentionSettings)
def update_retention_settings(
    actor: Annotated[Actor, Depends(require_admin)],
    service: Annotated[RetentionService, Depends(get_retention_service)],
    updates: Dict[str, Any] = Body(...),
) -> RetentionSettings:
    """Update retention settings. Partial updates supported.

    Validation:
    - retention_days must be 1-365
    - max_retained_rejected must be 10-10000

    Raises:
        RetentionConfigError (400): Out-of-bounds or unknown field; nothing applied
    """
    settings = service.update_config(updates)

    logger.info(
        "Updated retention settings via API",
        extra={"user_id": actor.user_id, "updates": updates},
    )
    return settings


@router.get("/stats", response_model=RetentionStats)
def get_retention_stats(
    actor: Annotated[Actor, Depends(require_reviewer)],
    service: Annotated[RetentionService, Depends(get_retention_service)],
) -> RetentionStats:
    """What the next cleanup run would delete under current settings"""
    return service.get_stats()
