from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, status

from notifier.api.deps import get_retention_sweeper, require_task_secret
from notifier.notifications.retention import RetentionSweeper

router = APIRouter(prefix="/tasks", tags=["tasks"], dependencies=[Depends(require_task_secret)])
logger = logging.getLogger(__name__)


@router.post("/cleanup-notifications", status_code=status.HTTP_200_OK)
async def cleanup_notifications(sweeper: Annotated[RetentionSweeper, Depends(get_retention_sweeper)]) -> dict[str, str | int]:
  """
  Handler for the daily scheduler job.
  Runs synchronously so the scheduler records failures and retries on its own schedule.
  """
  deleted = await sweeper.sweep()
  return {"status": "ok", "deleted": deleted}
