"""Shared FastAPI dependencies for internal trigger endpoints."""

from __future__ import annotations

import logging
import secrets
from typing import Annotated

from fastapi import Depends, Header, HTTPException, Request, status

from notifier.config import Settings, get_settings
from notifier.notifications.factory import build_event_router, build_retention_sweeper
from notifier.notifications.retention import RetentionSweeper
from notifier.notifications.router import EventRouter

logger = logging.getLogger(__name__)


async def require_task_secret(
  request: Request, settings: Annotated[Settings, Depends(get_settings)], authorization: str | None = Header(default=None), x_notifier_task_secret: str | None = Header(default=None)
) -> None:
  """Reject callers that do not present the shared task secret."""
  # Secure-by-default: without a configured secret nothing may trigger notifications.
  if not settings.task_secret:
    raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Task authentication is not configured.")
  # Scheduler OIDC tokens occupy Authorization, so the dedicated header is checked first.
  shared_secret_valid = secrets.compare_digest((x_notifier_task_secret or ""), settings.task_secret)
  bearer_valid = secrets.compare_digest((authorization or ""), f"Bearer {settings.task_secret}")
  if not shared_secret_valid and not bearer_valid:
    logger.warning("Unauthorized access attempt to %s", request.url.path)
    raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid task secret.")


def get_event_router(settings: Annotated[Settings, Depends(get_settings)]) -> EventRouter:
  """Build the event router for the current settings."""
  return build_event_router(settings)


def get_retention_sweeper(settings: Annotated[Settings, Depends(get_settings)]) -> RetentionSweeper:
  """Build the retention job for the current settings."""
  return build_retention_sweeper(settings)
