"""Scheduled cleanup of old in-app notification documents."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from google.cloud.firestore import Client as FirestoreClient
from google.cloud.firestore_v1.base_query import FieldFilter
from starlette.concurrency import run_in_threadpool

from notifier.core.firebase import delete_in_batches

logger = logging.getLogger(__name__)


def retention_cutoff(now: datetime, days: int) -> datetime:
  """Return the oldest `createdAt` that is still retained."""
  return now - timedelta(days=days)


class RetentionSweeper:
  """Delete notification documents older than the retention window.

  Intended to run roughly once a day from a scheduler hitting the internal task
  endpoint. Storage failures propagate so the scheduler can record the failure.
  """

  def __init__(self, *, client_factory: Callable[[], FirestoreClient | None], collection: str = "notifications", retention_days: int = 30) -> None:
    if retention_days <= 0:
      raise ValueError("retention_days must be a positive integer.")
    self._client_factory = client_factory
    self._collection = collection
    self._retention_days = retention_days

  async def sweep(self, now: datetime | None = None) -> int:
    """Delete expired documents and return how many were removed."""
    cutoff = retention_cutoff(now or datetime.now(timezone.utc), self._retention_days)
    deleted = await run_in_threadpool(self._sweep_sync, cutoff)
    logger.info("Deleted %d old notifications cutoff=%s", deleted, cutoff.isoformat())
    return deleted

  def _sweep_sync(self, cutoff: datetime) -> int:
    client = self._client_factory()
    if client is None:
      raise RuntimeError("Firestore client is not configured.")

    query = client.collection(self._collection).where(filter=FieldFilter("createdAt", "<", cutoff))
    return delete_in_batches(client, (snapshot.reference for snapshot in query.stream()))
