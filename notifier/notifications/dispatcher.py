"""Batched fan-out of one payload to many device tokens."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import Any

from starlette.concurrency import run_in_threadpool

from notifier.config import PROVIDER_BATCH_CEILING
from notifier.notifications.contracts import DispatchOutcome, NotificationPayload, NotificationProviderError, PushSender

logger = logging.getLogger(__name__)


def chunk_tokens(tokens: Sequence[str], size: int) -> list[list[str]]:
  """Split tokens into consecutive chunks of at most `size`, preserving order."""
  if size <= 0:
    raise ValueError("Chunk size must be a positive integer.")
  return [list(tokens[start : start + size]) for start in range(0, len(tokens), size)]


def summarize(outcomes: Sequence[DispatchOutcome]) -> dict[str, Any]:
  """Aggregate per-batch outcomes into totals for logs and API responses."""
  return {
    "batches": len(outcomes),
    "attempted": sum(outcome.attempted_count for outcome in outcomes),
    "succeeded": sum(outcome.success_count for outcome in outcomes),
    "failed": sum(outcome.failure_count for outcome in outcomes),
    "failed_batches": [outcome.batch_index for outcome in outcomes if outcome.failed],
  }


class BatchDispatcher:
  """Deliver a payload in provider-sized batches, isolating failures per batch."""

  def __init__(self, push_sender: PushSender, *, batch_size: int = PROVIDER_BATCH_CEILING, max_concurrency: int = 1) -> None:
    if not 1 <= batch_size <= PROVIDER_BATCH_CEILING:
      raise ValueError(f"batch_size must be between 1 and {PROVIDER_BATCH_CEILING}.")
    if max_concurrency < 1:
      raise ValueError("max_concurrency must be a positive integer.")
    self._push_sender = push_sender
    self._batch_size = batch_size
    self._max_concurrency = max_concurrency

  async def dispatch(self, payload: NotificationPayload, tokens: Sequence[str], *, single_target: bool = False) -> list[DispatchOutcome]:
    """Send `payload` to every token and return one outcome per batch, ordered by batch index.

    Delivery failures never escape; they are recorded on the failing batch's
    outcome and the remaining batches are still attempted.
    """
    if not tokens:
      logger.info("No recipients for notification title=%s; nothing to send", payload.title)
      return []

    # Status updates go to exactly one device, so skip the multicast wrapper.
    if single_target and len(tokens) == 1:
      return [await self._send_single(payload, tokens[0])]

    chunks = chunk_tokens(tokens, self._batch_size)
    logger.info("Dispatching notification title=%s tokens=%d batches=%d", payload.title, len(tokens), len(chunks))

    if self._max_concurrency == 1:
      outcomes = []
      for index, chunk in enumerate(chunks):
        outcomes.append(await self._send_batch(payload, index, chunk))
      return outcomes

    semaphore = asyncio.Semaphore(self._max_concurrency)

    async def _bounded(index: int, chunk: list[str]) -> DispatchOutcome:
      async with semaphore:
        return await self._send_batch(payload, index, chunk)

    # gather preserves argument order, so outcomes stay sorted by batch index.
    return list(await asyncio.gather(*(_bounded(index, chunk) for index, chunk in enumerate(chunks))))

  async def _send_single(self, payload: NotificationPayload, token: str) -> DispatchOutcome:
    try:
      report = await run_in_threadpool(self._push_sender.send_to_one, token, payload)
    except NotificationProviderError as exc:
      logger.error("Single push delivery failed (provider error): %s", exc)
      return DispatchOutcome(batch_index=0, attempted_count=1, success_count=0, failure_count=1, error=str(exc))
    except Exception as exc:  # noqa: BLE001
      logger.error("Single push delivery failed: %s", exc, exc_info=True)
      return DispatchOutcome(batch_index=0, attempted_count=1, success_count=0, failure_count=1, error=str(exc) or type(exc).__name__)

    return DispatchOutcome(batch_index=0, attempted_count=1, success_count=report.success_count, failure_count=report.failure_count, invalid_tokens=report.invalid_tokens)

  async def _send_batch(self, payload: NotificationPayload, index: int, chunk: list[str]) -> DispatchOutcome:
    attempted = len(chunk)
    try:
      report = await run_in_threadpool(self._push_sender.send_to_many, chunk, payload)
    except NotificationProviderError as exc:
      logger.error("Batch %d delivery failed (provider error) tokens=%d: %s", index + 1, attempted, exc)
      return DispatchOutcome(batch_index=index, attempted_count=attempted, success_count=0, failure_count=attempted, error=str(exc))
    except Exception as exc:  # noqa: BLE001
      logger.error("Batch %d delivery failed tokens=%d: %s", index + 1, attempted, exc, exc_info=True)
      return DispatchOutcome(batch_index=index, attempted_count=attempted, success_count=0, failure_count=attempted, error=str(exc) or type(exc).__name__)

    logger.info("Batch %d sent: %d successful, %d failed", index + 1, report.success_count, report.failure_count)
    return DispatchOutcome(batch_index=index, attempted_count=attempted, success_count=report.success_count, failure_count=report.failure_count, invalid_tokens=report.invalid_tokens)
