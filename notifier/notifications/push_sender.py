"""Push notification delivery implementations."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from typing import TypeVar

from firebase_admin import exceptions as firebase_exceptions
from firebase_admin import messaging

from notifier.notifications.contracts import NotificationPayload, NotificationProviderError, PushSender, SendReport, TransientPushProviderError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Errors that mean the registration token itself is dead and should be forgotten.
_INVALID_TOKEN_ERRORS = (messaging.UnregisteredError, messaging.SenderIdMismatchError)
_TRANSIENT_ERRORS = (firebase_exceptions.UnavailableError, firebase_exceptions.InternalError, firebase_exceptions.DeadlineExceededError)


class FcmPushSender(PushSender):
  """`firebase_admin.messaging` backed sender with retry for transient provider failures."""

  def __init__(self, *, backoff_seconds: Sequence[float] = (0.5, 1.0), app=None) -> None:
    self._backoff_seconds = tuple(backoff_seconds)
    self._app = app

  def send_to_many(self, tokens: Sequence[str], payload: NotificationPayload) -> SendReport:
    """Send one multicast request and count per-token results."""
    message = messaging.MulticastMessage(tokens=list(tokens), notification=_notification(payload), data=dict(payload.data))
    response = self._with_retry(lambda: messaging.send_each_for_multicast(message, app=self._app))

    # Per-token failures come back inside the batch response rather than as exceptions.
    invalid_tokens = tuple(token for token, result in zip(tokens, response.responses) if not result.success and isinstance(result.exception, _INVALID_TOKEN_ERRORS))
    if response.failure_count:
      logger.info("Multicast partially failed success=%d failure=%d invalid=%d", response.success_count, response.failure_count, len(invalid_tokens))
    return SendReport(success_count=response.success_count, failure_count=response.failure_count, invalid_tokens=invalid_tokens)

  def send_to_one(self, token: str, payload: NotificationPayload) -> SendReport:
    """Send a payload to a single registration token."""
    message = messaging.Message(token=token, notification=_notification(payload), data=dict(payload.data))
    try:
      self._with_retry(lambda: messaging.send(message, app=self._app))
    except NotificationProviderError as exc:
      if isinstance(exc.__cause__, _INVALID_TOKEN_ERRORS):
        logger.info("Push token is no longer registered; reporting it as invalid")
        return SendReport(success_count=0, failure_count=1, invalid_tokens=(token,))
      raise

    return SendReport(success_count=1, failure_count=0)

  def _with_retry(self, call: Callable[[], T]) -> T:
    """Run a provider call, backing off briefly on transient failures."""
    attempts = len(self._backoff_seconds) + 1
    for attempt in range(attempts):
      try:
        return call()
      except _TRANSIENT_ERRORS as exc:
        if attempt < len(self._backoff_seconds):
          # Back off briefly to avoid amplifying transient provider incidents.
          logger.warning("Transient push provider failure attempt=%d/%d code=%s", attempt + 1, attempts, exc.code)
          time.sleep(self._backoff_seconds[attempt])
          continue

        raise TransientPushProviderError(f"Transient push provider failure after retries (code={exc.code})") from exc
      except firebase_exceptions.FirebaseError as exc:
        raise NotificationProviderError(f"Push delivery failed (code={exc.code}): {exc}") from exc

    raise TransientPushProviderError("Push delivery failed with no attempts made")


class NullPushSender(PushSender):
  """No-op push sender used when push notifications are disabled or unconfigured."""

  def send_to_many(self, tokens: Sequence[str], payload: NotificationPayload) -> SendReport:
    """Drop the notification while recording a debug log."""
    logger.debug("Push notifications disabled; dropping multicast tokens=%d title=%s", len(tokens), payload.title)
    return SendReport(success_count=0, failure_count=0)

  def send_to_one(self, token: str, payload: NotificationPayload) -> SendReport:
    """Drop the notification while recording a debug log."""
    logger.debug("Push notifications disabled; dropping single send title=%s", payload.title)
    return SendReport(success_count=0, failure_count=0)


def _notification(payload: NotificationPayload) -> messaging.Notification:
  return messaging.Notification(title=payload.title, body=payload.body)
