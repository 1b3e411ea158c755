"""Factory helpers for notification services."""

from __future__ import annotations

from notifier.config import Settings
from notifier.core.firebase import get_firestore_client
from notifier.notifications.contracts import PushSender
from notifier.notifications.dispatcher import BatchDispatcher
from notifier.notifications.push_sender import FcmPushSender, NullPushSender
from notifier.notifications.retention import RetentionSweeper
from notifier.notifications.router import EventRouter
from notifier.notifications.token_source import FirestoreTokenSource


def build_push_sender(settings: Settings) -> PushSender:
  """Pick the push sender for the configured environment."""
  # FCM needs an initialized Firebase app; without a project there is nothing to send through.
  if settings.push_enabled and settings.firebase_project_id:
    return FcmPushSender()
  return NullPushSender()


def build_event_router(settings: Settings) -> EventRouter:
  """Construct an event router based on environment configuration."""
  token_source = FirestoreTokenSource(client_factory=get_firestore_client, admin_collection=settings.admin_tokens_collection, user_collection=settings.user_tokens_collection)
  dispatcher = BatchDispatcher(build_push_sender(settings), batch_size=settings.push_batch_size, max_concurrency=settings.push_max_concurrency)
  return EventRouter(token_source=token_source, dispatcher=dispatcher, prune_invalid_tokens=settings.prune_invalid_tokens)


def build_retention_sweeper(settings: Settings) -> RetentionSweeper:
  """Construct the notification retention job."""
  return RetentionSweeper(client_factory=get_firestore_client, collection=settings.notifications_collection, retention_days=settings.retention_days)
