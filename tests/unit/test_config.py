from __future__ import annotations

import os
from unittest.mock import patch

import pytest

from notifier.config import get_settings
from notifier.notifications.factory import build_event_router, build_push_sender
from notifier.notifications.push_sender import FcmPushSender, NullPushSender
from notifier.utils.env import load_env_file


def test_defaults_match_provider_limits():
  with patch.dict(os.environ, {}, clear=True):
    settings = get_settings()

  assert settings.push_batch_size == 500
  assert settings.push_max_concurrency == 1
  assert settings.retention_days == 30
  assert settings.admin_tokens_collection == "admin_tokens"
  assert settings.user_tokens_collection == "user_tokens"
  assert settings.notifications_collection == "notifications"
  assert settings.push_enabled is True
  assert settings.task_secret is None


@pytest.mark.parametrize(("name", "value"), [("NOTIFIER_PUSH_BATCH_SIZE", "501"), ("NOTIFIER_PUSH_BATCH_SIZE", "0"), ("NOTIFIER_PUSH_MAX_CONCURRENCY", "0"), ("NOTIFIER_RETENTION_DAYS", "-1"), ("NOTIFIER_USER_TOKENS_COLLECTION", "users/tokens"), ("NOTIFIER_PUSH_BATCH_SIZE", "lots"), ("NOTIFIER_RETENTION_DAYS", "30d"), ("NOTIFIER_LOG_MAX_BYTES", "5MB")])
def test_invalid_values_are_rejected(name, value):
  with patch.dict(os.environ, {name: value}, clear=True), pytest.raises(ValueError, match=name):
    get_settings()


def test_push_sender_requires_firebase_project():
  with patch.dict(os.environ, {"NOTIFIER_PUSH_ENABLED": "true"}, clear=True):
    assert isinstance(build_push_sender(get_settings()), NullPushSender)

  get_settings.cache_clear()
  with patch.dict(os.environ, {"FIREBASE_PROJECT_ID": "demo"}, clear=True):
    assert isinstance(build_push_sender(get_settings()), FcmPushSender)

  get_settings.cache_clear()
  with patch.dict(os.environ, {"FIREBASE_PROJECT_ID": "demo", "NOTIFIER_PUSH_ENABLED": "off"}, clear=True):
    assert isinstance(build_push_sender(get_settings()), NullPushSender)


def test_build_event_router_does_not_touch_firestore():
  with patch.dict(os.environ, {"NOTIFIER_PUSH_BATCH_SIZE": "250"}, clear=True), patch("notifier.notifications.factory.get_firestore_client") as client_factory:
    build_event_router(get_settings())

  client_factory.assert_not_called()


def test_load_env_file_respects_existing_values(tmp_path):
  env_file = tmp_path / ".env"
  env_file.write_text('# comment\nexport NOTIFIER_ENV="staging"\nNOTIFIER_TASK_SECRET=from-file\nbroken line\n', encoding="utf-8")

  with patch.dict(os.environ, {"NOTIFIER_TASK_SECRET": "from-env"}, clear=True):
    load_env_file(env_file)
    assert os.environ["NOTIFIER_ENV"] == "staging"
    assert os.environ["NOTIFIER_TASK_SECRET"] == "from-env"
