"""Application configuration loaded from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from notifier.utils.env import default_env_path, load_env_file

load_env_file(default_env_path(), override=False)

# FCM rejects multicast requests with more than this many registration tokens.
PROVIDER_BATCH_CEILING = 500


@dataclass(frozen=True)
class Settings:
  """Typed settings for the notifier service."""

  environment: str
  debug: bool
  log_max_bytes: int
  log_backup_count: int
  log_http_4xx: bool
  firebase_project_id: str | None
  firebase_service_account_json_path: str | None
  push_enabled: bool
  push_batch_size: int
  push_max_concurrency: int
  prune_invalid_tokens: bool
  admin_tokens_collection: str
  user_tokens_collection: str
  notifications_collection: str
  retention_days: int
  task_secret: str | None


def _parse_bool(raw: str | None, *, default: bool = False) -> bool:
  """Parse a boolean-ish string from environment variables."""

  if raw is None or raw.strip() == "":
    return default

  normalized = raw.strip().lower()
  return normalized in {"1", "true", "yes", "on"}


def _optional_str(raw: str | None) -> str | None:
  if raw is None:
    return None
  value = raw.strip()
  if value == "":
    return None
  return value


def _collection_name(env_name: str, default: str) -> str:
  value = _optional_str(os.getenv(env_name)) or default
  # Firestore collection ids cannot contain path separators.
  if "/" in value:
    raise ValueError(f"{env_name} must be a top-level collection id without '/'.")
  return value


def _parse_int(env_name: str, default: int) -> int:
  """Read an integer environment variable, naming it when the value is not numeric."""
  raw = os.getenv(env_name)
  if raw is None or not raw.strip():
    return default
  try:
    return int(raw)
  except ValueError as exc:
    raise ValueError(f"{env_name} must be an integer, got {raw!r}.") from exc


@lru_cache(maxsize=1)
def get_settings() -> Settings:
  """Load settings once per process."""

  environment = os.getenv("NOTIFIER_ENV", "development").lower()
  debug = _parse_bool(os.getenv("NOTIFIER_DEBUG"))

  log_max_bytes = _parse_int("NOTIFIER_LOG_MAX_BYTES", 5242880)  # 5MB default
  if log_max_bytes <= 0:
    raise ValueError("NOTIFIER_LOG_MAX_BYTES must be a positive integer.")

  log_backup_count = _parse_int("NOTIFIER_LOG_BACKUP_COUNT", 10)
  if log_backup_count < 0:
    raise ValueError("NOTIFIER_LOG_BACKUP_COUNT must be zero or a positive integer.")

  # Allow opt-in logging of 4xx HTTPExceptions for diagnostics.
  log_http_4xx = _parse_bool(os.getenv("NOTIFIER_LOG_HTTP_4XX"))

  push_enabled = _parse_bool(os.getenv("NOTIFIER_PUSH_ENABLED"), default=True)
  push_batch_size = _parse_int("NOTIFIER_PUSH_BATCH_SIZE", PROVIDER_BATCH_CEILING)
  if not 1 <= push_batch_size <= PROVIDER_BATCH_CEILING:
    raise ValueError(f"NOTIFIER_PUSH_BATCH_SIZE must be between 1 and {PROVIDER_BATCH_CEILING}.")

  push_max_concurrency = _parse_int("NOTIFIER_PUSH_MAX_CONCURRENCY", 1)
  if push_max_concurrency < 1:
    raise ValueError("NOTIFIER_PUSH_MAX_CONCURRENCY must be a positive integer.")

  retention_days = _parse_int("NOTIFIER_RETENTION_DAYS", 30)
  if retention_days <= 0:
    raise ValueError("NOTIFIER_RETENTION_DAYS must be a positive integer.")

  return Settings(
    environment=environment,
    debug=debug,
    log_max_bytes=log_max_bytes,
    log_backup_count=log_backup_count,
    log_http_4xx=log_http_4xx,
    firebase_project_id=_optional_str(os.getenv("FIREBASE_PROJECT_ID")),
    firebase_service_account_json_path=_optional_str(os.getenv("FIREBASE_SERVICE_ACCOUNT_JSON_PATH")),
    push_enabled=push_enabled,
    push_batch_size=push_batch_size,
    push_max_concurrency=push_max_concurrency,
    prune_invalid_tokens=_parse_bool(os.getenv("NOTIFIER_PRUNE_INVALID_TOKENS")),
    admin_tokens_collection=_collection_name("NOTIFIER_ADMIN_TOKENS_COLLECTION", "admin_tokens"),
    user_tokens_collection=_collection_name("NOTIFIER_USER_TOKENS_COLLECTION", "user_tokens"),
    notifications_collection=_collection_name("NOTIFIER_NOTIFICATIONS_COLLECTION", "notifications"),
    retention_days=retention_days,
    task_secret=_optional_str(os.getenv("NOTIFIER_TASK_SECRET")),
  )
