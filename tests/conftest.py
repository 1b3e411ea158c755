"""Test configuration for importing the application package."""

from __future__ import annotations

import sys
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
  sys.path.insert(0, str(ROOT))

import pytest  # noqa: E402

from notifier.config import get_settings  # noqa: E402
from notifier.notifications.contracts import NotificationPayload, NotificationProviderError, SendReport  # noqa: E402
from notifier.notifications.events import AllAdmins, AllUsers, SingleUser  # noqa: E402


class RecordingPushSender:
  """Push sender double that records calls and can fail chosen batches.

  `fail_batches` picks failures by call order; `fail_tokens` fails any batch holding one of those tokens.
  """

  def __init__(self, *, fail_batches: Sequence[int] = (), fail_tokens: Sequence[str] = (), invalid_tokens: Sequence[str] = ()) -> None:
    self.many_calls: list[tuple[list[str], NotificationPayload]] = []
    self.one_calls: list[tuple[str, NotificationPayload]] = []
    self._fail_batches = set(fail_batches)
    self._fail_tokens = set(fail_tokens)
    self._invalid_tokens = set(invalid_tokens)

  def send_to_many(self, tokens, payload):
    index = len(self.many_calls)
    self.many_calls.append((list(tokens), payload))
    if index in self._fail_batches:
      raise NotificationProviderError(f"batch {index} rejected")
    rejected = [token for token in tokens if token in self._fail_tokens]
    if rejected:
      raise NotificationProviderError(f"batch holding {rejected[0]} rejected")
    invalid = tuple(token for token in tokens if token in self._invalid_tokens)
    return SendReport(success_count=len(tokens) - len(invalid), failure_count=len(invalid), invalid_tokens=invalid)

  def send_to_one(self, token, payload):
    self.one_calls.append((token, payload))
    if token in self._invalid_tokens:
      return SendReport(success_count=0, failure_count=1, invalid_tokens=(token,))
    return SendReport(success_count=1, failure_count=0)


@pytest.fixture(autouse=True)
def _reset_settings_cache():
  get_settings.cache_clear()
  yield
  get_settings.cache_clear()


@pytest.fixture
def payload() -> NotificationPayload:
  return NotificationPayload(title="title", body="body", data={"type": "special_offer"})


@pytest.fixture
def push_sender() -> RecordingPushSender:
  return RecordingPushSender()


@pytest.fixture
def make_push_sender():
  return RecordingPushSender


class InMemoryTokenSource:
  """Token source double backed by an admin list and a user-to-token mapping."""

  def __init__(self, *, admin_tokens: Iterable[str] = (), user_tokens: Mapping[str, str] | None = None) -> None:
    self._admin_tokens = list(admin_tokens)
    self._user_tokens = dict(user_tokens or {})

  async def resolve(self, target):
    if isinstance(target, AllAdmins):
      return list(self._admin_tokens)
    if isinstance(target, AllUsers):
      return list(self._user_tokens.values())
    if isinstance(target, SingleUser):
      token = self._user_tokens.get(target.user_id)
      return [token] if token else []
    raise TypeError(f"Unsupported dispatch target: {type(target).__name__}")

  async def remove_tokens(self, target, tokens):
    stale = set(tokens)
    if isinstance(target, AllAdmins):
      before = len(self._admin_tokens)
      self._admin_tokens = [token for token in self._admin_tokens if token not in stale]
      return before - len(self._admin_tokens)

    removed = [user_id for user_id, token in self._user_tokens.items() if token in stale and (not isinstance(target, SingleUser) or user_id == target.user_id)]
    for user_id in removed:
      del self._user_tokens[user_id]
    return len(removed)


@pytest.fixture
def make_token_source():
  return InMemoryTokenSource
