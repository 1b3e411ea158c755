"""Contracts for push notification fan-out."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Protocol

from notifier.notifications.events import DispatchTarget


@dataclass(frozen=True)
class NotificationPayload:
  """Represents a push notification payload shared by every batch of one dispatch."""

  title: str
  body: str
  data: Mapping[str, str] = field(default_factory=dict)

  def __post_init__(self) -> None:
    # Freeze the data mapping so a payload cannot drift between batches.
    object.__setattr__(self, "data", MappingProxyType({str(k): str(v) for k, v in self.data.items()}))


@dataclass(frozen=True)
class SendReport:
  """Provider-side result for one delivery call."""

  success_count: int
  failure_count: int
  invalid_tokens: tuple[str, ...] = ()


@dataclass(frozen=True)
class DispatchOutcome:
  """Result of delivering one batch of tokens."""

  batch_index: int
  attempted_count: int
  success_count: int
  failure_count: int
  error: str | None = None
  invalid_tokens: tuple[str, ...] = ()

  @property
  def failed(self) -> bool:
    return self.error is not None


class NotificationError(Exception):
  """Base class for all notification delivery failures."""


class ResolutionError(NotificationError):
  """Exception raised when recipient tokens cannot be loaded from storage."""


class NotificationProviderError(NotificationError):
  """Exception raised when the push provider rejects or fails a delivery call."""


class TransientPushProviderError(NotificationProviderError):
  """Exception raised when transient push provider failures exhaust retries."""


class PushSender(Protocol):
  """Delivery contract for the push provider."""

  def send_to_many(self, tokens: Sequence[str], payload: NotificationPayload) -> SendReport:
    """Send one payload to up to one provider batch of tokens."""

  def send_to_one(self, token: str, payload: NotificationPayload) -> SendReport:
    """Send one payload to a single device token."""


class TokenSource(Protocol):
  """Lookup contract for device push tokens."""

  async def resolve(self, target: DispatchTarget) -> list[str]:
    """Return the current tokens for a target; an empty list means no recipients."""

  async def remove_tokens(self, target: DispatchTarget, tokens: Sequence[str]) -> int:
    """Delete token registrations the provider reported as invalid."""
