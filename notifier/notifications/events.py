"""Domain events and dispatch targets."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union


class OrderStatus(str, Enum):
  PREPARING = "preparing"
  ON_THE_WAY = "on_the_way"
  DELIVERED = "delivered"
  CANCELLED = "cancelled"


@dataclass(frozen=True)
class OrderCreated:
  """A new order document was written."""

  order_id: str
  user_name: str
  total: float


@dataclass(frozen=True)
class OrderStatusChanged:
  """An existing order document changed; statuses are raw document values."""

  order_id: str
  user_id: str
  previous_status: str | None
  new_status: str | None


@dataclass(frozen=True)
class OfferCreated:
  """A special offer document was written."""

  offer_id: str
  title: str
  description: str | None = None
  discount: str | float | int | None = None
  is_active: bool = False


DomainEvent = Union[OrderCreated, OrderStatusChanged, OfferCreated]


@dataclass(frozen=True)
class SingleUser:
  user_id: str


@dataclass(frozen=True)
class AllAdmins:
  pass


@dataclass(frozen=True)
class AllUsers:
  pass


DispatchTarget = Union[SingleUser, AllAdmins, AllUsers]


def event_kind(event: DomainEvent) -> str:
  """Return a stable name for logging."""
  if isinstance(event, OrderCreated):
    return "order_created"
  if isinstance(event, OrderStatusChanged):
    return "order_status_changed"
  if isinstance(event, OfferCreated):
    return "offer_created"
  raise TypeError(f"Unsupported event type: {type(event).__name__}")
