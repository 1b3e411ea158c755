"""Request models for document-change triggers.

Trigger bodies carry the Firestore document fields as stored by the mobile
apps (camelCase). Unknown fields are ignored because full documents are
forwarded.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from notifier.notifications.events import OfferCreated, OrderCreated, OrderStatusChanged


class OrderDocument(BaseModel):
  """Fields of a newly created order document."""

  model_config = ConfigDict(populate_by_name=True)

  user_name: str = Field(alias="userName", min_length=1)
  total: float = Field(ge=0)

  def to_event(self, order_id: str) -> OrderCreated:
    return OrderCreated(order_id=order_id, user_name=self.user_name, total=self.total)


class OrderSnapshot(BaseModel):
  """Status-relevant fields of an order document at one point in time."""

  model_config = ConfigDict(populate_by_name=True)

  status: str | None = None
  user_id: str | None = Field(default=None, alias="userId")


class OrderUpdate(BaseModel):
  """Before and after snapshots of an updated order document."""

  before: OrderSnapshot
  after: OrderSnapshot

  @field_validator("after")
  @classmethod
  def validate_after(cls, value: OrderSnapshot) -> OrderSnapshot:
    """The current document must name its owner to address the status update."""
    if not value.user_id:
      raise ValueError("after.userId is required.")
    return value

  def to_event(self, order_id: str) -> OrderStatusChanged:
    return OrderStatusChanged(order_id=order_id, user_id=self.after.user_id or "", previous_status=self.before.status, new_status=self.after.status)


class OfferDocument(BaseModel):
  """Fields of a newly created special offer document."""

  model_config = ConfigDict(populate_by_name=True)

  title: str = ""
  description: str | None = None
  discount: str | float | int | None = None
  is_active: bool = Field(default=False, alias="isActive")

  def to_event(self, offer_id: str) -> OfferCreated:
    return OfferCreated(offer_id=offer_id, title=self.title, description=self.description, discount=self.discount, is_active=self.is_active)


class DispatchResponse(BaseModel):
  """Summary returned to the trigger caller."""

  status: str
  batches: int = 0
  attempted: int = 0
  succeeded: int = 0
  failed: int = 0
  failed_batches: list[int] = Field(default_factory=list)
