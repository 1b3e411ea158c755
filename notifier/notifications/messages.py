"""Render push payloads for domain events.

Every function here is pure: it maps an event to a `NotificationPayload`, or to
`None` when the event should not produce a notification at all.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from notifier.notifications.contracts import NotificationPayload
from notifier.notifications.events import DomainEvent, OfferCreated, OrderCreated, OrderStatus, OrderStatusChanged

CLICK_ACTION = "FLUTTER_NOTIFICATION_CLICK"
DEFAULT_OFFER_BODY = "Check out our special offer!"

# Status-specific copy; adding a status here is enough to start notifying on it.
STATUS_MESSAGES: dict[str, tuple[str, str]] = {
  OrderStatus.PREPARING.value: ("👨‍🍳 Order is Being Prepared!", "Your delicious meal is being cooked with care."),
  OrderStatus.ON_THE_WAY.value: ("🚗 Order is On the Way!", "Your food is heading to you. Get ready!"),
  OrderStatus.DELIVERED.value: ("✅ Order Delivered!", "Your order has been delivered. Enjoy your meal!"),
  OrderStatus.CANCELLED.value: ("❌ Order Cancelled", "Your order has been cancelled."),
}


def format_naira(total: float) -> str:
  """Format an order total the way the mobile apps display it; halves round away from zero."""
  rounded = Decimal(str(total)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
  return f"₦{rounded}"


def format_discount(discount: str | float | int | None) -> str:
  """Render a discount as an FCM data string; whole floats drop the trailing '.0'."""
  if not discount:
    return ""
  if isinstance(discount, float) and discount.is_integer():
    return str(int(discount))
  return str(discount)


def skip_reason(event: DomainEvent) -> str | None:
  """Return why an event produces no notification, or None when it should notify."""
  if isinstance(event, OrderStatusChanged):
    if event.previous_status == event.new_status:
      return "no_status_change"
    if event.new_status not in STATUS_MESSAGES:
      return "unrecognized_status"
  if isinstance(event, OfferCreated) and not event.is_active:
    return "inactive_offer"
  return None


def build_message(event: DomainEvent) -> NotificationPayload | None:
  """Build the notification payload for an event."""
  if skip_reason(event) is not None:
    return None

  if isinstance(event, OrderCreated):
    return NotificationPayload(
      title="🔔 New Order Received!",
      body=f"Order from {event.user_name} - {format_naira(event.total)}",
      data={"orderId": event.order_id, "type": "new_order", "click_action": CLICK_ACTION},
    )

  if isinstance(event, OrderStatusChanged):
    title, body = STATUS_MESSAGES[event.new_status]
    return NotificationPayload(title=title, body=body, data={"orderId": event.order_id, "status": event.new_status, "type": "order_status", "click_action": CLICK_ACTION})

  if isinstance(event, OfferCreated):
    return NotificationPayload(
      title=f"🎉 {event.title}",
      body=event.description or DEFAULT_OFFER_BODY,
      data={"offerId": event.offer_id, "type": "special_offer", "discount": format_discount(event.discount), "click_action": CLICK_ACTION},
    )

  raise TypeError(f"Unsupported event type: {type(event).__name__}")
