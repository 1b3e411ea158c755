from __future__ import annotations

import pytest

from notifier.notifications.events import OfferCreated, OrderCreated, OrderStatusChanged
from notifier.notifications.messages import CLICK_ACTION, STATUS_MESSAGES, build_message, format_discount, format_naira, skip_reason


def test_order_created_body_formats_total_without_decimals():
  payload = build_message(OrderCreated(order_id="o1", user_name="Ada", total=1500))

  assert payload is not None
  assert payload.title == "🔔 New Order Received!"
  assert payload.body == "Order from Ada - ₦1500"
  assert dict(payload.data) == {"orderId": "o1", "type": "new_order", "click_action": CLICK_ACTION}


@pytest.mark.parametrize(("total", "expected"), [(2.5, "₦3"), (1500.5, "₦1501"), (0.5, "₦1"), (1499.49, "₦1499"), (1500.0, "₦1500")])
def test_format_naira_rounds_halves_up(total, expected):
  assert format_naira(total) == expected


def test_order_created_body_rounds_half_naira_up():
  payload = build_message(OrderCreated(order_id="o1", user_name="Ada", total=1500.5))

  assert payload is not None
  assert payload.body == "Order from Ada - ₦1501"


def test_order_created_rounds_fractional_total():
  payload = build_message(OrderCreated(order_id="o1", user_name="Ada", total=2499.7))

  assert payload is not None
  assert payload.body == "Order from Ada - ₦2500"


@pytest.mark.parametrize("status", sorted(STATUS_MESSAGES))
def test_status_change_uses_status_table(status):
  payload = build_message(OrderStatusChanged(order_id="o9", user_id="u1", previous_status="pending", new_status=status))

  assert payload is not None
  assert (payload.title, payload.body) == STATUS_MESSAGES[status]
  assert dict(payload.data) == {"orderId": "o9", "status": status, "type": "order_status", "click_action": CLICK_ACTION}


def test_delivered_copy_matches_mobile_catalog():
  payload = build_message(OrderStatusChanged(order_id="o9", user_id="u1", previous_status="on_the_way", new_status="delivered"))

  assert payload is not None
  assert payload.title == "✅ Order Delivered!"
  assert payload.body == "Your order has been delivered. Enjoy your meal!"


@pytest.mark.parametrize("status", ["preparing", "delivered", "pending", None])
def test_unchanged_status_is_skipped(status):
  event = OrderStatusChanged(order_id="o1", user_id="u1", previous_status=status, new_status=status)

  assert build_message(event) is None
  assert skip_reason(event) == "no_status_change"


@pytest.mark.parametrize("status", ["pending", "refunded", "", None])
def test_unrecognized_status_is_skipped(status):
  event = OrderStatusChanged(order_id="o1", user_id="u1", previous_status="preparing", new_status=status)

  assert build_message(event) is None
  assert skip_reason(event) == "unrecognized_status"


def test_inactive_offer_is_skipped():
  event = OfferCreated(offer_id="x", title="Half price", is_active=False)

  assert build_message(event) is None
  assert skip_reason(event) == "inactive_offer"


def test_active_offer_payload():
  payload = build_message(OfferCreated(offer_id="off-1", title="Half price", description="All pizzas 50% off", discount=50, is_active=True))

  assert payload is not None
  assert payload.title == "🎉 Half price"
  assert payload.body == "All pizzas 50% off"
  assert dict(payload.data) == {"offerId": "off-1", "type": "special_offer", "discount": "50", "click_action": CLICK_ACTION}


def test_active_offer_falls_back_when_description_and_discount_missing():
  payload = build_message(OfferCreated(offer_id="off-2", title="Weekend deal", description="", discount=None, is_active=True))

  assert payload is not None
  assert payload.body == "Check out our special offer!"
  assert payload.data["discount"] == ""


@pytest.mark.parametrize(("discount", "expected"), [(20.0, "20"), (12.5, "12.5"), (15, "15"), ("10%", "10%"), (0, ""), (None, "")])
def test_format_discount_renders_client_strings(discount, expected):
  assert format_discount(discount) == expected


def test_whole_float_discount_drops_trailing_zero():
  payload = build_message(OfferCreated(offer_id="off-3", title="Deal", discount=20.0, is_active=True))

  assert payload is not None
  assert payload.data["discount"] == "20"


def test_payload_data_is_read_only():
  payload = build_message(OrderCreated(order_id="o1", user_name="Ada", total=10))

  assert payload is not None
  with pytest.raises(TypeError):
    payload.data["type"] = "changed"  # type: ignore[index]
