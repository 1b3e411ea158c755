"""Internal endpoints called by document-change triggers."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Path

from notifier.api.deps import get_event_router, require_task_secret
from notifier.notifications.contracts import DispatchOutcome
from notifier.notifications.dispatcher import summarize
from notifier.notifications.router import EventRouter
from notifier.schema.triggers import DispatchResponse, OfferDocument, OrderDocument, OrderUpdate

router = APIRouter(prefix="/events", tags=["events"], dependencies=[Depends(require_task_secret)])
logger = logging.getLogger(__name__)

DocumentId = Annotated[str, Path(min_length=1, max_length=1500)]


def _response(outcomes: list[DispatchOutcome]) -> DispatchResponse:
  return DispatchResponse(status="dispatched" if outcomes else "skipped", **summarize(outcomes))


@router.post("/orders/{order_id}/created")
async def order_created(order_id: DocumentId, document: OrderDocument, event_router: Annotated[EventRouter, Depends(get_event_router)]) -> DispatchResponse:
  """Notify every admin device about a new order."""
  logger.info("Received order created trigger order_id=%s", order_id)
  return _response(await event_router.handle(document.to_event(order_id)))


@router.post("/orders/{order_id}/updated")
async def order_updated(order_id: DocumentId, update: OrderUpdate, event_router: Annotated[EventRouter, Depends(get_event_router)]) -> DispatchResponse:
  """Notify the order's owner when its status moves."""
  logger.info("Received order updated trigger order_id=%s", order_id)
  return _response(await event_router.handle(update.to_event(order_id)))


@router.post("/offers/{offer_id}/created")
async def offer_created(offer_id: DocumentId, document: OfferDocument, event_router: Annotated[EventRouter, Depends(get_event_router)]) -> DispatchResponse:
  """Broadcast an active special offer to every user device."""
  logger.info("Received offer created trigger offer_id=%s", offer_id)
  return _response(await event_router.handle(document.to_event(offer_id)))
