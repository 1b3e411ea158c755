"""Route domain events to their recipients and the batch dispatcher."""

from __future__ import annotations

import logging

from notifier.notifications.contracts import DispatchOutcome, NotificationError, TokenSource
from notifier.notifications.dispatcher import BatchDispatcher, summarize
from notifier.notifications.events import AllAdmins, AllUsers, DispatchTarget, DomainEvent, OfferCreated, OrderCreated, OrderStatusChanged, SingleUser, event_kind
from notifier.notifications.messages import build_message, skip_reason

logger = logging.getLogger(__name__)


def select_target(event: DomainEvent) -> DispatchTarget:
  """Pick who should hear about an event."""
  if isinstance(event, OrderCreated):
    return AllAdmins()
  if isinstance(event, OrderStatusChanged):
    return SingleUser(user_id=event.user_id)
  if isinstance(event, OfferCreated):
    return AllUsers()
  raise TypeError(f"Unsupported event type: {type(event).__name__}")


class EventRouter:
  """Bind each event kind to a target, a message and a dispatch."""

  def __init__(self, *, token_source: TokenSource, dispatcher: BatchDispatcher, prune_invalid_tokens: bool = False) -> None:
    self._token_source = token_source
    self._dispatcher = dispatcher
    self._prune_invalid_tokens = prune_invalid_tokens

  async def handle(self, event: DomainEvent) -> list[DispatchOutcome]:
    """Run one dispatch for an event. Never raises for resolution or delivery failures."""
    kind = event_kind(event)
    payload = build_message(event)
    if payload is None:
      logger.info("Skipping %s notification reason=%s", kind, skip_reason(event))
      return []

    target = select_target(event)
    try:
      tokens = await self._token_source.resolve(target)
    except NotificationError as exc:
      logger.error("Token resolution failed for %s target=%s: %s", kind, target, exc)
      return []

    if not tokens:
      logger.info("No tokens found for %s target=%s", kind, target)
      return []

    outcomes = await self._dispatcher.dispatch(payload, tokens, single_target=isinstance(target, SingleUser))
    logger.info("Dispatched %s notification %s", kind, summarize(outcomes))

    if self._prune_invalid_tokens:
      await self._prune(target, outcomes)
    return outcomes

  async def _prune(self, target: DispatchTarget, outcomes: list[DispatchOutcome]) -> None:
    invalid = [token for outcome in outcomes for token in outcome.invalid_tokens]
    if not invalid:
      return

    # Pruning is housekeeping; its failures must not change the dispatch result.
    try:
      removed = await self._token_source.remove_tokens(target, invalid)
      logger.info("Removed %d invalid push tokens target=%s", removed, target)
    except NotificationError as exc:
      logger.error("Failed removing invalid push tokens target=%s: %s", target, exc)
