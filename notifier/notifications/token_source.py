"""Device token lookups backed by Firestore."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from google.api_core.exceptions import GoogleAPIError
from google.cloud.firestore import Client as FirestoreClient
from google.cloud.firestore_v1.base_query import FieldFilter
from starlette.concurrency import run_in_threadpool

from notifier.core.firebase import delete_in_batches
from notifier.notifications.contracts import ResolutionError, TokenSource
from notifier.notifications.events import AllAdmins, AllUsers, DispatchTarget, SingleUser

logger = logging.getLogger(__name__)


def _extract_token(document: Mapping[str, Any] | None) -> str | None:
  """Return the token field when it is a non-empty string."""
  if not document:
    return None
  token = document.get("token")
  if isinstance(token, str) and token.strip():
    return token
  return None


class FirestoreTokenSource(TokenSource):
  """Resolve tokens from the admin and user token collections."""

  def __init__(self, *, client_factory: Callable[[], FirestoreClient | None], admin_collection: str = "admin_tokens", user_collection: str = "user_tokens") -> None:
    self._client_factory = client_factory
    self._admin_collection = admin_collection
    self._user_collection = user_collection

  async def resolve(self, target: DispatchTarget) -> list[str]:
    """Return the tokens registered for a target."""
    return await run_in_threadpool(self._resolve_sync, target)

  async def remove_tokens(self, target: DispatchTarget, tokens: Sequence[str]) -> int:
    """Delete registrations holding any of `tokens`; returns the number of documents removed."""
    if not tokens:
      return 0
    return await run_in_threadpool(self._remove_sync, target, list(tokens))

  def _client(self) -> FirestoreClient:
    client = self._client_factory()
    if client is None:
      raise ResolutionError("Firestore client is not configured.")
    return client

  def _collection_for(self, target: DispatchTarget) -> str:
    if isinstance(target, AllAdmins):
      return self._admin_collection
    if isinstance(target, (AllUsers, SingleUser)):
      return self._user_collection
    raise TypeError(f"Unsupported dispatch target: {type(target).__name__}")

  def _resolve_sync(self, target: DispatchTarget) -> list[str]:
    client = self._client()
    collection = self._collection_for(target)
    try:
      if isinstance(target, SingleUser):
        # User tokens are keyed by user id, so a single read is enough.
        snapshot = client.collection(collection).document(target.user_id).get()
        if not snapshot.exists:
          logger.info("No token found for user: %s", target.user_id)
          return []
        token = _extract_token(snapshot.to_dict())
        return [token] if token else []

      return [token for token in (_extract_token(doc.to_dict()) for doc in client.collection(collection).stream()) if token]
    except (GoogleAPIError, ValueError) as exc:
      # ValueError covers malformed document paths such as user ids containing '/'.
      raise ResolutionError(f"Failed to load tokens from {collection}: {exc}") from exc

  def _remove_sync(self, target: DispatchTarget, tokens: list[str]) -> int:
    client = self._client()
    collection = self._collection_for(target)
    try:
      if isinstance(target, SingleUser):
        reference = client.collection(collection).document(target.user_id)
        snapshot = reference.get()
        # Only delete when the stored token is still the stale one; the device may have re-registered.
        if snapshot.exists and _extract_token(snapshot.to_dict()) in tokens:
          reference.delete()
          return 1
        return 0

      references = []
      for token in dict.fromkeys(tokens):
        query = client.collection(collection).where(filter=FieldFilter("token", "==", token))
        references.extend(doc.reference for doc in query.stream())
      return delete_in_batches(client, references)
    except (GoogleAPIError, ValueError) as exc:
      raise ResolutionError(f"Failed to remove tokens from {collection}: {exc}") from exc

