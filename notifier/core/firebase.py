import logging
from collections.abc import Iterable
from typing import Any

import firebase_admin
from firebase_admin import credentials, firestore
from google.cloud.firestore import Client as FirestoreClient

from notifier.config import get_settings

logger = logging.getLogger(__name__)

# Firestore rejects write batches with more than 500 operations.
FIRESTORE_BATCH_LIMIT = 500


def initialize_firebase() -> None:
  """Initializes the Firebase Admin SDK."""
  if firebase_admin._apps:
    return

  settings = get_settings()
  if not settings.firebase_project_id:
    logger.warning("Firebase Project ID not set. Firebase Admin SDK not initialized.")
    return

  try:
    if settings.firebase_service_account_json_path:
      cred = credentials.Certificate(settings.firebase_service_account_json_path)
      firebase_admin.initialize_app(cred, {"projectId": settings.firebase_project_id})
    else:
      # Use default credentials (e.g. Google Application Default Credentials)
      firebase_admin.initialize_app(options={"projectId": settings.firebase_project_id})
    logger.info("Firebase Admin SDK initialized successfully.")
  except Exception as e:
    logger.error(f"Failed to initialize Firebase Admin SDK: {e}")


def get_firestore_client() -> FirestoreClient | None:
  """Returns a Firestore client instance. Lazily initializes if needed."""
  if not firebase_admin._apps:
    initialize_firebase()

  try:
    return firestore.client()
  except Exception as e:
    logger.error(f"Failed to get Firestore client: {e}")
    return None


def delete_in_batches(client: FirestoreClient, references: Iterable[Any]) -> int:
  """Delete document references with write batches capped at the Firestore limit."""
  deleted = 0
  batch = client.batch()
  pending = 0
  for reference in references:
    batch.delete(reference)
    pending += 1
    if pending == FIRESTORE_BATCH_LIMIT:
      batch.commit()
      deleted += pending
      batch = client.batch()
      pending = 0

  if pending:
    batch.commit()
    deleted += pending
  return deleted
