import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from notifier.core.firebase import initialize_firebase
from notifier.core.logging import _initialize_logging


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
  """Set up logging and Firebase before the first trigger arrives."""
  from notifier.config import get_settings

  settings = get_settings()
  logger = logging.getLogger("notifier.core.lifespan")

  try:
    _initialize_logging(settings)
    logger.info("Startup complete - logging verified.")
  except Exception:
    # Keep serving with default logging; the trigger endpoints still work.
    logger.warning("Initial logging setup failed; continuing with default handlers.", exc_info=True)

  # Initialize Firebase before handling requests.
  initialize_firebase()

  if not settings.task_secret:
    logger.warning("NOTIFIER_TASK_SECRET is not set; internal trigger endpoints will reject all calls.")

  yield
