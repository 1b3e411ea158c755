from __future__ import annotations

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError

from notifier import __version__
from notifier.api.routes import events, tasks
from notifier.core.exceptions import global_exception_handler, http_exception_handler, request_validation_exception_handler
from notifier.core.lifespan import lifespan
from notifier.core.middleware import RequestLoggingMiddleware

app = FastAPI(lifespan=lifespan, docs_url=None, redoc_url=None, openapi_url=None)

# Add exception handlers
app.add_exception_handler(Exception, global_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, request_validation_exception_handler)

# Add middleware
app.add_middleware(RequestLoggingMiddleware)


@app.get("/health", include_in_schema=False)
async def health_check() -> dict[str, str]:
  """Return a simple health status."""
  return {"status": "ok", "version": __version__}


app.include_router(events.router, prefix="/internal")
app.include_router(tasks.router, prefix="/internal")
