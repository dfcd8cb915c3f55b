"""Rentals FastAPI application.

Processes order and stage commands synchronously via HTTP. Every request
runs inside the rentals domain context.

Usage:
    uvicorn src.app:app --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# Events are processed sync in every environment, so handlers and projectors
# run in this process right after the unit of work commits.
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from rentals.domain import rentals  # noqa: E402
from rentals.utils.logging import clear_context, configure_logging

configure_logging()
rentals.init()

# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Rentals API",
    description="Rental orders and the five-stage hand-off workflow",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the rentals domain context and reset log context per request."""
    clear_context()
    with rentals.domain_context():
        response = await call_next(request)
    return response


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from rentals.api.errors import install_error_handlers  # noqa: E402
from rentals.api.routes import order_router  # noqa: E402

app.include_router(order_router)
install_error_handlers(app)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(content={"status": "ok", "domain": {"name": rentals.name}})
