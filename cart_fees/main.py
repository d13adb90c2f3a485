# Load environment variables FIRST, before any module imports that need them
from dotenv import load_dotenv
load_dotenv()

import logging
import uuid
from typing import Dict

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.middleware.base import BaseHTTPMiddleware

from . import config
from .logging_config import setup_logging
from .routes import (
    admin_fees_router,
    admin_orders_router,
    admin_tax_rates_router,
    checkout_router,
    store_api_router,
)
from .routes.dependencies import limiter

# Configure logging at module load time
setup_logging()

logger = logging.getLogger(__name__)


app = FastAPI(
    title="Cart Fees API",
    description="Configurable cart fees with tax-inclusive pricing and optional fee selection",
    version="1.0.0",
    openapi_tags=[
        {"name": "Health", "description": "Health check endpoints"},
        {"name": "Checkout", "description": "Classic checkout fee selection and orders"},
        {"name": "Store API", "description": "Block checkout extension data and updates"},
        {"name": "Admin - Fees", "description": "Fee configuration editor"},
        {"name": "Admin - Tax Rates", "description": "Tax rate table"},
        {"name": "Admin - Orders", "description": "Orders and applied fees"},
    ],
)


# ---------- Request ID Middleware ----------
# Adds a unique request ID to each request for log correlation

class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Adds a request ID to request.state.request_id and the X-Request-ID
    response header. An incoming X-Request-ID is reused.
    """

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id

        response = await call_next(request)

        response.headers["X-Request-ID"] = request_id
        return response


app.add_middleware(RequestIDMiddleware)

# Rate limiting for the public toggle endpoints
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(checkout_router)
app.include_router(store_api_router)
app.include_router(admin_fees_router)
app.include_router(admin_tax_rates_router)
app.include_router(admin_orders_router)


@app.get("/health", tags=["Health"])
def health() -> Dict[str, str]:
    return {"status": "ok"}


logger.debug("Cart Fees API initialized (tax enabled: %s)", config.TAX_ENABLED)
