# storefront/routers/system.py
import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront import config
from storefront.db import get_db, ping
from storefront.responses import error_response, success_response

router = APIRouter(tags=["System"])

STARTED_AT = time.monotonic()

ENDPOINTS = [
    "POST /users/register - Register new user",
    "POST /users/login - User login",
    "GET /users/profile - Get user profile (Auth required)",
    "PUT /users/profile - Update user profile (Auth required)",
    "GET /users - List users (Admin)",
    "PUT /users/:id - Update role / activation (Admin)",
    "GET /products - Browse all products",
    "GET /products/:id - View product details",
    "GET /products/category/:categoryId - Browse a category",
    "POST /products - Create product (Admin)",
    "PUT /products/:id - Update product (Admin)",
    "DELETE /products/:id - Deactivate product (Admin)",
    "DELETE /products/:id/permanent - Remove product permanently (Admin)",
    "GET /health - Health check",
]


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("")
def api_info():
    return success_response(
        "Storefront API v1",
        {
            "version": config.API_VERSION,
            "status": "active",
            "timestamp": _now(),
            "available_endpoints": ENDPOINTS,
        },
    )


@router.get("/health")
def health(db: Session = Depends(get_db)):
    if not ping(db):
        return error_response("Database connection failed", 503, error="database unreachable")
    return success_response(
        "Service healthy",
        {
            "status": "healthy",
            "timestamp": _now(),
            "uptime": round(time.monotonic() - STARTED_AT, 3),
            "database": "connected",
            "version": config.API_VERSION,
        },
    )
