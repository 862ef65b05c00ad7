# storefront/main.py
from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from storefront import config
from storefront.db import init_db
from storefront.errors import ApiError, InternalError
from storefront.responses import error_response

# Routers
from storefront.routers.products import router as products_router
from storefront.routers.system import router as system_router
from storefront.routers.users import router as users_router


logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
)
log = logging.getLogger("storefront")

app = FastAPI(title="Storefront API", version=config.API_VERSION)

# ==================== MIDDLEWARES ====================

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    response = await call_next(request)
    log.info("%s %s -> %s", request.method, request.url.path, response.status_code)
    return response


# ==================== ERRORES ====================

@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError):
    if exc.status_code >= 500:
        log.error("%s %s falló: %s", request.method, request.url.path, exc.message)
    return error_response(exc.message, exc.status_code, error=exc.error)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = "Invalid request body"
    if errors:
        first = errors[0]
        field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        if field:
            message = f"Invalid value for '{field}': {first.get('msg', 'invalid')}"
    return error_response(message, 400)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    message = "Route not found" if exc.status_code == 404 else str(exc.detail)
    return error_response(message, exc.status_code)


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    log.exception("Error de base de datos en %s %s", request.method, request.url.path)
    err = InternalError("Database error", error=type(exc).__name__)
    return error_response(err.message, err.status_code, error=err.error)


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    log.exception("Error no controlado en %s %s", request.method, request.url.path)
    err = InternalError(error=str(exc))
    return error_response(err.message, err.status_code, error=err.error)


# ==================== ROUTERS ====================

app.include_router(system_router, prefix=config.API_PREFIX)
app.include_router(users_router, prefix=config.API_PREFIX)
app.include_router(products_router, prefix=config.API_PREFIX)


# ==================== CICLO DE VIDA ====================

@app.on_event("startup")
async def on_startup():
    log.info("Creando tablas de base de datos (users, products, categories, orders...)")
    init_db()
    log.info("Storefront API lista en %s", config.API_PREFIX)


@app.on_event("shutdown")
async def on_shutdown():
    log.info("Apagando Storefront API...")


# Arranque directo opcional: python -m storefront.main
if __name__ == "__main__":
    import uvicorn
    uvicorn.run("storefront.main:app", host="0.0.0.0", port=8000, reload=True)
