# storefront/errors.py
from typing import Optional


class ApiError(Exception):
    """Base de todo fallo que se responde con un sobre de error."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None, error: Optional[str] = None):
        self.message = message or self.default_message
        self.error = error
        super().__init__(self.message)


class ValidationError(ApiError):
    status_code = 400
    default_message = "Invalid request"


class Conflict(ApiError):
    # Duplicados (email, sku) se reportan como 400, no 409
    status_code = 400
    default_message = "Resource already exists"


class Unauthenticated(ApiError):
    status_code = 401
    default_message = "Access denied. No token provided."


class InvalidToken(ApiError):
    status_code = 403
    default_message = "Invalid or expired token."


class Forbidden(ApiError):
    status_code = 403
    default_message = "Insufficient privileges"


class NotFound(ApiError):
    status_code = 404
    default_message = "Not found"


class InternalError(ApiError):
    status_code = 500


class InvalidCredentials(Unauthenticated):
    # mismo mensaje para email inexistente y contraseña incorrecta
    default_message = "Invalid email or password"
