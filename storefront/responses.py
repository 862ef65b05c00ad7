# storefront/responses.py
from typing import Any, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def envelope(success: bool, message: str, data: Any = None, error: Optional[str] = None) -> dict:
    body = {"success": success, "message": message}
    if data is not None:
        body["data"] = jsonable_encoder(data)
    if error is not None:
        body["error"] = error
    return body


def success_response(message: str, data: Any = None, status_code: int = 200) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=envelope(True, message, data=data))


def error_response(message: str, status_code: int, error: Optional[str] = None) -> JSONResponse:
    # data nunca acompaña a un fallo
    return JSONResponse(status_code=status_code, content=envelope(False, message, error=error))
