from typing import Any, Optional

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def success_response(data: Any = None, status_code: int = 200, message: Optional[str] = None) -> JSONResponse:
  payload = {"success": True, "data": jsonable_encoder(data)}
  if message is not None:
    payload["message"] = message
  return JSONResponse(content=payload, status_code=status_code)


def error_response(message: str, status_code: int = 500, error: Optional[str] = None, **extra: Any) -> JSONResponse:
  payload = {"success": False, "message": message}
  if error is not None:
    payload["error"] = error
  payload.update(jsonable_encoder(extra))
  return JSONResponse(content=payload, status_code=status_code)
