# app/api/responses.py
from datetime import datetime, timezone
from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse


def _meta() -> dict:
    return {"timestamp": datetime.now(timezone.utc)}


def success(data: Any) -> dict:
    return {"success": True, "data": data, "meta": _meta()}


def error_response(
    code: str,
    message: str,
    status_code: int,
    details: dict | None = None,
    headers: dict | None = None,
) -> JSONResponse:
    body = {
        "success": False,
        "error": {
            "code": code,
            "message": message,
            "status_code": status_code,
            "details": details,
        },
        "meta": _meta(),
    }
    return JSONResponse(status_code=status_code, content=jsonable_encoder(body), headers=headers)
