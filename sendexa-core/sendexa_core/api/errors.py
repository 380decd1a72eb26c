"""
HTTP Error Mapping
==================
Turns OTP errors into JSON responses. This is the only place error types
are mapped to HTTP status codes.
"""

from typing import Dict

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
import structlog

from sendexa_core.errors import OTPError, OTPErrorType, ValidationError

logger = structlog.get_logger(__name__)

HTTP_STATUS: Dict[OTPErrorType, int] = {
    OTPErrorType.OTP_ALREADY_ACTIVE: 429,
    OTPErrorType.SENDER_ID_ERROR: 502,
    OTPErrorType.INVALID_OTP: 400,
    OTPErrorType.EXPIRED_OTP: 400,
    OTPErrorType.MAX_ATTEMPTS_EXCEEDED: 400,
    OTPErrorType.ALREADY_USED: 400,
    OTPErrorType.RESEND_COOLDOWN: 429,
    OTPErrorType.INVALID_REQUEST: 400,
    OTPErrorType.SERVICE_UNAVAILABLE: 503,
    OTPErrorType.CODE_NOT_FOUND: 404,
}


def error_response(exc: OTPError) -> JSONResponse:
    headers = {}
    if isinstance(exc.details, dict) and exc.details.get("retry_after"):
        headers["Retry-After"] = str(exc.details["retry_after"])

    return JSONResponse(
        status_code=HTTP_STATUS.get(exc.error_type, 400),
        content=exc.to_dict(),
        headers=headers or None,
    )


async def otp_error_handler(request: Request, exc: OTPError) -> JSONResponse:
    logger.info(
        "OTP request failed",
        path=request.url.path,
        error_type=exc.error_type.value,
    )
    return error_response(exc)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = [".".join(str(part) for part in err.get("loc", ())[1:]) for err in exc.errors()]
    missing = ", ".join(f for f in fields if f) or "body"
    return error_response(ValidationError(message=f"Invalid or missing fields: {missing}"))


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(OTPError, otp_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
