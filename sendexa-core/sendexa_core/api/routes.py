"""
OTP Routes
==========
Request, verify and resend endpoints over an OTPService.
"""

from fastapi import APIRouter

from sendexa_core.service import OTPService

from .schemas import (
    CodeStatusResponse,
    ErrorResponse,
    OTPResponse,
    PhoneRequest,
    VerifyRequest,
)

_ERRORS = {
    400: {"model": ErrorResponse},
    429: {"model": ErrorResponse},
    502: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
}


def create_otp_router(service: OTPService, prefix: str = "/auth/otp") -> APIRouter:
    """
    Create the OTP router bound to ``service``.

    Args:
        service: OTP service handling the requests
        prefix: Route prefix

    Returns:
        FastAPI router with /request, /verify, /resend and /status/{phone}
    """
    router = APIRouter(prefix=prefix, tags=["OTP"])

    @router.post("/request", response_model=OTPResponse, responses=_ERRORS)
    async def request_code(body: PhoneRequest) -> OTPResponse:
        """Send a login code. Refused while a delivered code is still active."""
        result = await service.request_code(body.phone)
        return OTPResponse(success=result.success, message=result.message)

    @router.post("/verify", response_model=OTPResponse, responses=_ERRORS)
    async def verify_code(body: VerifyRequest) -> OTPResponse:
        """Check a submitted login code."""
        result = await service.verify_code(body.phone, body.code)
        return OTPResponse(success=result.success, message=result.message)

    @router.post("/resend", response_model=OTPResponse, responses=_ERRORS)
    async def resend_code(body: PhoneRequest) -> OTPResponse:
        """Send a fresh code once the resend cooldown has passed."""
        result = await service.resend_code(body.phone)
        return OTPResponse(success=result.success, message=result.message)

    @router.get(
        "/status/{phone}",
        response_model=CodeStatusResponse,
        responses={404: {"model": ErrorResponse}, 400: {"model": ErrorResponse}},
    )
    async def code_status(phone: str) -> CodeStatusResponse:
        """Current code status for operations monitoring."""
        return CodeStatusResponse(**await service.describe_code(phone))

    return router
