"""
OTP HTTP API
============
FastAPI routes and error mapping for the OTP service.
"""

from .errors import HTTP_STATUS, error_response, register_error_handlers
from .routes import create_otp_router

__all__ = [
    "HTTP_STATUS",
    "error_response",
    "register_error_handlers",
    "create_otp_router",
]
