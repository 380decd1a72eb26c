"""
OTP API Schemas
===============
Request and response bodies for the OTP endpoints.
"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator


class PhoneRequest(BaseModel):
    phone: str = Field(..., min_length=1, max_length=32)

    @field_validator("phone", mode="before")
    @classmethod
    def strip_phone(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v


class VerifyRequest(PhoneRequest):
    code: str = Field(..., min_length=1, max_length=16)

    @field_validator("code", mode="before")
    @classmethod
    def strip_code(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v


class OTPResponse(BaseModel):
    success: bool
    message: str


class ErrorResponse(BaseModel):
    success: bool = False
    errorType: str
    message: str


class CodeStatusResponse(BaseModel):
    phone: str
    status: str
    validationAttempts: int
    maxValidationAttempts: int
    createdAt: str
    expiresAt: str
    usedAt: Optional[str] = None
    deliveryFailed: bool = False
