"""
FastAPI Pydantic validators for the OTP endpoints
Keeps malformed requests away from the verifier
"""
from pydantic import BaseModel, Field, field_validator
from typing import Optional
import re

from auth_control.otp_engine import MAX_COUNTER


class OTPGenerateModel(BaseModel):
    """Validation model for code generation"""
    secret: str = Field(..., min_length=1, max_length=256, description="Base32 shared secret")
    at: Optional[int] = Field(None, ge=0, le=MAX_COUNTER, description="Epoch seconds, defaults to now")


class OTPVerificationModel(BaseModel):
    """Validation model for OTP verification"""
    secret: str = Field(..., min_length=1, max_length=256, description="Base32 shared secret")
    code: str = Field(..., min_length=6, max_length=12, description="6-10 digit OTP code")
    user_id: str = Field(..., min_length=1, max_length=256, description="User the code belongs to")

    @field_validator('code')
    @classmethod
    def validate_code(cls, v):
        """Validate OTP code format"""
        clean_code = re.sub(r'\s', '', v)
        if not re.match(r'^\d{6,10}$', clean_code):
            raise ValueError('OTP must be 6 to 10 digits')
        return clean_code


class OTPGenerateResponse(BaseModel):
    code: str


class OTPVerificationResponse(BaseModel):
    valid: bool
