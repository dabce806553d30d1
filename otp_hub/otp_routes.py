"""
OTP routes for TimeGate
Maps generate/verify outcomes to HTTP responses
"""
from fastapi import APIRouter, HTTPException, Request, Depends

from auth_control.otp_errors import ComputationError, InvalidArgumentError, InvalidSecretError
from auth_control.time_authenticator import TimeAuthenticator
from auth_control.validators import (
    OTPGenerateModel,
    OTPGenerateResponse,
    OTPVerificationModel,
    OTPVerificationResponse,
)

router = APIRouter(prefix="/otp", tags=["otp"])

print("[OTP] OTP routes module loaded")


def get_authenticator(request: Request) -> TimeAuthenticator:
    """Authenticator shared by every request of the application"""
    return request.app.state.authenticator


# Sync handlers: the replay guard may block on its store
@router.post("/code", response_model=OTPGenerateResponse)
def generate_code(
        payload: OTPGenerateModel,
        authenticator: TimeAuthenticator = Depends(get_authenticator)
):
    """Return the code for a secret at a given time (now by default)"""
    try:
        code = authenticator.generate(payload.secret, payload.at)
    except (InvalidArgumentError, InvalidSecretError):
        raise HTTPException(status_code=400, detail="Invalid secret")
    except ComputationError as e:
        print(f"[OTP_ERROR] Code generation failed: {e}")
        raise HTTPException(status_code=500, detail="Code generation failed")

    return OTPGenerateResponse(code=code)


@router.post("/verify", response_model=OTPVerificationResponse)
def verify_code(
        payload: OTPVerificationModel,
        authenticator: TimeAuthenticator = Depends(get_authenticator)
):
    """Check a code; the answer never says why a code was rejected"""
    try:
        valid = authenticator.check_code(payload.secret, payload.code, payload.user_id)
    except InvalidArgumentError:
        raise HTTPException(status_code=400, detail="Secret and code are required")

    return OTPVerificationResponse(valid=valid)
