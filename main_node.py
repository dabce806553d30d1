# main_node.py

from fastapi import FastAPI, Request
from starlette.responses import Response
from dotenv import load_dotenv
from typing import Optional

# Secure .env variables
load_dotenv()

# Routers
from otp_hub.otp_routes import router as otp_router

from auth_control.otp_module import build_authenticator
from auth_control.otp_settings import OTPSettings
from auth_control.time_authenticator import TimeAuthenticator


# 🛡️ Adds security headers to every response; codes must never be cached
async def security_headers(request: Request, call_next):
    response: Response = await call_next(request)
    response.headers["Cache-Control"] = "no-store"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["Referrer-Policy"] = "no-referrer"
    return response


def create_app(settings: Optional[OTPSettings] = None,
               authenticator: Optional[TimeAuthenticator] = None) -> FastAPI:
    """
    Builds the API around one authenticator, so every request shares the same replay guard.
    Configuration errors surface here, at startup.
    """
    app = FastAPI(
        title="TimeGate OTP Service",
        docs_url=None,
        redoc_url=None,
    )
    if authenticator is None:
        authenticator = build_authenticator(settings)
    app.state.authenticator = authenticator
    print(f"[OTP INIT] Verifier ready, interval {authenticator.interval_seconds}s, "
          f"{authenticator.replay_guard.count()} used codes on record")

    # ──────────────── Middleware Setup ────────────────
    app.middleware("http")(security_headers)

    # ──────────────── Register Routes ────────────────
    app.include_router(otp_router)

    @app.get("/")
    def root():
        return {"status": "TimeGate OTP Service is Online"}

    return app
