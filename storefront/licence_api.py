"""
Licence API

FastAPI mock of the external licence host: licence activation and hosted
payment initiation for the storefront.
"""

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from datetime import datetime, timezone
from typing import Any, Dict
import logging
import uuid

import jwt

from activation import build_license_record, build_token_payload, check_license_key
from config import settings
from models import (
    ActivateRequest, ActivateResponse,
    LicenseRecord,
    PaymentRequest, PaymentResponse,
    HealthResponse,
)

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"

# Initialize FastAPI app
app = FastAPI(
    title=f"{settings.app_name} Licence API",
    version=settings.app_version,
    description="Licence activation and payment initiation for the storefront"
)

# Configure CORS
if settings.cors_origins_list:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

# Configure rate limiting
limiter = Limiter(key_func=get_remote_address)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Initiated payments: {payment_ref: {licence_id, amount, description, reference_id, status}}
# In-memory and unbounded; lost on restart. Demo host only.
payments: Dict[str, Dict[str, Any]] = {}


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message, "error": message}
    )


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint"""
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc),
        version=settings.app_version
    )


@app.post("/api/v0/licence/activate", response_model=ActivateResponse)
@limiter.limit(settings.activation_rate_limit)
async def activate_licence(request: Request, activate_req: ActivateRequest):
    """
    Activate a licence key for an email address.

    The keys INVALID, EXPIRED and LIMIT are always refused; every other key
    activates and yields a signed token plus the licence record.
    """
    licence_key = activate_req.key.strip()
    if not licence_key:
        return _error_response(400, "License key is required")

    error = check_license_key(licence_key)
    if error:
        logger.warning(f"Activation refused for {activate_req.email}: {error}")
        return _error_response(404 if licence_key == "INVALID" else 403, error)

    now = datetime.now(timezone.utc)
    token = jwt.encode(
        build_token_payload(activate_req.email, now),
        settings.jwt_secret,
        algorithm=JWT_ALGORITHM
    )
    record = build_license_record(activate_req.email, licence_key, now)

    logger.info(
        f"Licence activated for {activate_req.email} "
        f"(device: {activate_req.device_fingerprint or 'unknown'})"
    )
    return ActivateResponse(token=token, license=LicenseRecord.model_validate(record))


@app.post("/api/v0/licence/{licence_id}/payment/initiate", response_model=PaymentResponse)
async def initiate_payment(licence_id: str, payment_req: PaymentRequest):
    """Register a pending payment and return the hosted pay page for it."""
    payment_ref = f"PAY-{uuid.uuid4().hex[:12].upper()}"
    payments[payment_ref] = {
        "licence_id": licence_id,
        "amount": payment_req.amount,
        "description": payment_req.description,
        "reference_id": payment_req.reference_id,
        "status": "pending",
    }

    logger.info(f"Payment {payment_ref} initiated for {licence_id}: {payment_req.amount} cents")
    return PaymentResponse(
        pay_url=f"{settings.pay_base_url.rstrip('/')}/pay/{payment_ref}",
        payment_ref=payment_ref
    )


@app.get("/pay/{payment_ref}")
async def pay_page(payment_ref: str):
    """Hosted pay page stand-in: shows the pending payment."""
    payment = payments.get(payment_ref)
    if payment is None:
        raise HTTPException(status_code=404, detail="Payment not found")
    return {"paymentRef": payment_ref, **payment}


def main():
    import uvicorn

    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper()),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    uvicorn.run(
        app,
        host=settings.licence_api_host,
        port=settings.licence_api_port,
        log_level=settings.log_level.lower()
    )


if __name__ == "__main__":
    main()
