"""
Pydantic models for request/response validation
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from datetime import datetime


class WireModel(BaseModel):
    """Base for models exchanged as camelCase JSON"""

    model_config = ConfigDict(populate_by_name=True)


# Request Models

class ActivateRequest(WireModel):
    """Request to activate a licence key"""
    email: str = Field(..., description="Account email the licence is bound to")
    licence_key: Optional[str] = Field(None, alias="licenceKey")
    license_key: Optional[str] = Field(None, alias="licenseKey")
    device_fingerprint: Optional[str] = Field(None, alias="deviceFingerprint")

    @property
    def key(self) -> str:
        """Both spellings are accepted on the wire"""
        return self.licence_key or self.license_key or ""


class PaymentRequest(WireModel):
    """Request to initiate a hosted payment"""
    amount: int = Field(..., gt=0, description="Amount in cents")
    description: str
    accepted_payment_methods: List[str] = Field(
        default_factory=lambda: ["bank_card", "wallet"],
        alias="acceptedPaymentMethods"
    )
    first_name: str = Field(..., alias="firstName")
    last_name: str = Field(..., alias="lastName")
    phone_number: str = Field("+21600000000", alias="phoneNumber")
    email: str
    reference_id: str = Field(..., alias="referenceId")


# Response Models

class LicenseRecord(WireModel):
    """Licence bound to an account"""
    email: str
    license_key: str = Field(..., alias="licenseKey")
    features: List[str]
    activated_at: str = Field(..., alias="activatedAt")
    expires_at: Optional[str] = Field(None, alias="expiresAt")


class ActivateResponse(WireModel):
    """Response from a successful activation"""
    success: bool = True
    token: str
    license: LicenseRecord


class PaymentResponse(WireModel):
    """Response from payment initiation"""
    pay_url: str = Field(..., alias="payUrl")
    payment_ref: str = Field(..., alias="paymentRef")


class HealthResponse(BaseModel):
    """Health check response"""
    status: str
    timestamp: datetime
    version: str
