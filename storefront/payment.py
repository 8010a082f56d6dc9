"""
Checkout and hosted payment initiation
"""

import logging
import secrets
import string
import time
import webbrowser
from typing import Any, Callable, Dict, List, Optional

from pydantic import ValidationError

from config import settings
from forms import validate_checkout_form
from http_client import NETWORK_ERRORS, is_ok, post_json
from local_storage import LocalStorage, PAYMENT_REF_KEY, PURCHASE_DATA_KEY, SELECTED_ADD_ONS_KEY
from models import PaymentRequest, PaymentResponse

logger = logging.getLogger(__name__)

LICENSE_NAME = "Pro License"
BASE_PRICE = 299.99
CURRENCY = "TND"
DEFAULT_PHONE_NUMBER = "+21600000000"
ACCEPTED_PAYMENT_METHODS = ["bank_card", "wallet"]

ADD_ONS: List[Dict[str, Any]] = [
    {"id": "cloud-backup", "name": "Cloud Backup",
     "description": "Store your data securely in the cloud with automatic backups", "price": 45},
    {"id": "advanced-analytics", "name": "Advanced Analytics",
     "description": "Get detailed insights and reporting with advanced analytics", "price": 75},
    {"id": "priority-support", "name": "Priority Support",
     "description": "24/7 priority support with dedicated account manager", "price": 60},
    {"id": "custom-themes", "name": "Custom Themes",
     "description": "Access to premium themes and customization options", "price": 30},
]


class PaymentError(Exception):
    """Payment could not be initiated."""


def generate_reference_id() -> str:
    """Generate a purchase reference such as ``LIC-1718000000000-7QK2ZD``."""
    alphabet = string.ascii_uppercase + string.digits
    suffix = ''.join(secrets.choice(alphabet) for _ in range(6))
    return f"LIC-{int(time.time() * 1000)}-{suffix}"


def add_on_details(add_on_ids: List[str]) -> List[Dict[str, Any]]:
    """Catalogue entries for *add_on_ids*, in catalogue order; unknown ids are ignored."""
    return [add_on for add_on in ADD_ONS if add_on["id"] in add_on_ids]


def total_price(add_on_ids: List[str]) -> float:
    return BASE_PRICE + sum(add_on["price"] for add_on in add_on_details(add_on_ids))


def build_payment_request(
    first_name: str,
    last_name: str,
    email: str,
    add_on_ids: List[str],
    phone_number: str = "",
) -> PaymentRequest:
    selected = add_on_details(add_on_ids)
    description = f"Software License Purchase - {LICENSE_NAME}"
    if selected:
        description += f" + {len(selected)} add-ons"

    return PaymentRequest(
        amount=round(total_price(add_on_ids) * 100),
        description=description,
        accepted_payment_methods=list(ACCEPTED_PAYMENT_METHODS),
        first_name=first_name.strip(),
        last_name=last_name.strip(),
        phone_number=phone_number.strip() or DEFAULT_PHONE_NUMBER,
        email=email.strip(),
        reference_id=generate_reference_id(),
    )


class PaymentService:
    """Runs checkout against the hosted payment API."""

    def __init__(
        self,
        storage: LocalStorage,
        api_base_url: Optional[str] = None,
        licence_id: Optional[str] = None,
        open_tab: Callable[[str], bool] = webbrowser.open_new_tab,
    ):
        self.storage = storage
        self.api_base_url = (api_base_url or settings.licence_api_url).rstrip("/")
        self.licence_id = licence_id or settings.licence_id
        self.open_tab = open_tab

    # ----- product selection ---------------------------------------------

    def select_add_ons(self, add_on_ids: List[str]) -> None:
        self.storage.set_json(SELECTED_ADD_ONS_KEY, list(add_on_ids))

    def get_selected_add_ons(self) -> List[str]:
        return self.storage.get_json(SELECTED_ADD_ONS_KEY) or []

    # ----- payment ---------------------------------------------------------

    async def initiate_payment(self, payment_request: PaymentRequest) -> PaymentResponse:
        url = f"{self.api_base_url}/api/v0/licence/{self.licence_id}/payment/initiate"
        try:
            status, data = await post_json(url, payment_request.model_dump(by_alias=True))
            if not is_ok(status):
                raise PaymentError(f"Payment initiation failed: HTTP {status}")
            return PaymentResponse.model_validate(data)
        except (PaymentError, ValidationError, *NETWORK_ERRORS) as e:
            logger.error(f"Payment API error: {e}")
            raise PaymentError("Failed to initiate payment. Please try again.") from e

    async def checkout(self, first_name: str, last_name: str, email: str, phone_number: str = "") -> Dict[str, Any]:
        """
        Validate the checkout form, initiate payment and open the pay page.

        Returns ``{"success": True, "pay_url", "payment_ref", "reference_id"}``,
        ``{"success": False, "errors": {...}}`` for form problems, or
        ``{"success": False, "error": ...}``.
        """
        errors = validate_checkout_form(first_name, last_name, email)
        if errors:
            return {"success": False, "errors": errors}

        add_on_ids = self.get_selected_add_ons()
        payment_request = build_payment_request(first_name, last_name, email, add_on_ids, phone_number)

        try:
            response = await self.initiate_payment(payment_request)
        except PaymentError as e:
            return {"success": False, "error": str(e)}

        self.storage.set_item(PAYMENT_REF_KEY, response.payment_ref)
        self.storage.set_json(PURCHASE_DATA_KEY, {
            "firstName": first_name,
            "lastName": last_name,
            "email": email,
            "phone": phone_number,
            "totalPrice": total_price(add_on_ids),
            "selectedAddOns": add_on_ids,
            "referenceId": payment_request.reference_id,
        })
        logger.info(f"Payment {response.payment_ref} initiated for {payment_request.reference_id}")

        if not self.open_tab(response.pay_url):
            return {"success": False, "error": "Popup blocked! Please allow popups for this site."}

        return {
            "success": True,
            "pay_url": response.pay_url,
            "payment_ref": response.payment_ref,
            "reference_id": payment_request.reference_id,
        }
