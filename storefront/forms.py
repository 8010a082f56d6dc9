"""
Client-side form validation

Each validator returns a dict of ``field -> message``; an empty dict means
the form may be submitted.
"""

import re
from typing import Dict

from license_service import is_valid_license_key

EMAIL_PATTERN = re.compile(r"\S+@\S+\.\S+")
MIN_PASSWORD_LENGTH = 6
MIN_ACTIVATION_KEY_LENGTH = 8


def _check_email(email: str, errors: Dict[str, str]) -> None:
    if not email.strip():
        errors["email"] = "Email is required"
    elif not EMAIL_PATTERN.search(email):
        errors["email"] = "Please enter a valid email"


def validate_activation_form(email: str, license_key: str) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    _check_email(email, errors)
    if not license_key.strip():
        errors["licenseKey"] = "License key is required"
    elif len(license_key) < MIN_ACTIVATION_KEY_LENGTH:
        errors["licenseKey"] = f"License key must be at least {MIN_ACTIVATION_KEY_LENGTH} characters"
    return errors


def validate_login_form(email: str, password: str) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    _check_email(email, errors)
    if not password.strip():
        errors["password"] = "Password is required"
    return errors


def validate_registration_form(email: str, password: str, confirm_password: str, licence_key: str) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    _check_email(email, errors)

    if not password.strip():
        errors["password"] = "Password is required"
    elif len(password) < MIN_PASSWORD_LENGTH:
        errors["password"] = f"Password must be at least {MIN_PASSWORD_LENGTH} characters"

    if not confirm_password.strip():
        errors["confirmPassword"] = "Please confirm your password"
    elif password != confirm_password:
        errors["confirmPassword"] = "Passwords do not match"

    if not licence_key.strip():
        errors["licenceKey"] = "License key is required"
    elif not is_valid_license_key(licence_key):
        errors["licenceKey"] = "Please enter a valid license key"
    return errors


def validate_checkout_form(first_name: str, last_name: str, email: str) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    if not first_name.strip():
        errors["firstName"] = "First name is required"
    if not last_name.strip():
        errors["lastName"] = "Last name is required"
    _check_email(email, errors)
    return errors
