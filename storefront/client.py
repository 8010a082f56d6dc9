#!/usr/bin/env python3
"""
Licence Storefront Client
A terminal client for the storefront: licence activation, accounts and
checkout. Session data is kept in a local storage file between runs.
"""

import argparse
import asyncio
import logging
import sys

from config import settings
from forms import validate_activation_form, validate_login_form, validate_registration_form
from guards import Redirect, account_guard, license_guard, redirect_if
from license_service import LicenseService
from local_storage import LocalStorage
from payment import ADD_ONS, BASE_PRICE, CURRENCY, LICENSE_NAME, PaymentService, add_on_details, total_price
from session import SessionManager

# Page path -> command that renders it
PAGES = {
    "/": None,
    "/activate": "activate",
    "/dashboard": "dashboard",
    "/login": "login",
    "/register": "register",
    "/user-dashboard": "account",
    "/license-activation": "license-activate",
    "/product": "product",
    "/checkout": "checkout",
}

# Pages that can be shown without any input
ARGUMENTLESS_PAGES = {"dashboard", "account", "status"}


class StorefrontClient:
    def __init__(self, storage: LocalStorage):
        self.storage = storage
        self.session = SessionManager(storage)
        self.license_service = LicenseService(storage)
        self.payments = PaymentService(storage)

    def print_errors(self, errors):
        for field, message in errors.items():
            print(f"  {field}: {message}")

    # ----- licence token pages ---------------------------------------------

    async def activate(self, args):
        """Activate a licence key for this device."""
        redirect_if(self.session.has_valid_license, "/dashboard")

        errors = validate_activation_form(args.email, args.key)
        if errors:
            print("Please fix the following:")
            self.print_errors(errors)
            return False

        print("Activating licence...")
        result = await self.session.activate(args.email, args.key)
        if not result.get("success"):
            print(f"✗ {result.get('error') or 'Activation failed. Please try again.'}")
            return False

        print("✓ Activation Successful! You're now activated on this device.")
        return await self.navigate("/dashboard")

    async def dashboard(self, args=None):
        """Show the activated licence."""
        return await license_guard(self.session).render(self._show_dashboard)

    async def _show_dashboard(self):
        info = self.session.get_license_info()
        print("=" * 50)
        print(f"  {info.get('licenseType', LICENSE_NAME)}")
        print("=" * 50)
        print(f"  Email     : {info.get('email')}")
        print(f"  Activated : {info.get('activatedAt')}")
        print(f"  Expires   : {info.get('expiration') or 'never'}")
        print(f"  Features  : {', '.join(info.get('features', []))}")
        return True

    # ----- account pages ---------------------------------------------------

    async def register(self, args):
        """Activate a licence for this device, then create the account."""
        errors = validate_registration_form(args.email, args.password, args.confirm_password, args.key)
        if errors:
            print("Please fix the following:")
            self.print_errors(errors)
            return False

        print("Activating licence...")
        activation = await self.license_service.activate_license(args.email, args.key)
        if not activation.get("success"):
            print(f"✗ {activation.get('error') or 'License activation failed. Please check your license key.'}")
            print("Please activate your license first before creating an account.")
            return False
        if activation.get("data"):
            self.license_service.store_license_info(activation["data"])
        print("✓ License activated successfully! You can now create your account.")

        result = await self.session.register(args.email, args.password)
        if not result.get("success") or not result.get("user"):
            print(f"✗ {result.get('error') or 'Registration failed'}")
            return False

        self.session.set_user(result["user"])
        print("✓ Account created successfully with activated license!")
        return await self.navigate("/user-dashboard")

    async def login(self, args):
        """Sign in to an existing account."""
        redirect_if(self.session.is_logged_in, "/user-dashboard")

        errors = validate_login_form(args.email, args.password)
        if errors:
            print("Please fix the following:")
            self.print_errors(errors)
            return False

        result = await self.session.login(args.email, args.password)
        if not result.get("success") or not result.get("user"):
            print(f"✗ {result.get('error') or 'Login failed'}")
            return False

        self.session.set_user(result["user"])
        print(f"✓ Signed in as {result['user'].get('email')}")
        return await self.navigate("/user-dashboard")

    async def account(self, args=None):
        """Show the signed-in account and its licence."""
        return await account_guard(self.session).render(self._show_account)

    async def _show_account(self):
        user = self.session.get_user()
        license_record = self.session.get_license()
        print("=" * 50)
        print(f"  Account #{user.get('id')}: {user.get('email')}")
        print("=" * 50)
        if license_record:
            print(f"  License key : {license_record.get('licenseKey')}")
            print(f"  Activated   : {license_record.get('activatedAt')}")
            print(f"  Expires     : {license_record.get('expiresAt') or 'never'}")
            print(f"  Features    : {', '.join(license_record.get('features', []))}")
        else:
            print("  No license activated. Run 'license-activate' to add one.")
        return True

    async def license_activate(self, args):
        """Attach a licence key to the signed-in account."""
        await account_guard(self.session).check_access()

        if not args.key.strip():
            print("✗ License key is required")
            return False

        result = await self.session.activate_account_license(args.key)
        if not result.get("success"):
            print(f"✗ {result.get('error') or 'License activation failed'}")
            return False

        print("✓ License Activated! Your license has been successfully activated.")
        return await self.navigate("/user-dashboard")

    # ----- shop pages ------------------------------------------------------

    async def product(self, args):
        """Pick add-ons for the Pro License."""
        known = {add_on["id"] for add_on in ADD_ONS}
        unknown = [add_on_id for add_on_id in args.add_on if add_on_id not in known]
        if unknown:
            print(f"✗ Unknown add-ons: {', '.join(unknown)}")
            print(f"  Available: {', '.join(sorted(known))}")
            return False

        self.payments.select_add_ons(args.add_on)
        print(f"  {LICENSE_NAME:<24}{BASE_PRICE:>10.2f} {CURRENCY}")
        for add_on in add_on_details(args.add_on):
            print(f"  + {add_on['name']:<22}{add_on['price']:>10.2f} {CURRENCY}")
        print(f"  {'Total':<24}{total_price(args.add_on):>10.2f} {CURRENCY}")
        return True

    async def checkout(self, args):
        """Pay for the licence and selected add-ons."""
        print(f"Total: {total_price(self.payments.get_selected_add_ons()):.2f} {CURRENCY}")
        result = await self.payments.checkout(args.first_name, args.last_name, args.email, args.phone)
        if result.get("errors"):
            print("Please fix the following:")
            self.print_errors(result["errors"])
            return False
        if not result.get("success"):
            print(f"✗ {result.get('error')}")
            return False

        print(f"✓ Payment page opened: {result['pay_url']}")
        print(f"  Payment reference: {result['payment_ref']}")
        return True

    # ----- misc ------------------------------------------------------------

    async def logout(self, args=None):
        self.session.logout()
        print("Signed out.")
        return True

    async def status(self, args=None):
        user = self.session.get_user()
        info = self.session.get_license_info()
        print(f"  Account : {user.get('email') if user else '(signed out)'}")
        print(f"  Licence : {info.get('licenseType') if info else '(not activated)'}")
        print(f"  Add-ons : {', '.join(self.payments.get_selected_add_ons()) or '(none)'}")
        return True

    # ----- navigation ------------------------------------------------------

    async def navigate(self, location):
        """Follow a redirect: show the page if it needs no input."""
        command = PAGES.get(location)
        if command in ARGUMENTLESS_PAGES:
            return await self.run(command, None)
        if command:
            print(f"→ Continue with: storefront-client {command}")
        return True

    async def run(self, command, args):
        handler = getattr(self, command.replace("-", "_"))
        try:
            return await handler(args)
        except Redirect as redirect:
            print(f"→ Redirecting to {redirect.location}")
            return await self.navigate(redirect.location)


def build_parser():
    parser = argparse.ArgumentParser(description="Licence storefront client.")
    parser.add_argument(
        "--storage",
        default=settings.storage_path,
        help="Path of the local storage file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    activate = subparsers.add_parser("activate", help="Activate a licence key on this device.")
    activate.add_argument("--email", required=True)
    activate.add_argument("--key", required=True, help="License key (at least 8 characters).")

    subparsers.add_parser("dashboard", help="Show the activated licence.")

    register = subparsers.add_parser("register", help="Create an account with a licence key.")
    register.add_argument("--email", required=True)
    register.add_argument("--password", required=True)
    register.add_argument("--confirm-password", required=True)
    register.add_argument("--key", required=True)

    login = subparsers.add_parser("login", help="Sign in.")
    login.add_argument("--email", required=True)
    login.add_argument("--password", required=True)

    subparsers.add_parser("account", help="Show the signed-in account.")

    license_activate = subparsers.add_parser("license-activate", help="Add a licence to the account.")
    license_activate.add_argument("--key", required=True)

    product = subparsers.add_parser("product", help="Select add-ons for checkout.")
    product.add_argument(
        "--add-on",
        action="append",
        default=[],
        help="Add-on id, repeatable.",
    )

    checkout = subparsers.add_parser("checkout", help="Pay for the licence.")
    checkout.add_argument("--first-name", required=True)
    checkout.add_argument("--last-name", required=True)
    checkout.add_argument("--email", required=True)
    checkout.add_argument("--phone", default="")

    subparsers.add_parser("logout", help="Sign out and forget the licence.")
    subparsers.add_parser("status", help="Show what is stored locally.")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper()),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    client = StorefrontClient(LocalStorage(args.storage))
    success = asyncio.run(client.run(args.command, args))
    return 0 if success else 1


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\n\nGoodbye!")
        sys.exit(0)
