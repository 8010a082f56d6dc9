#!/usr/bin/env python3
"""
Test script for the wire models.
"""

import os
import sys
import warnings

# Add storefront directory to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'storefront'))

from pydantic import Field

from models import ActivateRequest, LicenseRecord, WireModel


def test_wire_model_config_does_not_warn():
    """Subclassing the wire base emits no deprecation warnings."""
    with warnings.catch_warnings():
        warnings.simplefilter("error")

        class Sample(WireModel):
            reference_id: str = Field(..., alias="referenceId")

    assert WireModel.model_config["populate_by_name"] is True
    assert Sample(referenceId="LIC-1").reference_id == "LIC-1"
    assert Sample(reference_id="LIC-2").reference_id == "LIC-2"
    print("  ✓ Wire model config is declared without deprecation")


def test_populate_by_field_name_or_alias():
    by_alias = ActivateRequest.model_validate({"email": "a@example.com", "licenceKey": "KEY-1"})
    by_name = ActivateRequest(email="a@example.com", license_key="KEY-2")
    assert by_alias.key == "KEY-1"
    assert by_name.key == "KEY-2"

    record = LicenseRecord(
        email="a@example.com",
        license_key="KEY-2",
        features=["premium-features"],
        activated_at="2025-01-01T00:00:00.000Z",
    )
    dumped = record.model_dump(by_alias=True)
    assert dumped["licenseKey"] == "KEY-2"
    assert dumped["expiresAt"] is None
    print("  ✓ Models accept field names and camelCase aliases")


if __name__ == '__main__':
    print("Testing Wire Models")
    print("=" * 60)
    try:
        test_wire_model_config_does_not_warn()
        test_populate_by_field_name_or_alias()
        print("\n✅ All model tests passed!")
    except AssertionError as e:
        print(f"\n❌ FAIL: {e}")
        sys.exit(1)
