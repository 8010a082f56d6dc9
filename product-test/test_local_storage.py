#!/usr/bin/env python3
"""
Test script for the client local storage.
"""

import json
import os
import shutil
import sys
import tempfile

# Add storefront directory to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'storefront'))

from local_storage import LocalStorage


def test_in_memory_storage():
    storage = LocalStorage()
    assert storage.get_item("missing") is None

    storage.set_item("license_token", "a.b.c")
    storage.set_json("auth_user", {"id": 1, "email": "demo@example.com"})
    assert storage.get_item("license_token") == "a.b.c"
    assert storage.get_json("auth_user") == {"id": 1, "email": "demo@example.com"}
    assert storage.get_item("auth_user") == '{"id": 1, "email": "demo@example.com"}'
    assert len(storage) == 2

    storage.remove_item("license_token")
    storage.remove_item("never-set")
    assert "license_token" not in storage

    storage.set_item("broken", "{not json")
    assert storage.get_json("broken") is None

    storage.clear()
    assert len(storage) == 0
    print("  ✓ In-memory storage behaves like localStorage")


def test_file_storage_persists():
    temp_dir = tempfile.mkdtemp()
    try:
        path = os.path.join(temp_dir, "nested", "storage.json")
        storage = LocalStorage(path)
        storage.set_json("selectedAddOns", ["cloud-backup"])
        storage.set_item("paymentRef", "REF-9")

        reopened = LocalStorage(path)
        assert reopened.get_json("selectedAddOns") == ["cloud-backup"]
        assert reopened.get_item("paymentRef") == "REF-9"

        reopened.remove_item("paymentRef")
        with open(path, 'r', encoding='utf-8') as f:
            assert "paymentRef" not in json.load(f)
        print("  ✓ File storage survives reopening")
    finally:
        shutil.rmtree(temp_dir)


def test_unreadable_file_is_ignored():
    temp_dir = tempfile.mkdtemp()
    try:
        path = os.path.join(temp_dir, "storage.json")
        with open(path, 'w', encoding='utf-8') as f:
            f.write("garbage")

        storage = LocalStorage(path)
        assert len(storage) == 0
        storage.set_item("auth_user", "{}")
        assert LocalStorage(path).get_item("auth_user") == "{}"
        print("  ✓ Corrupt storage file starts empty")
    finally:
        shutil.rmtree(temp_dir)


if __name__ == '__main__':
    print("Testing Local Storage")
    print("=" * 60)
    try:
        test_in_memory_storage()
        test_file_storage_persists()
        test_unreadable_file_is_ignored()
        print("\n✅ All local storage tests passed!")
    except AssertionError as e:
        print(f"\n❌ FAIL: {e}")
        sys.exit(1)
