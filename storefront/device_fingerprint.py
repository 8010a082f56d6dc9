"""
Device Fingerprinting

Identifies the device a licence is activated on. The fingerprint is derived
from the machine ID and hostname so repeated activations from the same
device present the same identifier.
"""

import hashlib
import os
import platform
import socket
import logging
from typing import Optional

logger = logging.getLogger(__name__)

_MACHINE_ID_PATHS = ['/etc/machine-id', '/var/lib/dbus/machine-id']


def _get_machine_id() -> Optional[str]:
    """Read a stable machine identifier where the OS exposes one in a file."""
    for path in _MACHINE_ID_PATHS:
        if os.path.exists(path):
            try:
                with open(path, 'r') as f:
                    machine_id = f.read().strip()
                    if machine_id:
                        return machine_id
            except OSError as e:
                logger.debug(f"Failed to read {path}: {e}")
    return None


def _get_hostname() -> str:
    try:
        return socket.gethostname()
    except OSError as e:
        logger.warning(f"Failed to get hostname: {e}")
        return "unknown"


def generate_device_fingerprint() -> str:
    """
    Generate the fingerprint for this device.

    Returns:
        String in format "device-<platform>-<9 hex chars>"
    """
    components = []

    machine_id = _get_machine_id()
    if machine_id:
        components.append(f"machine_id:{machine_id}")
    components.append(f"hostname:{_get_hostname()}")

    digest = hashlib.sha256("|".join(components).encode('utf-8')).hexdigest()
    system = platform.system().lower() or "unknown"
    return f"device-{system}-{digest[:9]}"
