"""
Address normalization

Collection admins come back from the SDK either as plain strings or as
``{"Substrate": ...}`` / ``{"Ethereum": ...}`` objects, and Substrate
addresses may use any SS58 prefix. Comparisons are done on one canonical
form: SS58 prefix 42 for Substrate, lower-case hex for Ethereum.
"""

import re
from typing import Any

from scalecodec.utils.ss58 import ss58_decode, ss58_encode

NORMALIZED_SS58_FORMAT = 42

ETHEREUM_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")


def normalize_address(address: Any) -> str:
    """Return the canonical form of a Substrate or Ethereum address."""
    if isinstance(address, dict):
        for key, value in address.items():
            if key.lower() in ("substrate", "ethereum"):
                return normalize_address(value)
        raise ValueError(f"Unknown address object: {address!r}")

    if not isinstance(address, str) or not address.strip():
        raise ValueError(f"Invalid address: {address!r}")

    address = address.strip()
    if ETHEREUM_ADDRESS_RE.match(address):
        return address.lower()

    try:
        public_key = ss58_decode(address)
        return ss58_encode(public_key, ss58_format=NORMALIZED_SS58_FORMAT)
    except (ValueError, TypeError, IndexError) as e:
        raise ValueError(f"Invalid address {address!r}: {e}") from e
