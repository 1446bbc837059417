"""
Transaction signer backed by a substrate-interface sr25519 keypair.
"""

import hashlib

from substrateinterface import Keypair, KeypairType

from live_nft.core.exceptions import ConfigError
from live_nft.engines.chain.address import NORMALIZED_SS58_FORMAT

# Substrate signs the blake2-256 hash of payloads longer than this
MAX_RAW_PAYLOAD_BYTES = 256


class Signer:
    """Signs SDK-built extrinsic payloads for one account."""

    signature_type = "sr25519"

    def __init__(self, keypair: Keypair):
        self.keypair = keypair

    @classmethod
    def from_mnemonic(cls, mnemonic: str) -> "Signer":
        """Accepts a bare mnemonic or a URI with derivation path (``//Alice``)."""
        try:
            keypair = Keypair.create_from_uri(
                mnemonic,
                ss58_format=NORMALIZED_SS58_FORMAT,
                crypto_type=KeypairType.SR25519,
            )
        except ValueError as e:
            raise ConfigError(
                "env var COLLECTION_ADMIN_MNEMONIC is not a valid mnemonic",
                variable="COLLECTION_ADMIN_MNEMONIC"
            ) from e
        return cls(keypair)

    @property
    def address(self) -> str:
        return self.keypair.ss58_address

    def sign(self, payload_hex: str) -> str:
        payload = bytes.fromhex(payload_hex[2:] if payload_hex.startswith("0x") else payload_hex)
        if len(payload) > MAX_RAW_PAYLOAD_BYTES:
            payload = hashlib.blake2b(payload, digest_size=32).digest()
        return "0x" + self.keypair.sign(payload).hex()
