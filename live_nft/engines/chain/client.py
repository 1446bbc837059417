"""
Chain SDK REST Client

Async client for the Unique SDK REST API. Reads (balance, admins) are
plain GETs. Writes go through the build -> sign -> submit -> wait cycle:

1. ``{endpoint}?use=Build`` returns the unsigned payload
2. the local Signer signs ``signerPayloadHex``
3. ``POST /extrinsic/submit`` returns the extrinsic hash
4. ``GET /extrinsic/status`` is polled until the extrinsic completes
"""

import asyncio
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from live_nft.core.exceptions import ExternalAPIError, ExtrinsicError
from live_nft.core.logging import get_logger
from live_nft.engines.chain.address import normalize_address
from live_nft.engines.chain.schemas import (
    Balance,
    BalanceResponse,
    ExtrinsicResult,
    UnsignedPayload,
)

logger = get_logger(__name__)

SERVICE = "chain_sdk"


class ChainClient:
    """
    Usage:
        async with ChainClient(settings.SDK_REST_URL, signer=signer) as chain:
            balance = await chain.get_balance(signer.address)
    """

    def __init__(
        self,
        base_url: str,
        signer=None,
        timeout: float = 30.0,
        poll_interval: float = 2.0,
        extrinsic_timeout: float = 120.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.signer = signer
        self.poll_interval = poll_interval
        self.extrinsic_timeout = extrinsic_timeout
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            transport=transport
        )

    async def __aenter__(self) -> "ChainClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()
        return False

    async def aclose(self):
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        try:
            response = await self._client.request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            raise ExternalAPIError(f"Chain SDK timeout on {path}", service=SERVICE) from e
        except httpx.HTTPError as e:
            raise ExternalAPIError(f"Chain SDK request {path} failed: {e}", service=SERVICE) from e

        if response.status_code >= 400:
            raise ExternalAPIError(
                f"Chain SDK error on {path}: {response.text}",
                service=SERVICE,
                http_status=response.status_code
            )

        try:
            return response.json()
        except ValueError as e:
            raise ExternalAPIError(
                f"Chain SDK returned non-JSON body on {path}",
                service=SERVICE,
                http_status=response.status_code
            ) from e

    def _parse(self, model, payload: Any, path: str):
        try:
            return model.model_validate(payload)
        except ValidationError as e:
            raise ExternalAPIError(
                f"Unexpected chain SDK response on {path}: {e}",
                service=SERVICE
            ) from e

    # =========================================================================
    # Queries
    # =========================================================================

    async def get_balance(self, address: str) -> Balance:
        payload = await self._request("GET", "/balance", params={"address": address})
        parsed = self._parse(BalanceResponse, payload, "/balance")
        try:
            amount = float(parsed.available_balance.amount)
        except ValueError as e:
            raise ExternalAPIError(
                f"Balance amount is not a number: {parsed.available_balance.amount!r}",
                service=SERVICE
            ) from e
        return Balance(amount=amount, unit=parsed.available_balance.unit)

    async def get_collection_admins(self, collection_id: int) -> List[str]:
        payload = await self._request(
            "GET", "/collections/admins", params={"collectionId": collection_id}
        )
        admins = payload.get("admins") if isinstance(payload, dict) else None
        if not isinstance(admins, list):
            raise ExternalAPIError("Collection admins response has no admins list", service=SERVICE)
        return [normalize_address(admin) for admin in admins]

    # =========================================================================
    # Extrinsics
    # =========================================================================

    async def submit_wait_result(self, method: str, path: str, body: Dict[str, Any]) -> ExtrinsicResult:
        if self.signer is None:
            raise ExtrinsicError(f"Cannot submit {path}: client has no signer")

        unsigned = self._parse(
            UnsignedPayload,
            await self._request(method, path, params={"use": "Build"}, json=body),
            path
        )
        signature = self.signer.sign(unsigned.signer_payload_hex)

        submitted = await self._request(
            "POST",
            "/extrinsic/submit",
            json={
                "signerPayloadJSON": unsigned.signer_payload_json,
                "signature": signature,
                "signatureType": self.signer.signature_type,
            }
        )
        tx_hash = submitted.get("hash") if isinstance(submitted, dict) else None
        if not tx_hash:
            raise ExternalAPIError(f"Extrinsic submit for {path} returned no hash", service=SERVICE)

        logger.info("extrinsic_submitted", endpoint=path, tx_hash=tx_hash)
        return await self.wait_result(tx_hash)

    async def wait_result(self, tx_hash: str) -> ExtrinsicResult:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.extrinsic_timeout

        while True:
            payload = await self._request("GET", "/extrinsic/status", params={"hash": tx_hash})
            result = self._parse(ExtrinsicResult, payload, "/extrinsic/status")
            if result.is_completed or result.is_error:
                logger.info(
                    "extrinsic_finished",
                    tx_hash=tx_hash,
                    is_completed=result.is_completed,
                    is_error=result.is_error
                )
                return result

            if loop.time() >= deadline:
                raise ExtrinsicError(
                    f"Extrinsic {tx_hash} did not complete within {self.extrinsic_timeout:g}s",
                    tx_hash=tx_hash
                )
            await asyncio.sleep(self.poll_interval)

    async def create_collection(self, body: Dict[str, Any]) -> ExtrinsicResult:
        return await self.submit_wait_result("POST", "/collections", body)

    async def add_collection_admin(self, address: str, collection_id: int, new_admin: str) -> ExtrinsicResult:
        return await self.submit_wait_result(
            "POST",
            "/collections/admins",
            {"address": address, "collectionId": collection_id, "newAdmin": new_admin}
        )

    async def transfer_collection(self, address: str, collection_id: int, to: str) -> ExtrinsicResult:
        return await self.submit_wait_result(
            "PATCH",
            "/collections/transfer",
            {"address": address, "collectionId": collection_id, "to": to}
        )

    async def create_token(self, address: str, collection_id: int, owner: str) -> ExtrinsicResult:
        return await self.submit_wait_result(
            "POST",
            "/tokens",
            {"address": address, "collectionId": collection_id, "owner": owner}
        )

    async def set_token_properties(
        self,
        address: str,
        collection_id: int,
        token_id: int,
        properties: List[Dict[str, str]]
    ) -> ExtrinsicResult:
        return await self.submit_wait_result(
            "POST",
            "/tokens/properties",
            {
                "address": address,
                "collectionId": collection_id,
                "tokenId": token_id,
                "properties": properties,
            }
        )
