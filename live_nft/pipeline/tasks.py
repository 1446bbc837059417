"""
Run Modes

- generate_test_image: fetch and render only
- update_token: one full fetch -> render -> upload -> submit pass
- create_collection_and_token: one-time setup of the collection and token
- run_cron_job: update_token on CRON_TIME

Every mode is a straight sequence of awaited calls. Any failure
propagates to the caller; nothing is retried or rolled back.
"""

from datetime import datetime, timezone
from typing import Optional

import httpx

from live_nft.core.config import Settings
from live_nft.core.exceptions import ExtrinsicError, PreconditionError
from live_nft.core.logging import get_logger
from live_nft.core.metrics import record_token_update
from live_nft.core.storage import IpfsImageStore, LocalImageStore
from live_nft.engines.chain.address import normalize_address
from live_nft.engines.chain.client import ChainClient
from live_nft.engines.chain.schemas import ExtrinsicResult, build_collection_request
from live_nft.engines.chain.signer import Signer
from live_nft.engines.data.sources import attribute_names_for, get_data_source
from live_nft.pipeline.scheduler import run_cron
from live_nft.pipeline.stages import (
    fetch_data_stage,
    render_stage,
    submit_properties_stage,
    upload_stage,
)

logger = get_logger(__name__)


def _chain_client(settings: Settings, signer, transport: Optional[httpx.AsyncBaseTransport]) -> ChainClient:
    return ChainClient(
        settings.require("SDK_REST_URL"),
        signer=signer,
        timeout=settings.HTTP_TIMEOUT,
        poll_interval=settings.EXTRINSIC_POLL_INTERVAL,
        extrinsic_timeout=settings.EXTRINSIC_TIMEOUT,
        transport=transport,
    )


def _ensure_succeeded(result: ExtrinsicResult, action: str) -> ExtrinsicResult:
    if not result.succeeded:
        raise ExtrinsicError(
            f"{action} failed: {result.error}",
            tx_hash=result.hash,
            chain_error=result.error
        )
    return result


# =============================================================================
# Test the image generator
# =============================================================================

async def generate_test_image(
    settings: Settings,
    transport: Optional[httpx.AsyncBaseTransport] = None
) -> bytes:
    """Grab the data from the API and generate the image, nothing else."""
    source = get_data_source(settings, transport=transport)
    images_dir = settings.require("OUTPUT_IMAGES_DIR")

    record = await fetch_data_stage(source)
    return await render_stage(record, settings, LocalImageStore(images_dir))


# =============================================================================
# Token data updater
# =============================================================================

async def update_token(
    settings: Settings,
    signer=None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    now: Optional[datetime] = None
) -> ExtrinsicResult:
    """Write fresh data, a fresh image and the update time into the token."""
    logger.info("token_update_starting")

    mnemonic = settings.require("COLLECTION_ADMIN_MNEMONIC")
    ipfs_url = settings.ipfs_rest_url
    images_dir = settings.require("OUTPUT_IMAGES_DIR")
    collection_id = settings.require("COLLECTION_ID")
    token_id = settings.require("TOKEN_ID")
    source = get_data_source(settings, transport=transport)

    signer = signer or Signer.from_mnemonic(mnemonic)
    address = signer.address

    async with _chain_client(settings, signer, transport) as chain:
        balance_before = await chain.get_balance(address)
        logger.info("admin_account", address=address, balance=balance_before.formatted())

        # ensure that we can update the token
        admins = await chain.get_collection_admins(collection_id)
        if normalize_address(address) not in admins:
            raise PreconditionError(
                f"COLLECTION_ADMIN_MNEMONIC's address {address} is not found in collection admins",
                details={"collection_id": collection_id}
            )

        if not balance_before.amount > settings.MIN_BALANCE_UPDATE:
            raise PreconditionError(
                f"Balance of the {address} account is lower than {settings.MIN_BALANCE_UPDATE:g}",
                details={"balance": balance_before.amount}
            )

        record = await fetch_data_stage(source)
        image = await render_stage(record, settings, LocalImageStore(images_dir))
        cid = await upload_stage(
            image,
            IpfsImageStore(ipfs_url, timeout=settings.HTTP_TIMEOUT, transport=transport)
        )

        result = await submit_properties_stage(
            chain,
            address=address,
            collection_id=collection_id,
            token_id=token_id,
            record=record,
            image_cid=cid,
            updated_at=now or datetime.now(timezone.utc),
        )
        if not result.succeeded:
            raise ExtrinsicError(
                f"Token {collection_id}/{token_id} properties were not updated: {result.error}",
                tx_hash=result.hash,
                chain_error=result.error
            )

        balance_after = await chain.get_balance(address)

    spent = balance_before.amount - balance_after.amount
    record_token_update(spent)
    logger.info(
        "token_updated",
        collection_id=collection_id,
        token_id=token_id,
        image_cid=cid,
        spent=f"{spent:.3f} {balance_after.unit}".strip()
    )
    return result


# =============================================================================
# Create collection and dummy token placeholder
# =============================================================================

async def create_collection_and_token(
    settings: Settings,
    signer=None,
    transport: Optional[httpx.AsyncBaseTransport] = None
) -> tuple:
    """Create the collection, mint an empty token and print their IDs."""
    mnemonic = settings.require("COLLECTION_ADMIN_MNEMONIC")
    owner_address = normalize_address(settings.require("OWNER_ADDRESS"))

    signer = signer or Signer.from_mnemonic(mnemonic)
    address = signer.address

    async with _chain_client(settings, signer, transport) as chain:
        balance = await chain.get_balance(address)
        logger.info("admin_account", address=address, balance=balance.formatted())

        if not balance.amount > settings.MIN_BALANCE_CREATE:
            raise PreconditionError(
                f"Balance should be greater than {settings.MIN_BALANCE_CREATE:g}",
                details={"balance": balance.amount}
            )

        collection_result = await chain.create_collection(build_collection_request(
            address=address,
            attribute_names=attribute_names_for(settings),
            name=settings.COLLECTION_NAME,
            description=settings.COLLECTION_DESCRIPTION,
            token_prefix=settings.COLLECTION_TOKEN_PREFIX,
            ipfs_gateway_url=settings.IPFS_GATEWAY_URL,
            cover_picture_cid=settings.COVER_PICTURE_CID,
        ))
        collection_id = (collection_result.parsed or {}).get("collectionId")
        if not isinstance(collection_id, int):
            raise ExtrinsicError(
                f"Collection was not created: {collection_result.error}",
                tx_hash=collection_result.hash,
                chain_error=collection_result.error
            )
        logger.info("collection_created", collection_id=collection_id)

        _ensure_succeeded(
            await chain.add_collection_admin(address, collection_id, new_admin=address),
            f"Adding {address} as admin of collection {collection_id}"
        )
        _ensure_succeeded(
            await chain.transfer_collection(address, collection_id, to=owner_address),
            f"Transfer of collection {collection_id} to {owner_address}"
        )

        token_result = await chain.create_token(address, collection_id, owner=owner_address)
        token_id = (token_result.parsed or {}).get("tokenId")
        if not isinstance(token_id, int):
            raise ExtrinsicError(
                f"Token was not minted: {token_result.error}",
                tx_hash=token_result.hash,
                chain_error=token_result.error
            )
        logger.info("token_minted", collection_id=collection_id, token_id=token_id, owner=owner_address)

    print(
        "\nCollection created and empty token has been minted.\n"
        "Please, add these env vars to the .env file or env vault:\n"
    )
    print(f"COLLECTION_ID={collection_id}")
    print(f"TOKEN_ID={token_id}")
    print()
    return collection_id, token_id


# =============================================================================
# Cron job starter
# =============================================================================

async def run_cron_job(settings: Settings, max_ticks: Optional[int] = None):
    """Periodically update the token; the first update runs right away."""
    settings.require("CRON_TIME")
    await run_cron(settings, job=update_token, max_ticks=max_ticks)
