"""
Pipeline Stage Implementations

Each stage is a separate function that can be called independently and
is wrapped with stage logging and latency metrics.
"""

from datetime import datetime
from typing import Dict, List

from live_nft.core.config import Settings
from live_nft.core.logging import get_logger, with_logging
from live_nft.core.metrics import track_stage_latency
from live_nft.core.storage import IImageStore
from live_nft.engines.chain.client import ChainClient
from live_nft.engines.chain.schemas import ExtrinsicResult, build_token_properties
from live_nft.engines.data.schemas import DataRecord
from live_nft.engines.data.sources import DataSource
from live_nft.engines.render.renderer import render_image

logger = get_logger(__name__)

RESULT_IMAGE_FILENAME = "result.png"


# =============================================================================
# Stage 1: Fetch
# =============================================================================

@with_logging("fetch")
async def fetch_data_stage(source: DataSource) -> DataRecord:
    with track_stage_latency("fetch"):
        record = await source.fetch()

    logger.info("data_fetched", source=source.name, data=record.model_dump())
    return record


# =============================================================================
# Stage 2: Render
# =============================================================================

@with_logging("render")
async def render_stage(record: DataRecord, settings: Settings, store: IImageStore) -> bytes:
    """Render the record onto the template and keep a copy in the output directory."""
    with track_stage_latency("render"):
        image = render_image(record.display_lines(settings.RENDER_GROUP_DIGITS), settings)
        path = await store.upload(image, RESULT_IMAGE_FILENAME)

    logger.info("image_generated", path=path, size_bytes=len(image))
    return image


# =============================================================================
# Stage 3: Upload
# =============================================================================

@with_logging("upload")
async def upload_stage(image: bytes, store: IImageStore) -> str:
    with track_stage_latency("upload"):
        return await store.upload(image, RESULT_IMAGE_FILENAME)


# =============================================================================
# Stage 4: Submit
# =============================================================================

@with_logging("submit")
async def submit_properties_stage(
    chain: ChainClient,
    address: str,
    collection_id: int,
    token_id: int,
    record: DataRecord,
    image_cid: str,
    updated_at: datetime
) -> ExtrinsicResult:
    properties: List[Dict[str, str]] = build_token_properties(record.attributes(), image_cid, updated_at)

    with track_stage_latency("submit"):
        return await chain.set_token_properties(
            address=address,
            collection_id=collection_id,
            token_id=token_id,
            properties=properties,
        )
