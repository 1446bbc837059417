"""
Chain SDK payloads

Response models for the SDK REST API plus builders for the collection
schema and the token properties this updater writes.
"""

import json
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Responses
# =============================================================================

class BalanceAmount(BaseModel):
    model_config = ConfigDict(extra="ignore")

    amount: str
    unit: str = ""


class BalanceResponse(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    available_balance: BalanceAmount = Field(..., alias="availableBalance")


class Balance(BaseModel):
    """Available balance of an account in whole chain units."""
    amount: float
    unit: str

    def formatted(self) -> str:
        return f"{self.amount:.3f} {self.unit}".strip()


class UnsignedPayload(BaseModel):
    """What ``?use=Build`` returns: the payload to sign and its JSON form."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    signer_payload_json: Dict[str, Any] = Field(..., alias="signerPayloadJSON")
    signer_payload_hex: str = Field(..., alias="signerPayloadHex")
    fee: Optional[Dict[str, Any]] = None


class ExtrinsicResult(BaseModel):
    """Status of a submitted extrinsic."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    hash: str
    is_completed: bool = Field(False, alias="isCompleted")
    is_error: bool = Field(False, alias="isError")
    parsed: Optional[Dict[str, Any]] = None
    error: Optional[Any] = None

    @property
    def succeeded(self) -> bool:
        return self.is_completed and not self.is_error


# =============================================================================
# Token properties
# =============================================================================

IMAGE_PROPERTY_KEY = "i.i"

# Property keys every token of the collection may carry besides attributes
BASE_PROPERTY_KEYS = ["i.u", "i.c", "i.i", "i.h", "n", "d"]

UPDATED_AT_ATTRIBUTE = "Updated at"

PERMISSION_ALL_TRUE = {"mutable": True, "collectionAdmin": True, "tokenOwner": True}


def attribute_key(index: int) -> str:
    return f"a.{index}"


def attribute_value(value: str) -> str:
    """Attribute values are stored as a localized-string JSON object."""
    return json.dumps({"_": value}, ensure_ascii=False)


def format_updated_at(moment: datetime) -> str:
    """``5 March 2024 14:03:09``: day without padding, English month name."""
    moment = moment.astimezone(timezone.utc)
    return f"{moment.day} {moment.strftime('%B %Y %H:%M:%S')}"


def build_token_properties(
    attributes: Sequence[Tuple[str, str]],
    image_cid: str,
    updated_at: datetime
) -> List[Dict[str, str]]:
    """Source attributes at a.0..a.N-1, the update time at a.N, the image CID at i.i."""
    properties = [
        {"key": attribute_key(index), "value": attribute_value(value)}
        for index, (_, value) in enumerate(attributes)
    ]
    properties.append({
        "key": attribute_key(len(attributes)),
        "value": attribute_value(format_updated_at(updated_at)),
    })
    properties.append({"key": IMAGE_PROPERTY_KEY, "value": image_cid})
    return properties


# =============================================================================
# Collection
# =============================================================================

def build_collection_request(
    address: str,
    attribute_names: Sequence[str],
    name: str,
    description: str,
    token_prefix: str,
    ipfs_gateway_url: str,
    cover_picture_cid: str
) -> Dict[str, Any]:
    """Body for creating a collection whose schema matches the data source."""
    gateway = ipfs_gateway_url.rstrip("/")
    names = list(attribute_names) + [UPDATED_AT_ATTRIBUTE]

    attributes_schema = {
        str(index): {
            "name": {"_": attribute_name},
            "type": "string",
            "isArray": False,
            "optional": False,
        }
        for index, attribute_name in enumerate(names)
    }

    property_keys = BASE_PROPERTY_KEYS + [attribute_key(index) for index in range(len(names))]

    return {
        "address": address,
        "name": name,
        "description": description,
        "tokenPrefix": token_prefix,
        "schema": {
            "schemaName": "unique",
            "schemaVersion": "1.0.0",
            "image": {"urlTemplate": f"{gateway}/{{infix}}"},
            "coverPicture": {"url": f"{gateway}/{cover_picture_cid}"},
            "attributesSchemaVersion": "1.0.0",
            "attributesSchema": attributes_schema,
        },
        "tokenPropertyPermissions": [
            {"key": key, "permission": dict(PERMISSION_ALL_TRUE)}
            for key in property_keys
        ],
    }
