import json
from typing import Any, Dict, List, Optional
from unittest.mock import MagicMock

import httpx
import pytest
from PIL import Image, ImageFont

from live_nft.core.config import Settings
from live_nft.engines.render import renderer

# Well-known development accounts (SS58 prefix 42)
ALICE = "5GrwvaEF5zXb26Fz9rcQpDWS57CtERHpNehXCPcNoHGKutQY"
BOB = "5FHneW46xGXgs5mUiveU4sbTyGBzmstUspZC92UhjJM694ty"

SDK_URL = "https://rest.example.com/v1"
DATA_URL = "https://data.example.com/value"


class FakeServices:
    """
    One MockTransport handler standing in for the data API, the chain SDK
    REST API and its IPFS endpoint. Records every call as "METHOD path".
    """

    def __init__(self):
        self.calls: List[str] = []
        self.data: Any = {"param": 42}
        self.weather: Any = None
        self.balances = [10.5, 10.25]
        self.admins: List[Any] = [{"Substrate": ALICE}]
        self.cid = "QmTestCid"
        self.parsed: Dict[str, Optional[Dict[str, Any]]] = {
            "/collections": {"collectionId": 7},
            "/tokens": {"tokenId": 1},
        }
        self.status_overrides: Dict[str, Dict[str, Any]] = {}
        self.built: Dict[str, Dict[str, Any]] = {}
        self.submissions: List[Dict[str, Any]] = []
        self.uploads: List[bytes] = []
        self.requests: List[httpx.Request] = []
        self._submitted: Dict[str, str] = {}
        self._last_built: Optional[str] = None

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        host = request.url.host
        path = request.url.path

        if host == "data.example.com":
            self.calls.append(f"GET {host}{path}")
            return httpx.Response(200, json=self.data)

        if host == "api.openweathermap.org":
            self.calls.append(f"GET {host}{path}")
            return httpx.Response(200, json=self.weather)

        assert host == "rest.example.com"
        path = path[len("/v1"):]

        if request.url.params.get("use") == "Build":
            self.calls.append(f"{request.method} {path}?use=Build")
            self.built[path] = json.loads(request.content)
            self._last_built = path
            return httpx.Response(200, json={
                "signerPayloadJSON": {"address": ALICE, "method": path},
                "signerPayloadHex": "0x0102",
                "fee": {"amount": "0.1"},
            })

        self.calls.append(f"{request.method} {path}")

        if path == "/balance":
            amount = self.balances.pop(0) if len(self.balances) > 1 else self.balances[0]
            return httpx.Response(200, json={
                "availableBalance": {"amount": str(amount), "unit": "OPL", "decimals": 18},
            })

        if path == "/collections/admins":
            return httpx.Response(200, json={"admins": self.admins})

        if path == "/ipfs/upload-file":
            self.uploads.append(request.content)
            return httpx.Response(201, json={"cid": self.cid, "fileUrl": f"https://ipfs/{self.cid}"})

        if path == "/extrinsic/submit":
            tx_hash = f"0xhash{len(self.submissions)}"
            self.submissions.append(json.loads(request.content))
            self._submitted[tx_hash] = self._last_built
            return httpx.Response(200, json={"hash": tx_hash})

        if path == "/extrinsic/status":
            tx_hash = request.url.params["hash"]
            endpoint = self._submitted[tx_hash]
            status = {
                "hash": tx_hash,
                "isCompleted": True,
                "isError": False,
                "parsed": self.parsed.get(endpoint),
            }
            status.update(self.status_overrides.get(endpoint, {}))
            return httpx.Response(200, json=status)

        return httpx.Response(404, json={"error": f"unknown path {path}"})


@pytest.fixture
def services() -> FakeServices:
    return FakeServices()


@pytest.fixture
def files_dir(tmp_path):
    directory = tmp_path / "files"
    directory.mkdir()
    Image.new("RGBA", (1000, 300), (10, 20, 30, 255)).save(directory / "template.png")
    return directory


@pytest.fixture
def default_font(monkeypatch):
    """Pillow's bundled font instead of Rubik, which is not shipped with the tests."""
    monkeypatch.setattr(renderer, "load_font", lambda files_dir, size: ImageFont.load_default(size=size))


@pytest.fixture
def settings(tmp_path, files_dir) -> Settings:
    return Settings(
        _env_file=None,
        DATA_SOURCE="api",
        API_URL=DATA_URL,
        API_KEY="secret-token",
        FILES_DIR=str(files_dir),
        OUTPUT_IMAGES_DIR=str(tmp_path / "images"),
        SDK_REST_URL=SDK_URL,
        SDK_REST_URL_FOR_IPFS=None,
        COLLECTION_ADMIN_MNEMONIC="//Alice",
        OWNER_ADDRESS=BOB,
        COLLECTION_ID=7,
        TOKEN_ID=1,
        EXTRINSIC_POLL_INTERVAL=0,
        CRON_TIME="*/5 * * * *",
        CRON_TIMEZONE="UTC",
        METRICS_PORT=None,
    )


@pytest.fixture
def signer():
    fake = MagicMock()
    fake.address = ALICE
    fake.signature_type = "sr25519"
    fake.sign.return_value = "0xsigned"
    return fake
