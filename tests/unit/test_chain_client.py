import httpx
import pytest

from live_nft.core.exceptions import ExternalAPIError, ExtrinsicError
from live_nft.engines.chain.client import ChainClient

from tests.conftest import ALICE, SDK_URL


def _client(services, signer=None, **kwargs) -> ChainClient:
    return ChainClient(SDK_URL, signer=signer, poll_interval=0, transport=services.transport, **kwargs)


@pytest.mark.asyncio
async def test_get_balance(services):
    async with _client(services) as chain:
        balance = await chain.get_balance(ALICE)

    assert balance.amount == 10.5
    assert balance.unit == "OPL"
    assert balance.formatted() == "10.500 OPL"
    assert services.requests[0].url.params["address"] == ALICE


@pytest.mark.asyncio
async def test_collection_admins_are_normalized(services):
    services.admins = [{"Substrate": ALICE}, {"Ethereum": "0xAbCdEf0123456789aBcDeF0123456789ABCDEF01"}]

    async with _client(services) as chain:
        admins = await chain.get_collection_admins(7)

    assert admins == [ALICE, "0xabcdef0123456789abcdef0123456789abcdef01"]
    assert services.requests[0].url.params["collectionId"] == "7"


@pytest.mark.asyncio
async def test_submit_builds_signs_submits_and_waits(services, signer):
    properties = [{"key": "a.0", "value": '{"_": "42"}'}]

    async with _client(services, signer) as chain:
        result = await chain.set_token_properties(ALICE, 7, 1, properties)

    assert services.calls == [
        "POST /tokens/properties?use=Build",
        "POST /extrinsic/submit",
        "GET /extrinsic/status",
    ]
    assert services.built["/tokens/properties"] == {
        "address": ALICE,
        "collectionId": 7,
        "tokenId": 1,
        "properties": properties,
    }
    signer.sign.assert_called_once_with("0x0102")
    assert services.submissions[0] == {
        "signerPayloadJSON": {"address": ALICE, "method": "/tokens/properties"},
        "signature": "0xsigned",
        "signatureType": "sr25519",
    }
    assert result.hash == "0xhash0"
    assert result.succeeded


@pytest.mark.asyncio
async def test_transfer_uses_patch(services, signer):
    async with _client(services, signer) as chain:
        await chain.transfer_collection(ALICE, 7, to="5FHneW46xGXgs5mUiveU4sbTyGBzmstUspZC92UhjJM694ty")

    assert services.calls[0] == "PATCH /collections/transfer?use=Build"


@pytest.mark.asyncio
async def test_wait_polls_until_completed(signer):
    polls = []

    def handler(request):
        if request.url.path.endswith("/extrinsic/status"):
            polls.append(request)
            done = len(polls) >= 3
            return httpx.Response(200, json={"hash": "0xabc", "isCompleted": done, "isError": False})
        raise AssertionError(f"unexpected {request.url}")

    async with ChainClient(SDK_URL, signer=signer, poll_interval=0, transport=httpx.MockTransport(handler)) as chain:
        result = await chain.wait_result("0xabc")

    assert len(polls) == 3
    assert result.is_completed


@pytest.mark.asyncio
async def test_wait_times_out(signer):
    def handler(request):
        return httpx.Response(200, json={"hash": "0xabc", "isCompleted": False, "isError": False})

    chain = ChainClient(
        SDK_URL, signer=signer, poll_interval=0, extrinsic_timeout=0, transport=httpx.MockTransport(handler)
    )
    async with chain:
        with pytest.raises(ExtrinsicError, match="did not complete"):
            await chain.wait_result("0xabc")


@pytest.mark.asyncio
async def test_failed_extrinsic_is_returned_not_raised(services, signer):
    services.status_overrides["/tokens"] = {"isError": True, "error": {"message": "NoPermission"}}

    async with _client(services, signer) as chain:
        result = await chain.create_token(ALICE, 7, owner=ALICE)

    assert not result.succeeded
    assert result.error == {"message": "NoPermission"}


@pytest.mark.asyncio
async def test_submit_without_signer(services):
    async with _client(services) as chain:
        with pytest.raises(ExtrinsicError, match="no signer"):
            await chain.create_token(ALICE, 7, owner=ALICE)


@pytest.mark.asyncio
async def test_sdk_error_status(signer):
    transport = httpx.MockTransport(lambda request: httpx.Response(400, json={"error": "bad address"}))

    async with ChainClient(SDK_URL, signer=signer, transport=transport) as chain:
        with pytest.raises(ExternalAPIError) as exc_info:
            await chain.get_balance("garbage")

    assert exc_info.value.details["service"] == "chain_sdk"
    assert exc_info.value.details["http_status"] == 400


@pytest.mark.asyncio
async def test_unexpected_balance_payload(signer):
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"free": "1"}))

    async with ChainClient(SDK_URL, signer=signer, transport=transport) as chain:
        with pytest.raises(ExternalAPIError, match="Unexpected"):
            await chain.get_balance(ALICE)
