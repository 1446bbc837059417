import pytest
from scalecodec.utils.ss58 import ss58_decode, ss58_encode

from live_nft.engines.chain.address import normalize_address

from tests.conftest import ALICE


def test_substrate_address_is_reencoded_with_prefix_42():
    kusama_form = ss58_encode(ss58_decode(ALICE), ss58_format=2)
    assert kusama_form != ALICE

    assert normalize_address(kusama_form) == ALICE
    assert normalize_address(ALICE) == ALICE


def test_admin_objects_are_unwrapped():
    assert normalize_address({"Substrate": ALICE}) == ALICE
    assert normalize_address({"Ethereum": "0xAbCdEf0123456789aBcDeF0123456789ABCDEF01"}) == (
        "0xabcdef0123456789abcdef0123456789abcdef01"
    )


@pytest.mark.parametrize("address", ["", "not an address", 42, {"Other": ALICE}, ALICE[:-1] + "Z"])
def test_invalid_addresses(address):
    with pytest.raises(ValueError):
        normalize_address(address)
