import httpx
import pytest

from live_nft.core.exceptions import StorageError
from live_nft.core.storage import IpfsImageStore, LocalImageStore


@pytest.mark.asyncio
async def test_local_store_creates_directory_lazily(tmp_path):
    target = tmp_path / "images"
    store = LocalImageStore(str(target))
    assert not target.exists()

    path = await store.upload(b"first", "result.png")
    await store.upload(b"second", "result.png")

    assert path == str(target / "result.png")
    assert (target / "result.png").read_bytes() == b"second"


@pytest.mark.asyncio
async def test_local_store_write_failure(tmp_path):
    blocker = tmp_path / "images"
    blocker.write_text("a file, not a directory")

    with pytest.raises(StorageError):
        await LocalImageStore(str(blocker)).upload(b"png", "result.png")


@pytest.mark.asyncio
async def test_ipfs_upload_posts_multipart_file():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["content_type"] = request.headers["Content-Type"]
        seen["body"] = request.content
        return httpx.Response(200, json={"cid": "QmCid", "fileUrl": "https://ipfs/QmCid"})

    store = IpfsImageStore("https://rest.example.com/v1/", transport=httpx.MockTransport(handler))
    cid = await store.upload(b"\x89PNG-bytes", "result.png")

    assert cid == "QmCid"
    assert seen["url"] == "https://rest.example.com/v1/ipfs/upload-file"
    assert seen["content_type"].startswith("multipart/form-data")
    assert b'name="file"; filename="result.png"' in seen["body"]
    assert b"\x89PNG-bytes" in seen["body"]


@pytest.mark.asyncio
@pytest.mark.parametrize("response", [
    httpx.Response(500, text="ipfs node down"),
    httpx.Response(200, json={"fileUrl": "https://ipfs/nothing"}),
    httpx.Response(200, text="not json"),
])
async def test_ipfs_upload_failures(response):
    store = IpfsImageStore("https://rest.example.com/v1", transport=httpx.MockTransport(lambda request: response))

    with pytest.raises(StorageError):
        await store.upload(b"png", "result.png")
