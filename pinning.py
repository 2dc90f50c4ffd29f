"""
Pinning side of the mint: a small Pinata client plus the two upload steps.

  • upload_images()              pins output/images/<id>.png one at a time
  • upload_metadata_directory()  pins output/metadata/ as a single folder CID

Files are always taken in numeric token order (0, 1, 2, … 10, 11), never in
whatever order the filesystem happens to list them.
"""

import json
import logging
import mimetypes
import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Protocol, Sequence, Tuple

import aiofiles
import aiohttp
from tqdm import tqdm

from settings import PipelineError

logger = logging.getLogger(__name__)

SCHEME         = "ipfs://"
PIN_FILE       = "/pinning/pinFileToIPFS"
UPLOAD_TIMEOUT = aiohttp.ClientTimeout(total=120)

# canonical token ids only: "7", never "07" or "²"
TOKEN_STEM     = re.compile(r"0|[1-9][0-9]*")

# (filename, bytes, content type)
FilePart = Tuple[str, bytes, str]

# ---------------------------------------------------------------------------


class PinningError(PipelineError):
    def __init__(self, message: str, status: Optional[int] = None, body: str = ""):
        super().__init__(message)
        self.status = status
        self.body = body


class PinningClient(Protocol):
    async def upload_file(self, name: str, data: bytes, content_type: str) -> str: ...

    async def upload_directory(self, dirname: str, files: Sequence[FilePart]) -> str: ...


@dataclass(frozen=True)
class PinnedFile:
    token_id: int
    path: Path
    uri: str


class PinataClient:
    """
    Minimal async client for Pinata's pinFileToIPFS endpoint.

    Use as an async context manager; one aiohttp session is shared by all
    uploads of a run.
    """

    def __init__(self, jwt: str, api_url: str = "https://api.pinata.cloud",
                 session: Optional[aiohttp.ClientSession] = None):
        self.jwt = jwt
        self.api_url = api_url.rstrip("/")
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self) -> "PinataClient":
        if self._session is None:
            self._session = aiohttp.ClientSession(timeout=UPLOAD_TIMEOUT)
        return self

    async def __aexit__(self, *exc):
        await self.close()

    async def close(self):
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None

    def _headers(self) -> dict:
        return {"Authorization": f"Bearer {self.jwt}"}

    async def _pin(self, form: aiohttp.FormData, label: str) -> str:
        if self._session is None:
            raise RuntimeError("PinataClient used outside of 'async with'")

        async with self._session.post(self.api_url + PIN_FILE, data=form,
                                      headers=self._headers()) as r:
            if not 200 <= r.status < 300:
                body = await r.text()
                raise PinningError(f"pinning {label} failed: HTTP {r.status} {body[:200]}",
                                   status=r.status, body=body)
            payload = await r.json(content_type=None)

        logger.info("pinned %s: %s", label, payload)
        ipfs_hash = payload.get("IpfsHash") if isinstance(payload, dict) else None
        if not ipfs_hash:
            raise PinningError(f"pinning {label}: response has no IpfsHash: {payload!r}",
                               status=r.status, body=json.dumps(payload))
        return ipfs_hash

    async def upload_file(self, name: str, data: bytes, content_type: str) -> str:
        form = aiohttp.FormData(quote_fields=False)
        form.add_field("file", data, filename=name, content_type=content_type)
        form.add_field("pinataMetadata", json.dumps({"name": name}))
        return await self._pin(form, name)

    async def upload_directory(self, dirname: str, files: Sequence[FilePart]) -> str:
        # every part lives under "<dirname>/" so the CID is a folder and
        # <cid>/<filename> resolves on the gateway
        form = aiohttp.FormData(quote_fields=False)
        for fname, data, content_type in files:
            form.add_field("file", data, filename=f"{dirname}/{fname}",
                           content_type=content_type)
        form.add_field("pinataMetadata", json.dumps({"name": dirname}))
        form.add_field("pinataOptions", json.dumps({"cidVersion": 1}))
        return await self._pin(form, f"{dirname}/ ({len(files)} files)")


# ---------------------------------------------------------------------------

def ipfs_uri(ipfs_hash: str) -> str:
    if not ipfs_hash:
        raise ValueError("empty content hash")
    return f"{SCHEME}{ipfs_hash}"


def strip_scheme(uri: str) -> str:
    return uri[len(SCHEME):] if uri.startswith(SCHEME) else uri


def gateway_url(gateway_host: str, base_uri: str, filename: str = "0.json") -> str:
    return f"https://{gateway_host}/ipfs/{strip_scheme(base_uri)}/{filename}"


def guess_type(path: Path) -> str:
    return mimetypes.guess_type(path.name)[0] or "application/octet-stream"


def list_token_files(directory: Path, suffix: str) -> List[Tuple[int, Path]]:
    """`<int><suffix>` files in `directory`, sorted by token id."""
    found = []
    for p in Path(directory).iterdir():
        if p.is_file() and p.suffix == suffix and TOKEN_STEM.fullmatch(p.stem):
            found.append((int(p.stem), p))
    return sorted(found)


async def read_bytes(path: Path) -> bytes:
    async with aiofiles.open(path, "rb") as f:
        return await f.read()


async def upload_images(client: PinningClient, images_dir: Path,
                        progress: bool = True) -> List[PinnedFile]:
    pinned = []
    files = list_token_files(images_dir, ".png")
    for token_id, path in tqdm(files, desc="pinning images", unit="img", disable=not progress):
        data = await read_bytes(path)
        ipfs_hash = await client.upload_file(path.name, data, guess_type(path))
        uri = ipfs_uri(ipfs_hash)
        if progress:
            tqdm.write(f"[{path.name}] → {uri}")
        pinned.append(PinnedFile(token_id, path, uri))
    return pinned


async def upload_metadata_directory(client: PinningClient, metadata_dir: Path) -> str:
    parts = []
    for _, path in list_token_files(metadata_dir, ".json"):
        parts.append((path.name, await read_bytes(path), guess_type(path)))

    ipfs_hash = await client.upload_directory(Path(metadata_dir).name, parts)
    logger.info("metadata folder pinned: %s (%d files)", ipfs_hash, len(parts))
    return ipfs_uri(ipfs_hash)
