"""
Write output/metadata/<id>.json for every pinned image:

    {
      "name": "My NFT #<id>",
      "description": "This is the description for NFT #<id>.",
      "image": "ipfs://<image cid>",
      "attributes": [{"trait_type": "BackgroundColor", "value": "#RRGGBB"}]
    }

The token id comes from the pinned image itself, so metadata N always points
at image N.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from tqdm import tqdm

from pinning import SCHEME, PinnedFile

PLACEHOLDER_COLOR = "RandomColor"


@dataclass(frozen=True)
class NftTrait:
    trait_type: str
    value: str

    def to_dict(self) -> dict:
        return {"trait_type": self.trait_type, "value": self.value}


@dataclass(frozen=True)
class NftMetadata:
    name: str
    description: str
    image: str
    attributes: List[NftTrait] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "description": self.description,
            "image": self.image,
            "attributes": [a.to_dict() for a in self.attributes],
        }


def check_image_uri(uri: str) -> str:
    if not isinstance(uri, str) or not uri.startswith(SCHEME) or len(uri) == len(SCHEME):
        raise ValueError(f"not an ipfs:// URI: {uri!r}")
    return uri


def build_metadata(token_id: int, image_uri: str, color: Optional[str] = None) -> NftMetadata:
    return NftMetadata(
        name=f"My NFT #{token_id}",
        description=f"This is the description for NFT #{token_id}.",
        image=check_image_uri(image_uri),
        attributes=[NftTrait("BackgroundColor", color or PLACEHOLDER_COLOR)],
    )


def metadata_path(metadata_dir: Path, token_id: int) -> Path:
    return Path(metadata_dir) / f"{token_id}.json"


def write_metadata(metadata_dir: Path, token_id: int, record: NftMetadata) -> Path:
    dst = metadata_path(metadata_dir, token_id)
    dst.write_text(json.dumps(record.to_dict(), indent=2), encoding="utf-8")
    return dst


def generate_metadata(pinned: Iterable[PinnedFile], metadata_dir: Path,
                      colors: Optional[Dict[int, str]] = None,
                      progress: bool = True) -> List[Path]:
    metadata_dir = Path(metadata_dir)
    metadata_dir.mkdir(parents=True, exist_ok=True)
    colors = colors or {}

    written = []
    for item in tqdm(list(pinned), desc="writing metadata", unit="json", disable=not progress):
        record = build_metadata(item.token_id, item.uri, colors.get(item.token_id))
        written.append(write_metadata(metadata_dir, item.token_id, record))
    return written
