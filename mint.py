#!/usr/bin/env python3
"""
Placeholder NFT mint, end to end:

1. Render IMAGE_COUNT placeholder PNGs into output/images/<id>.png
2. Pin each image to Pinata and collect ipfs://<cid> per token
3. Write output/metadata/<id>.json pointing at those images
4. Pin output/metadata/ as one folder and report its base URI

Usage:
  pip install -e .
  echo "PINATA_JWT=..." > .env
  placeholder-mint          # or: python mint.py
"""

import asyncio
import enum
import logging
import random
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from tqdm import tqdm

from meta import generate_metadata
from pinning import (PinataClient, PinnedFile, PinningClient, gateway_url,
                     list_token_files, upload_images, upload_metadata_directory)
from render import RenderedImage, generate_image
from settings import PipelineConfig, load_config

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------


class Stage(enum.Enum):
    INIT               = "init"
    IMAGES_GENERATED   = "images generated"
    IMAGES_UPLOADED    = "images uploaded"
    METADATA_GENERATED = "metadata generated"
    METADATA_UPLOADED  = "metadata uploaded"
    DONE               = "done"


@dataclass
class PipelineResult:
    metadata_base_uri: str
    example_url: str
    images: List[RenderedImage] = field(default_factory=list)
    pinned: List[PinnedFile] = field(default_factory=list)
    stage: Stage = Stage.INIT

    @property
    def image_uris(self) -> List[str]:
        return [p.uri for p in self.pinned]


class PipelineFailed(Exception):
    """Wraps whatever broke the run, remembering how far it got."""

    def __init__(self, stage: Stage, cause: BaseException):
        super().__init__(f"failed after stage '{stage.value}': {cause}")
        self.stage = stage
        self.cause = cause


def prepare_output_dirs(config: PipelineConfig) -> None:
    """
    Create output/images and output/metadata (safe to call repeatedly) and
    drop token files left over from an earlier, possibly larger, run.
    """
    for directory, suffix in ((config.images_dir, ".png"), (config.metadata_dir, ".json")):
        directory.mkdir(parents=True, exist_ok=True)
        for _, stale in list_token_files(directory, suffix):
            stale.unlink()


async def generate_images(config: PipelineConfig, rng: random.Random,
                          progress: bool = True) -> List[RenderedImage]:
    size = (config.width, config.height)
    return [
        await generate_image(i, config.images_dir, rng, size)
        for i in tqdm(range(config.image_count), desc="rendering", unit="img",
                      disable=not progress)
    ]


async def run_pipeline(config: PipelineConfig, client: PinningClient,
                       progress: bool = True) -> PipelineResult:
    stage = Stage.INIT
    try:
        prepare_output_dirs(config)

        images = await generate_images(config, random.Random(config.seed), progress)
        colors: Dict[int, str] = {img.token_id: img.color for img in images}
        stage = Stage.IMAGES_GENERATED

        pinned = await upload_images(client, config.images_dir, progress)
        stage = Stage.IMAGES_UPLOADED

        generate_metadata(pinned, config.metadata_dir, colors, progress)
        stage = Stage.METADATA_GENERATED

        base_uri = await upload_metadata_directory(client, config.metadata_dir)
        stage = Stage.METADATA_UPLOADED
    except Exception as e:
        raise PipelineFailed(stage, e) from e

    stage = Stage.DONE
    logger.info("pipeline %s", stage.value)
    return PipelineResult(
        metadata_base_uri=base_uri,
        example_url=gateway_url(config.gateway_host, base_uri, "0.json"),
        images=images,
        pinned=pinned,
        stage=stage,
    )


async def amain(config: Optional[PipelineConfig] = None) -> PipelineResult:
    config = config or load_config()
    async with PinataClient(config.require_jwt(), config.api_url) as client:
        return await run_pipeline(config, client)


def report(result: PipelineResult) -> None:
    print(f"Metadata Base URI: {result.metadata_base_uri}")
    print(f"Example token metadata URL: {result.example_url}")


# ---------------------------------------------------------------------------

def main() -> None:
    logging.basicConfig(level=logging.INFO,
                        format="%(asctime)s - %(levelname)s - %(message)s")
    try:
        config = load_config()
        print(f"🎨 Minting {config.image_count} placeholder(s) into '{Path(config.output_dir)}/' …")
        result = asyncio.run(amain(config))
    except KeyboardInterrupt:
        sys.exit("\nInterrupted by user")
    except PipelineFailed as e:
        logger.error("❌ %s", e, exc_info=e.cause)
        sys.exit(1)
    except Exception as e:
        logger.error("❌ %s", e)
        sys.exit(1)

    print("✅ Done!")
    report(result)


if __name__ == "__main__":
    main()
