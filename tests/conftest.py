"""
Shared fixtures: a small run config under tmp_path and an in-memory
stand-in for Pinata.
"""

from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import pytest

from pinning import PinningError
from settings import PipelineConfig


class StubPinningClient:
    """Hands out hash-0, hash-1, … per file and `dir_hash` per folder."""

    def __init__(self, dir_hash: str = "dir-hash", fail_on: Optional[int] = None):
        self.dir_hash = dir_hash
        self.fail_on = fail_on
        self.files: List[Tuple[str, bytes, str]] = []
        self.directories: List[Tuple[str, list]] = []

    async def upload_file(self, name: str, data: bytes, content_type: str) -> str:
        index = len(self.files)
        self.files.append((name, data, content_type))
        if index == self.fail_on:
            raise PinningError(f"upload of {name} rejected", status=500)
        return f"hash-{index}"

    async def upload_directory(self, dirname: str, files: Sequence[Tuple[str, bytes, str]]) -> str:
        self.directories.append((dirname, list(files)))
        return self.dir_hash


@pytest.fixture
def stub_client() -> StubPinningClient:
    return StubPinningClient()


@pytest.fixture
def make_config(tmp_path: Path):
    def _make(count: int = 3, seed: Optional[int] = 1, name: str = "output") -> PipelineConfig:
        return PipelineConfig(
            image_count=count,
            output_dir=tmp_path / name,
            seed=seed,
            width=128,
            height=128,
        )
    return _make
