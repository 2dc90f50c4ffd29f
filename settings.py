"""
Run configuration for the placeholder mint.

Values come from a local `.env` (if present) and then the process
environment:

    IMAGE_COUNT      how many tokens to render            (default 5)
    PINATA_JWT       bearer token for the Pinata API      (required to pin)
    PINATA_GATEWAY   gateway host for the sample URL      (gateway.pinata.cloud)
    PINATA_API_URL   Pinata API root                      (https://api.pinata.cloud)
    OUTPUT_DIR       where images/ and metadata/ live     (./output)
    IMAGE_SEED       seed for background colours          (unset = random)
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from dotenv import load_dotenv

DEFAULT_COUNT   = 5
DEFAULT_GATEWAY = "gateway.pinata.cloud"
DEFAULT_API_URL = "https://api.pinata.cloud"
DEFAULT_OUTPUT  = Path("output")
WIDTH, HEIGHT   = 512, 512


class PipelineError(Exception):
    """Base class for everything the pipeline raises on purpose."""


class ConfigError(PipelineError):
    pass


@dataclass(frozen=True)
class PipelineConfig:
    image_count: int = DEFAULT_COUNT
    pinata_jwt: Optional[str] = None
    gateway_host: str = DEFAULT_GATEWAY
    api_url: str = DEFAULT_API_URL
    output_dir: Path = DEFAULT_OUTPUT
    seed: Optional[int] = None
    width: int = WIDTH
    height: int = HEIGHT

    def __post_init__(self):
        if self.image_count < 0:
            raise ConfigError(f"image count must be >= 0, got {self.image_count}")
        if self.width <= 0 or self.height <= 0:
            raise ConfigError(f"bad image size {self.width}x{self.height}")

    @property
    def images_dir(self) -> Path:
        return Path(self.output_dir) / "images"

    @property
    def metadata_dir(self) -> Path:
        return Path(self.output_dir) / "metadata"

    def require_jwt(self) -> str:
        if not self.pinata_jwt:
            raise ConfigError("PINATA_JWT is not set (add it to .env or the environment)")
        return self.pinata_jwt


def _int_env(env: Mapping[str, str], key: str, default: Optional[int]) -> Optional[int]:
    raw = env.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{key} must be an integer, got {raw!r}") from None


def load_config(env: Optional[Mapping[str, str]] = None, dotenv: bool = True) -> PipelineConfig:
    """
    Build a PipelineConfig from `env` (defaults to os.environ).

    When reading the real environment the `.env` file is loaded first, so
    exported variables still win over it.
    """
    if env is None:
        if dotenv:
            load_dotenv()
        env = os.environ

    return PipelineConfig(
        image_count  = _int_env(env, "IMAGE_COUNT", DEFAULT_COUNT),
        pinata_jwt   = env.get("PINATA_JWT") or None,
        gateway_host = env.get("PINATA_GATEWAY") or DEFAULT_GATEWAY,
        api_url      = (env.get("PINATA_API_URL") or DEFAULT_API_URL).rstrip("/"),
        output_dir   = Path(env.get("OUTPUT_DIR") or DEFAULT_OUTPUT),
        seed         = _int_env(env, "IMAGE_SEED", None),
    )
