"""
Placeholder artwork: a solid random background with a bold white
`NFT #<id>` label, saved as output/images/<id>.png.
"""

import functools
import io
import logging
import random
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

import aiofiles
from PIL import Image, ImageDraw, ImageFont

logger = logging.getLogger(__name__)

HEX_DIGITS  = "0123456789ABCDEF"
LABEL_COLOR = "#FFFFFF"
FONT_SIZE   = 50
BOLD_FONTS  = (
    "DejaVuSans-Bold.ttf",
    "LiberationSans-Bold.ttf",
    "Arial Bold.ttf",
    "arialbd.ttf",
    "Helvetica-Bold.ttf",
)


@dataclass(frozen=True)
class RenderedImage:
    token_id: int
    path: Path
    color: str


def random_color(rng: Optional[random.Random] = None) -> str:
    """Uniform pick over the 24-bit RGB space, as `#RRGGBB`."""
    rng = rng or random
    return "#" + "".join(rng.choice(HEX_DIGITS) for _ in range(6))


def label_for(token_id: int) -> str:
    return f"NFT #{token_id}"


@functools.lru_cache(maxsize=None)
def _bold_font(size: int):
    """First bold TrueType font we can find; (font, is_real_bold)."""
    for name in BOLD_FONTS:
        try:
            return ImageFont.truetype(name, size), True
        except OSError:
            continue
    return ImageFont.load_default(size=size), False


def render_token(token_id: int, color: str, size: Tuple[int, int] = (512, 512)) -> Image.Image:
    width, height = size
    img = Image.new("RGB", (width, height), color)
    draw = ImageDraw.Draw(img)

    font, real_bold = _bold_font(FONT_SIZE)
    kwargs = {"fill": LABEL_COLOR, "font": font}
    if isinstance(font, ImageFont.FreeTypeFont):
        kwargs["anchor"] = "ls"             # x/y is the left end of the baseline
        if not real_bold:
            kwargs.update(stroke_width=1, stroke_fill=LABEL_COLOR)

    draw.text((width / 4, height / 2), label_for(token_id), **kwargs)
    return img


def encode_png(img: Image.Image) -> bytes:
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def image_path(images_dir: Path, token_id: int) -> Path:
    return Path(images_dir) / f"{token_id}.png"


async def generate_image(token_id: int, images_dir: Path,
                         rng: Optional[random.Random] = None,
                         size: Tuple[int, int] = (512, 512)) -> RenderedImage:
    color = random_color(rng)
    data = encode_png(render_token(token_id, color, size))

    outfile = image_path(images_dir, token_id)
    async with aiofiles.open(outfile, "wb") as f:
        await f.write(data)

    logger.debug("rendered %s (%s, %d bytes)", outfile, color, len(data))
    return RenderedImage(token_id, outfile, color)
