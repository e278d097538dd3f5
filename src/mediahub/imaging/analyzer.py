"""Image analysis: dimensions, dominant colour and JPEG thumbnail."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from io import BytesIO
from typing import Sequence

from PIL import Image, UnidentifiedImageError

from ..config import ThumbnailOptions
from ..exceptions import UnprocessableMediaError
from ..models import ImageData

logger = logging.getLogger(__name__)

_WHITE = (255, 255, 255)
# Pixels below this alpha do not count towards the dominant colour.
OPAQUE_ALPHA = 125


def format_hex_color(rgb: Sequence[int]) -> str:
    """Return ``#rrggbb`` for an RGB triple."""
    return "#" + "".join(f"{int(channel):02x}" for channel in rgb[:3])


def _flatten(image: Image.Image) -> Image.Image:
    """Return an RGB copy, compositing transparency onto white."""
    if image.mode in ("RGBA", "LA", "P"):
        rgba = image.convert("RGBA")
        background = Image.new("RGB", rgba.size, _WHITE)
        background.paste(rgba, mask=rgba.split()[-1])
        return background
    if image.mode != "RGB":
        return image.convert("RGB")
    return image.copy()


@dataclass(slots=True)
class ImageAnalyzer:
    """Decode image bytes and derive the metadata stored on media records."""

    options: ThumbnailOptions = field(default_factory=ThumbnailOptions)
    palette_size: int = 8
    sample_size: int = 200
    log: logging.Logger = field(default_factory=lambda: logger)

    async def analyze(self, source: bytes) -> ImageData:
        """Analyse ``source`` off the event loop.

        Raises:
            UnprocessableMediaError: If the bytes are not a decodable image.
        """
        return await asyncio.to_thread(self.analyze_bytes, source)

    def analyze_bytes(self, source: bytes) -> ImageData:
        try:
            with Image.open(BytesIO(source)) as image:
                image.load()
                width, height = image.size
                rgba = image.convert("RGBA")
                flat = _flatten(rgba)
        except (
            UnidentifiedImageError,
            OSError,
            SyntaxError,
            ValueError,
            Image.DecompressionBombError,
        ) as exc:
            raise UnprocessableMediaError(f"Unable to decode image: {exc}") from exc

        if width <= 0 or height <= 0:
            raise UnprocessableMediaError(f"Image has invalid dimensions {width}x{height}")

        try:
            thumbnail = self.render_thumbnail(flat)
        except (OSError, ValueError) as exc:
            raise UnprocessableMediaError(f"Unable to render thumbnail: {exc}") from exc

        return ImageData(
            width=width,
            height=height,
            color=self.dominant_color(rgba),
            thumbnail=thumbnail,
        )

    def dominant_color(self, image: Image.Image) -> str | None:
        """Median-cut the image palette and return its most frequent opaque colour.

        Transparent pixels are ignored. Returns None for fully transparent
        images and instead of raising; a missing colour never fails analysis.
        """
        try:
            sample = image.convert("RGBA")
            sample.thumbnail((self.sample_size, self.sample_size))
            mask = sample.getchannel("A").point(lambda alpha: 255 if alpha >= OPAQUE_ALPHA else 0)
            if mask.getbbox() is None:
                return None
            quantized = sample.convert("RGB").quantize(
                colors=self.palette_size, method=Image.Quantize.MEDIANCUT
            )
            palette = quantized.getpalette()
            counts = quantized.histogram(mask=mask)
            if not palette or not any(counts):
                return None
            index = max(range(len(counts)), key=counts.__getitem__)
            return format_hex_color(palette[index * 3 : index * 3 + 3])
        except Exception:
            self.log.warning("media.analyze.color_failed", exc_info=True)
            return None

    def render_thumbnail(self, image: Image.Image) -> bytes:
        """Scale so the longer edge equals the target size and encode as JPEG."""
        width, height = image.size
        scale = self.options.size / max(width, height)
        target = (max(1, round(width * scale)), max(1, round(height * scale)))
        resized = image.resize(target, Image.Resampling.LANCZOS)
        buffer = BytesIO()
        resized.save(buffer, format="JPEG", quality=self.options.quality)
        return buffer.getvalue()


__all__ = ["ImageAnalyzer", "format_hex_color"]
