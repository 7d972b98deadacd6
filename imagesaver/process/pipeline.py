"""Composable image transforms applied to encoded bytes."""

from __future__ import annotations

import io
from collections.abc import Callable

from PIL import Image, ImageOps

from imagesaver.formats import format_for_extension
from imagesaver.utils.image import encode_image

Transformer = Callable[[bytes], bytes]

_Op = Callable[[Image.Image], Image.Image]


class Pipeline:
    """A chain of Pillow operations that maps image bytes to image bytes.

    Operations run in the order they were added. The output is encoded in the
    format set with ``to_format`` or, by default, the input's own format::

        thumb = Pipeline().resize(width=320).rotate(90).to_format("png")
        png_bytes = thumb(jpeg_bytes)

    Any ``Callable[[bytes], bytes]`` can stand in for a pipeline wherever a
    transformer is expected.
    """

    def __init__(self) -> None:
        self._ops: list[_Op] = []
        self._format: str | None = None
        self._quality = 95

    def __len__(self) -> int:
        return len(self._ops)

    def __call__(self, data: bytes) -> bytes:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            source_format = img.format or "png"
            result: Image.Image = img
            for op in self._ops:
                result = op(result)
            return encode_image(result, self._format or source_format, self._quality)

    # ------------------------------------------------------------------

    def resize(self, width: int | None = None, height: int | None = None) -> Pipeline:
        """Resize; a missing side is derived from the aspect ratio."""
        if width is None and height is None:
            raise ValueError("resize() needs a width, a height or both")
        if (width is not None and width <= 0) or (height is not None and height <= 0):
            raise ValueError(f"Invalid size: {width}x{height}")

        def op(img: Image.Image) -> Image.Image:
            w, h = width, height
            if w is None:
                w = max(1, round(img.width * h / img.height))
            elif h is None:
                h = max(1, round(img.height * w / img.width))
            return img.resize((w, h), Image.Resampling.LANCZOS)

        self._ops.append(op)
        return self

    def crop(self, left: int, top: int, width: int, height: int) -> Pipeline:
        """Extract a region. The region must lie inside the image."""

        def op(img: Image.Image) -> Image.Image:
            if left < 0 or top < 0 or width <= 0 or height <= 0 or (
                left + width > img.width or top + height > img.height
            ):
                raise ValueError(
                    f"Crop area {left},{top} {width}x{height} is outside a "
                    f"{img.width}x{img.height} image"
                )
            return img.crop((left, top, left + width, top + height))

        self._ops.append(op)
        return self

    def rotate(self, angle: float) -> Pipeline:
        """Rotate clockwise by ``angle`` degrees, growing the canvas to fit."""
        self._ops.append(lambda img: img.rotate(-angle, expand=True))
        return self

    def flip(self) -> Pipeline:
        """Mirror vertically (top becomes bottom)."""
        self._ops.append(ImageOps.flip)
        return self

    def flop(self) -> Pipeline:
        """Mirror horizontally (left becomes right)."""
        self._ops.append(ImageOps.mirror)
        return self

    def grayscale(self) -> Pipeline:
        self._ops.append(lambda img: img.convert("LA") if "A" in img.getbands() else img.convert("L"))
        return self

    def to_format(self, fmt: str, quality: int | None = None) -> Pipeline:
        """Encode the output as ``fmt`` (``"png"``, ``"jpg"``, ``"webp"``...)."""
        self._format = format_for_extension(fmt)
        if quality is not None:
            self._quality = quality
        return self
