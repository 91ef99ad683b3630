"""Single-image loading: JPEG decode, resize, and [0, 1] normalization."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

import torch
from PIL import Image, UnidentifiedImageError
from torchvision.transforms import v2

from cardiomegaly_prediction.transforms import build_image_transforms

# MPO is the multi-picture JPEG container some cameras write; PIL reports it
# separately but it decodes exactly like a baseline JPEG.
JPEG_FORMATS = frozenset({"JPEG", "MPO"})


class DecodeError(ValueError):
    """Raised when a file cannot be read and decoded as a 3-channel JPEG."""


@lru_cache(maxsize=8)
def _transforms_for(target_height: int, target_width: int) -> v2.Compose:
    return build_image_transforms(target_height, target_width)


def load_image(
    file_path: str | Path, target_width: int, target_height: int
) -> torch.Tensor:
    """Load one JPEG as a float32 ``(target_height, target_width, 3)`` tensor.

    Pixel values are divided by 255 so they lie in [0, 1]. The result depends
    only on the file contents and the target size.

    Raises:
        ValueError: target_width or target_height is not positive.
        DecodeError: the file is missing, unreadable, or not a decodable JPEG.
    """
    if target_width <= 0 or target_height <= 0:
        msg = (
            f"Target size must be positive, got "
            f"width={target_width}, height={target_height}"
        )
        raise ValueError(msg)

    path = Path(file_path)
    try:
        with Image.open(path) as img:
            if img.format not in JPEG_FORMATS:
                msg = f"Not a JPEG image ({img.format}): {path}"
                raise DecodeError(msg)
            rgb = img.convert("RGB")
    except DecodeError:
        raise
    except (OSError, UnidentifiedImageError) as e:
        msg = f"Failed to decode image {path}: {e}"
        raise DecodeError(msg) from e

    image: torch.Tensor = _transforms_for(target_height, target_width)(rgb)
    return image
