"""Deterministic preprocessing transforms for chest X-ray images."""

from __future__ import annotations

from typing import Any

import torch
from torchvision.transforms import v2


class ToChannelsLast(v2.Transform):
    """Permute a ``(C, H, W)`` image tensor to ``(H, W, C)``.

    Datasets and the model exchange channels-last images; only the model
    itself switches to channels-first for its convolutions.
    """

    def forward(self, *inputs: Any) -> Any:
        image: torch.Tensor = inputs[0]
        return image.as_subclass(torch.Tensor).permute(1, 2, 0).contiguous()


def build_image_transforms(target_height: int, target_width: int) -> v2.Compose:
    """PIL image -> float32 ``(target_height, target_width, 3)`` tensor in [0, 1].

    Resize happens on the uint8 image so the rescale to [0, 1] is the last
    numeric step. No randomness: two passes over one image are identical.
    """
    return v2.Compose([
        v2.ToImage(),
        v2.Resize((target_height, target_width), antialias=True),
        v2.ToDtype(torch.float32, scale=True),
        ToChannelsLast(),
    ])
