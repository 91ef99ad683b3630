"""Small two-stage convolutional network for cardiomegaly classification."""

from __future__ import annotations

import torch
from torch import nn

from cardiomegaly_prediction.models.base import BaseClassificationModel
from cardiomegaly_prediction.utils.hydra import register

KERNEL_SIZE = 3
POOL_SIZE = 2


def conv_output_size(height: int, width: int) -> tuple[int, int]:
    """Spatial size after two (valid 3x3 conv, 2x2 max-pool) stages."""

    def _reduce(n: int) -> int:
        for _ in range(2):
            n = (n - KERNEL_SIZE + 1) // POOL_SIZE
        return n

    return _reduce(height), _reduce(width)


@register(group="model", name="cardiomegaly_cnn")
class CardiomegalyCNN(BaseClassificationModel):
    """Conv(32) -> Pool -> Conv(64) -> Pool -> Dense(256) -> Dropout -> Softmax.

    Takes channels-last ``(B, H, W, 3)`` images in [0, 1] and returns class
    probabilities of shape ``(B, num_classes)``.  Convolutions and pools use
    valid padding, so inputs smaller than 10 pixels on a side are rejected.
    """

    def __init__(
        self,
        input_height: int = 224,
        input_width: int = 224,
        num_classes: int = 2,
    ) -> None:
        super().__init__(num_classes=num_classes, learning_rate=1e-3)
        out_h, out_w = conv_output_size(input_height, input_width)
        if out_h <= 0 or out_w <= 0:
            msg = (
                f"Input {input_height}x{input_width} is too small: two valid "
                f"3x3 conv + 2x2 pool stages reduce it to {out_h}x{out_w}"
            )
            raise ValueError(msg)
        self.save_hyperparameters()

        self.features = nn.Sequential(
            nn.Conv2d(3, 32, kernel_size=KERNEL_SIZE, padding="valid"),
            nn.ReLU(),
            nn.MaxPool2d(POOL_SIZE),
            nn.Conv2d(32, 64, kernel_size=KERNEL_SIZE, padding="valid"),
            nn.ReLU(),
            nn.MaxPool2d(POOL_SIZE),
        )
        self.classifier = nn.Sequential(
            nn.Flatten(),
            nn.Linear(64 * out_h * out_w, 256),
            nn.ReLU(),
            nn.Dropout(p=0.5),
            nn.Linear(256, num_classes),
            nn.Softmax(dim=1),
        )

    def forward(self, images: torch.Tensor) -> torch.Tensor:
        # (B, H, W, 3) -> (B, 3, H, W)
        x = images.permute(0, 3, 1, 2)
        x = self.features(x)
        return self.classifier(x)  # type: ignore[no-any-return]
