"""Type aliases and TypedDicts for cardiomegaly_prediction inter-module contracts."""

from typing import NamedTuple, TypedDict

import torch


class ClassificationBatch(TypedDict):
    """A single batch from a classification DataLoader.

    images: Float tensor of shape (B, H, W, 3), channels-last, values in [0, 1].
    labels: Long tensor of shape (B,), integer class indices.
    """

    images: torch.Tensor
    labels: torch.Tensor


class ImageArrays(NamedTuple):
    """A fully materialized split: two parallel tensors of equal length N.

    images: Float tensor of shape (N, H, W, 3).
    labels: Long tensor of shape (N,).
    """

    images: torch.Tensor
    labels: torch.Tensor
