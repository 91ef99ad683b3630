"""Loss functions for classification training."""

from __future__ import annotations

import torch
import torch.nn as nn
import torch.nn.functional as F


class SparseCategoricalCrossentropy(nn.Module):
    """Cross-entropy between predicted class probabilities and integer labels.

    Unlike ``nn.CrossEntropyLoss`` this expects *probabilities* (the output of
    a softmax layer), not logits. Probabilities are clipped to
    ``[epsilon, 1 - epsilon]`` before the log so a confident wrong prediction
    gives a large finite loss instead of ``inf``.

    Parameters
    ----------
    epsilon:
        Clipping bound for probabilities.
    """

    def __init__(self, epsilon: float = 1e-7) -> None:
        super().__init__()
        self.epsilon = epsilon

    def forward(self, probs: torch.Tensor, targets: torch.Tensor) -> torch.Tensor:
        """Compute the mean loss.

        Parameters
        ----------
        probs:
            Class probabilities of shape ``(B, C)``; rows sum to 1.
        targets:
            Ground-truth class indices of shape ``(B,)``.
        """
        clipped = probs.clamp(self.epsilon, 1.0 - self.epsilon)
        return F.nll_loss(torch.log(clipped), targets)
