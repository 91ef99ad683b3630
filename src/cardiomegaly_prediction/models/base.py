"""Base LightningModule for probability-output classification models."""

from __future__ import annotations

import lightning as L
import torch
from torchmetrics.classification import MulticlassAccuracy

from cardiomegaly_prediction.losses import SparseCategoricalCrossentropy
from cardiomegaly_prediction.types import ClassificationBatch


class BaseClassificationModel(L.LightningModule):
    """Shared train/test loop for classifiers whose forward returns probabilities.

    Subclasses build their layers in ``__init__`` and implement ``forward()``
    returning a ``(B, num_classes)`` softmax output.  Compilation settings are
    fixed: Adam, sparse categorical cross-entropy, and top-1 accuracy.

    Logged metrics: ``train/loss``, ``train/acc``, ``test/loss``, ``test/acc``.
    """

    def __init__(self, num_classes: int, learning_rate: float = 1e-3) -> None:
        super().__init__()
        self.num_classes = num_classes
        self.learning_rate = learning_rate
        self.loss_fn = SparseCategoricalCrossentropy()

        # Pattern A metrics -- one per split, auto device placement.
        self.train_acc = MulticlassAccuracy(
            num_classes=num_classes, top_k=1, average="micro"
        )
        self.test_acc = MulticlassAccuracy(
            num_classes=num_classes, top_k=1, average="micro"
        )

    def training_step(
        self, batch: ClassificationBatch, batch_idx: int
    ) -> torch.Tensor:
        images, labels = batch["images"], batch["labels"]
        probs = self(images)
        loss: torch.Tensor = self.loss_fn(probs, labels)
        self.log(
            "train/loss",
            loss,
            on_step=True,
            on_epoch=True,
            prog_bar=True,
            batch_size=len(labels),
        )
        # Pattern A: update only in step; compute+log+reset in epoch_end
        self.train_acc.update(probs, labels)
        return loss

    def on_train_epoch_end(self) -> None:
        self.log("train/acc", self.train_acc.compute(), prog_bar=True)
        self.train_acc.reset()

    def test_step(
        self, batch: ClassificationBatch, batch_idx: int
    ) -> None:
        images, labels = batch["images"], batch["labels"]
        probs = self(images)
        loss = self.loss_fn(probs, labels)
        self.log(
            "test/loss", loss, on_step=False, on_epoch=True, batch_size=len(labels)
        )
        self.test_acc.update(probs, labels)

    def on_test_epoch_end(self) -> None:
        self.log("test/acc", self.test_acc.compute())
        self.test_acc.reset()

    def configure_optimizers(self) -> torch.optim.Optimizer:
        return torch.optim.Adam(self.parameters(), lr=self.learning_rate)
