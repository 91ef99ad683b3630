"""Train/evaluate driver: build the splits and the model, fit, test, report."""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from enum import Enum
from typing import Any

import lightning as L
from loguru import logger

from cardiomegaly_prediction.config import PipelineConfig
from cardiomegaly_prediction.data.datamodule import CardiomegalyDataModule
from cardiomegaly_prediction.io.checkpoint import save_model
from cardiomegaly_prediction.models.cnn import CardiomegalyCNN

LOSS_KEY = "test/loss"
ACCURACY_KEY = "test/acc"
MISSING_METRICS_MESSAGE = "Test results did not contain the expected metrics."


class PipelineStage(Enum):
    UNBUILT = "unbuilt"
    BUILT = "built"
    TRAINED = "trained"
    EVALUATED = "evaluated"


class CardiomegalyPipeline:
    """One strictly sequential run: Unbuilt -> Built -> Trained -> Evaluated.

    There is no retry or resume: an operation called out of order raises
    ``RuntimeError``, and any data, decode or shape error propagates.

    Args:
        datamodule: Provides the train/test splits and the shared class mapping.
        config: Run settings; defaults to ``PipelineConfig()``.
        model_factory: Called with ``input_height``, ``input_width`` and
            ``num_classes`` to build the model. Hydra passes a partial here.
        callbacks: Extra Lightning callbacks for the trainer.
    """

    def __init__(
        self,
        datamodule: CardiomegalyDataModule,
        config: PipelineConfig | None = None,
        model_factory: Callable[..., CardiomegalyCNN] = CardiomegalyCNN,
        callbacks: Sequence[L.Callback] = (),
    ) -> None:
        self.datamodule = datamodule
        self.config = config or PipelineConfig()
        self.model_factory = model_factory
        self.callbacks = list(callbacks)
        self.stage = PipelineStage.UNBUILT
        self.model: CardiomegalyCNN | None = None
        self.trainer: L.Trainer | None = None

    def _require(self, expected: PipelineStage, action: str) -> None:
        if self.stage is not expected:
            msg = (
                f"Cannot {action} in stage {self.stage.value!r}; "
                f"expected {expected.value!r}"
            )
            raise RuntimeError(msg)

    def _make_trainer(self, epochs: int) -> L.Trainer:
        trainer_kwargs: dict[str, Any] = {
            "accelerator": "auto",
            "devices": 1,
            "logger": False,
            "enable_checkpointing": False,
        }
        trainer_kwargs.update(self.config.trainer)
        trainer_kwargs["max_epochs"] = epochs
        return L.Trainer(callbacks=self.callbacks, **trainer_kwargs)

    def build_model(self) -> CardiomegalyCNN:
        """Create the network for the datamodule's image size and class count."""
        self._require(PipelineStage.UNBUILT, "build the model")
        if self.config.seed is not None:
            L.seed_everything(self.config.seed, workers=True)
        self.model = self.model_factory(
            input_height=self.datamodule.image_height,
            input_width=self.datamodule.image_width,
            num_classes=self.datamodule.num_classes,
        )
        self.stage = PipelineStage.BUILT
        logger.info(
            f"Built {type(self.model).__name__} for "
            f"{self.datamodule.image_height}x{self.datamodule.image_width} inputs, "
            f"{self.datamodule.num_classes} classes"
        )
        return self.model

    def train(self, epochs: int | None = None) -> None:
        """Fit on the train split, reshuffling every epoch."""
        self._require(PipelineStage.BUILT, "train")
        epochs = epochs if epochs is not None else self.config.epochs
        self.datamodule.setup("fit")
        self.trainer = self._make_trainer(epochs)
        logger.info(f"Training for {epochs} epoch(s)")
        self.trainer.fit(self.model, datamodule=self.datamodule)
        self.stage = PipelineStage.TRAINED

    def evaluate(self) -> dict[str, float]:
        """Compute loss and accuracy over the whole test split."""
        self._require(PipelineStage.TRAINED, "evaluate")
        if self.trainer is None:
            raise RuntimeError("Cannot evaluate: no trainer has been fitted")
        self.datamodule.setup("test")
        results = self.trainer.test(
            self.model, datamodule=self.datamodule, verbose=False
        )
        self.stage = PipelineStage.EVALUATED
        metrics = dict(results[0]) if results else {}
        logger.info(f"Test metrics: {metrics}")
        return metrics

    @staticmethod
    def report(results: Mapping[str, Any]) -> None:
        """Print test loss and accuracy, or a diagnostic if either is absent."""
        if LOSS_KEY in results and ACCURACY_KEY in results:
            print(f"Test Loss: {float(results[LOSS_KEY])}")
            print(f"Test Accuracy: {float(results[ACCURACY_KEY])}")
        else:
            logger.warning(f"Unexpected test result keys: {sorted(results)}")
            print(MISSING_METRICS_MESSAGE)

    def train_and_evaluate(self, epochs: int | None = None) -> dict[str, float]:
        """Run the whole pipeline once and return the test metrics.

        Both splits are loaded before the model is built, so a bad image fails
        the run before any training time is spent.
        """
        self.datamodule.setup()
        if self.stage is PipelineStage.UNBUILT:
            self.build_model()
        self.train(epochs)
        results = self.evaluate()
        self.report(results)

        if self.config.save_path is not None:
            if self.model is None:
                raise RuntimeError("Cannot save: no model has been built")
            save_model(self.model, self.config.save_path, self.datamodule.class_to_idx)
        return results
