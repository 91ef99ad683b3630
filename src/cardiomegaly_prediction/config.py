"""Pydantic frozen configuration models for cardiomegaly_prediction."""

from typing import Any

from loguru import logger
from pydantic import BaseModel, Field, PositiveInt, model_validator


class DataModuleConfig(BaseModel, frozen=True):
    """Configuration for CardiomegalyDataModule.

    All fields are validated at construction time. Frozen: no mutation after creation.

    ``batch_size=None`` feeds the whole split as a single batch per epoch.
    ``extensions=None`` treats every file under a class directory as an image,
    so a stray non-JPEG file aborts the dataset build.
    ``num_classes`` fixes the classifier width independently of how many class
    directories the train root happens to contain.
    """

    train_root: str
    test_root: str
    image_height: PositiveInt = 224
    image_width: PositiveInt = 224
    batch_size: PositiveInt | None = None
    num_workers: int = Field(default=0, ge=0)
    pin_memory: bool = False
    persistent_workers: bool = False
    in_memory: bool = True
    extensions: tuple[str, ...] | None = None
    num_classes: int = Field(default=2, ge=2)

    @model_validator(mode="after")
    def _warn_on_shared_root(self) -> "DataModuleConfig":
        """Evaluating on the training images is allowed but rarely intended."""
        if self.train_root == self.test_root:
            logger.warning(
                f"train_root and test_root are both {self.train_root!r}; "
                "test metrics will be measured on the training images"
            )
        return self

    @model_validator(mode="after")
    def _persistent_workers_requires_workers(self) -> "DataModuleConfig":
        """persistent_workers=True with num_workers=0 silently does nothing."""
        if self.persistent_workers and self.num_workers == 0:
            # Use object.__setattr__ because model is frozen
            object.__setattr__(self, "persistent_workers", False)
        return self


class PipelineConfig(BaseModel, frozen=True):
    """Run-level settings for CardiomegalyPipeline.

    trainer: Extra keyword arguments forwarded to ``lightning.Trainer``.
    save_path: Where to write the trained weights after a successful
        evaluation. ``None`` disables persistence.
    """

    epochs: PositiveInt = 3
    seed: int | None = 42
    save_path: str | None = None
    trainer: dict[str, Any] = Field(default_factory=dict)
