"""LightningDataModule for the train/test cardiomegaly X-ray splits."""

import json
from pathlib import Path
from typing import Any

import lightning as L
import torch
from loguru import logger
from torch.utils.data import DataLoader, Dataset

from cardiomegaly_prediction.config import DataModuleConfig
from cardiomegaly_prediction.data.dataset import (
    ClassMismatchError,
    ImageFolderDataset,
    InMemoryImageDataset,
)
from cardiomegaly_prediction.data.utils import build_class_to_idx
from cardiomegaly_prediction.types import ClassificationBatch


class CardiomegalyDataModule(L.LightningDataModule):
    """DataModule over two class-per-directory split roots.

    Reads ``train_root/<class>/*.jpg`` and ``test_root/<class>/*.jpg``.
    No augmentation: every image is only resized and scaled to [0, 1].

    class_to_idx is built once from the train root, sorted by name, and shared
    with the test split, so label semantics never depend on directory
    enumeration order.

    With ``in_memory=True`` (the default) each split is decoded eagerly into
    an :class:`ImageArrays` pair at setup time. With ``in_memory=False``
    images are decoded per batch.

    Args:
        config: DataModuleConfig frozen model. If provided, flat kwargs are ignored.
        train_root: Train split root (used when config is None, e.g. Hydra).
        test_root: Test split root (used when config is None).
        image_height: Target image height (default: 224).
        image_width: Target image width (default: 224).
        batch_size: Mini-batch size; ``None`` means one batch per split.
        num_workers: Number of DataLoader workers (default: 0).
        pin_memory: Whether to pin memory (default: False).
        persistent_workers: Keep workers alive between epochs (default: False).
        in_memory: Materialize splits eagerly (default: True).
        extensions: Optional lowercase suffix filter for image files.
        num_classes: Width of the classifier head (default: 2). The train root
            may hold fewer class directories, never more.
        **kwargs: Absorbs extra Hydra-injected keys (_target_, _recursive_, etc.).
    """

    def __init__(
        self,
        config: DataModuleConfig | None = None,
        *,
        train_root: str = "",
        test_root: str = "",
        image_height: int = 224,
        image_width: int = 224,
        batch_size: int | None = None,
        num_workers: int = 0,
        pin_memory: bool = False,
        persistent_workers: bool = False,
        in_memory: bool = True,
        extensions: list[str] | tuple[str, ...] | None = None,
        num_classes: int = 2,
        **kwargs: Any,
    ) -> None:
        super().__init__()
        if config is not None:
            self._config = config
        else:
            self._config = DataModuleConfig(
                train_root=train_root,
                test_root=test_root,
                image_height=image_height,
                image_width=image_width,
                batch_size=batch_size,
                num_workers=num_workers,
                pin_memory=pin_memory,
                persistent_workers=persistent_workers,
                in_memory=in_memory,
                extensions=tuple(extensions) if extensions is not None else None,
                num_classes=num_classes,
            )
        self._train_root = Path(self._config.train_root)
        self._test_root = Path(self._config.test_root)

        self._class_to_idx: dict[str, int] | None = None
        self._train_dataset: Dataset[tuple[torch.Tensor, int]] | None = None
        self._test_dataset: Dataset[tuple[torch.Tensor, int]] | None = None

    @property
    def config(self) -> DataModuleConfig:
        return self._config

    @property
    def image_height(self) -> int:
        return self._config.image_height

    @property
    def image_width(self) -> int:
        return self._config.image_width

    # ------------------------------------------------------------------
    # Class mapping: built from train only, sorted
    # ------------------------------------------------------------------

    @property
    def class_to_idx(self) -> dict[str, int]:
        """Name-sorted class_to_idx built from the train root.

        Built lazily on first access. Safe to call before setup().

        Raises:
            ClassMismatchError: The train root has more class directories
                than ``num_classes``.
        """
        if self._class_to_idx is None:
            class_to_idx = build_class_to_idx(self._train_root)
            if len(class_to_idx) > self._config.num_classes:
                msg = (
                    f"{self._train_root} has {len(class_to_idx)} class directories "
                    f"{sorted(class_to_idx)}, expected at most {self._config.num_classes}"
                )
                raise ClassMismatchError(msg)
            if len(class_to_idx) < self._config.num_classes:
                logger.warning(
                    f"{self._train_root} has {len(class_to_idx)} class directories, "
                    f"model still predicts {self._config.num_classes} classes"
                )
            self._class_to_idx = class_to_idx
        return self._class_to_idx

    @property
    def num_classes(self) -> int:
        """Fixed classifier width, independent of the directory scan."""
        return self._config.num_classes

    # ------------------------------------------------------------------
    # LightningDataModule lifecycle
    # ------------------------------------------------------------------

    def _build_split(self, root: Path) -> Dataset[tuple[torch.Tensor, int]]:
        folder = ImageFolderDataset(
            root=root,
            class_to_idx=self.class_to_idx,
            target_width=self._config.image_width,
            target_height=self._config.image_height,
            extensions=self._config.extensions,
        )
        if self._config.in_memory:
            return InMemoryImageDataset(folder.materialize())
        return folder

    def setup(self, stage: str | None = None) -> None:
        """Instantiate datasets for the given stage.

        Args:
            stage: "fit", "test", or None (both).
                   "fit" instantiates train only; there is no validation split.
                   "test" instantiates test only.
        """
        if stage in ("fit", None) and self._train_dataset is None:
            self._train_dataset = self._build_split(self._train_root)
            logger.info(f"Setup fit: train={len(self._train_dataset)} samples")  # type: ignore[arg-type]

        if stage in ("test", None) and self._test_dataset is None:
            self._test_dataset = self._build_split(self._test_root)
            logger.info(f"Setup test: {len(self._test_dataset)} samples")  # type: ignore[arg-type]

    # ------------------------------------------------------------------
    # Collate: converts (image, label) tuples to ClassificationBatch dict
    # ------------------------------------------------------------------

    @staticmethod
    def _collate_fn(
        batch: list[tuple[torch.Tensor, int]],
    ) -> ClassificationBatch:
        """Collate (image, label) tuples into ClassificationBatch dict."""
        images = torch.stack([item[0] for item in batch])
        labels = torch.tensor([item[1] for item in batch], dtype=torch.long)
        return {"images": images, "labels": labels}

    # ------------------------------------------------------------------
    # DataLoaders
    # ------------------------------------------------------------------

    def _batch_size_for(self, dataset: Dataset[tuple[torch.Tensor, int]]) -> int:
        if self._config.batch_size is not None:
            return self._config.batch_size
        return max(1, len(dataset))  # type: ignore[arg-type]

    def train_dataloader(self) -> DataLoader[tuple[torch.Tensor, int]]:
        """Return training DataLoader, reshuffled every epoch."""
        if self._train_dataset is None:
            raise RuntimeError("Call setup('fit') first")
        return DataLoader(
            self._train_dataset,
            batch_size=self._batch_size_for(self._train_dataset),
            shuffle=True,
            num_workers=self._config.num_workers,
            pin_memory=self._config.pin_memory,
            persistent_workers=self._config.persistent_workers,
            collate_fn=self._collate_fn,
        )

    def test_dataloader(self) -> DataLoader[tuple[torch.Tensor, int]]:
        """Return test DataLoader (deterministic order)."""
        if self._test_dataset is None:
            raise RuntimeError("Call setup('test') first")
        return DataLoader(
            self._test_dataset,
            batch_size=self._batch_size_for(self._test_dataset),
            shuffle=False,
            num_workers=self._config.num_workers,
            pin_memory=self._config.pin_memory,
            persistent_workers=self._config.persistent_workers,
            collate_fn=self._collate_fn,
        )

    # ------------------------------------------------------------------
    # labels_mapping.json serialization
    # ------------------------------------------------------------------

    def save_labels_mapping(self, save_path: Path) -> None:
        """Persist class_to_idx and input geometry as labels_mapping.json.

        Args:
            save_path: Destination path for labels_mapping.json.
        """
        write_labels_mapping(
            save_path,
            self.class_to_idx,
            image_height=self._config.image_height,
            image_width=self._config.image_width,
            num_classes=self._config.num_classes,
        )


def write_labels_mapping(
    save_path: Path,
    class_to_idx: dict[str, int],
    image_height: int,
    image_width: int,
    num_classes: int | None = None,
) -> None:
    """Write the class mapping plus the preprocessing it was trained with.

    ``num_classes`` is the model output width; it defaults to the number of
    mapped classes.
    """
    mapping = {
        "num_classes": num_classes if num_classes is not None else len(class_to_idx),
        "class_to_idx": class_to_idx,
        "idx_to_class": {str(v): k for k, v in class_to_idx.items()},
        "input_size": {"height": image_height, "width": image_width},
        "normalization": {"scale": 1.0 / 255.0},
    }
    save_path.parent.mkdir(parents=True, exist_ok=True)
    with open(save_path, "w") as f:
        json.dump(mapping, f, indent=2)
    logger.info(f"Saved labels_mapping.json to {save_path}")
