"""Class-per-directory chest X-ray datasets."""

from collections.abc import Sequence
from pathlib import Path

import torch
from loguru import logger
from torch.utils.data import Dataset

from cardiomegaly_prediction.data.image import load_image
from cardiomegaly_prediction.data.utils import get_files, list_class_dirs
from cardiomegaly_prediction.types import ImageArrays


class ClassMismatchError(ValueError):
    """Raised when a split contains a class directory unknown to class_to_idx."""


def load_data(
    filepaths: Sequence[Path],
    labels: Sequence[int],
    target_width: int,
    target_height: int,
) -> ImageArrays:
    """Eagerly load every image and stack the split into parallel tensors.

    Any load failure aborts the whole build; no partial split is returned.
    """
    if len(filepaths) != len(labels):
        msg = f"Got {len(filepaths)} file paths but {len(labels)} labels"
        raise ValueError(msg)

    if not filepaths:
        images = torch.zeros((0, target_height, target_width, 3), dtype=torch.float32)
    else:
        images = torch.stack(
            [load_image(p, target_width, target_height) for p in filepaths]
        )
    return ImageArrays(images=images, labels=torch.tensor(list(labels), dtype=torch.long))


class ImageFolderDataset(Dataset[tuple[torch.Tensor, int]]):
    """Dataset over ``root/<class_name>/<image>`` laid-out splits.

    Sample paths are discovered at construction; images are decoded on access,
    so iterating in mini-batches keeps memory bounded by the batch size.
    Call :meth:`materialize` to load the whole split at once instead.

    Args:
        root: Split directory whose immediate subdirectories are classes.
        class_to_idx: Class-name to label mapping. MUST be built from the train
            split only and shared across splits.
        target_width: Width every image is resized to.
        target_height: Height every image is resized to.
        extensions: Optional lowercase suffix filter; ``None`` keeps every file.
    """

    def __init__(
        self,
        root: Path,
        class_to_idx: dict[str, int],
        target_width: int = 224,
        target_height: int = 224,
        extensions: tuple[str, ...] | None = None,
    ) -> None:
        self.root = root
        self.class_to_idx = class_to_idx
        self.target_width = target_width
        self.target_height = target_height
        self.samples: list[tuple[Path, int]] = []

        class_dirs = list_class_dirs(root)
        unknown = [d.name for d in class_dirs if d.name not in class_to_idx]
        if unknown:
            msg = (
                f"Class directories {unknown} under {root} are not in "
                f"class_to_idx {sorted(class_to_idx)}"
            )
            raise ClassMismatchError(msg)

        present = {d.name for d in class_dirs}
        missing = sorted(set(class_to_idx) - present)
        if missing:
            logger.warning(f"Classes {missing} have no directory under {root}")

        for class_dir in class_dirs:
            label = class_to_idx[class_dir.name]
            files = get_files(class_dir, extensions)
            if not files:
                logger.warning(f"Class directory {class_dir} contains no images")
            self.samples.extend((f, label) for f in files)

        logger.debug(
            f"ImageFolderDataset: found {len(self.samples)} samples "
            f"in {len(class_dirs)} class directories under {root}"
        )

    @property
    def labels(self) -> list[int]:
        return [label for _, label in self.samples]

    def __len__(self) -> int:
        return len(self.samples)

    def __getitem__(self, idx: int) -> tuple[torch.Tensor, int]:
        img_path, label = self.samples[idx]
        return load_image(img_path, self.target_width, self.target_height), label

    def materialize(self) -> ImageArrays:
        """Load every sample into memory as ``(images, labels)`` tensors."""
        arrays = load_data(
            [p for p, _ in self.samples],
            self.labels,
            self.target_width,
            self.target_height,
        )
        logger.info(
            f"Loaded {len(arrays.labels)} images from {self.root} "
            f"into memory: {tuple(arrays.images.shape)}"
        )
        return arrays


class InMemoryImageDataset(Dataset[tuple[torch.Tensor, int]]):
    """Dataset view over an already materialized split."""

    def __init__(self, arrays: ImageArrays) -> None:
        if len(arrays.images) != len(arrays.labels):
            msg = (
                f"images and labels must have equal length, got "
                f"{len(arrays.images)} and {len(arrays.labels)}"
            )
            raise ValueError(msg)
        self.arrays = arrays

    def __len__(self) -> int:
        return len(self.arrays.labels)

    def __getitem__(self, idx: int) -> tuple[torch.Tensor, int]:
        return self.arrays.images[idx], int(self.arrays.labels[idx])
