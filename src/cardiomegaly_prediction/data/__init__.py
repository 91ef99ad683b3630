"""Data pipeline for cardiomegaly_prediction."""

from cardiomegaly_prediction.data.datamodule import CardiomegalyDataModule
from cardiomegaly_prediction.data.dataset import (
    ClassMismatchError,
    ImageFolderDataset,
    InMemoryImageDataset,
    load_data,
)
from cardiomegaly_prediction.data.image import DecodeError, load_image

__all__ = [
    "CardiomegalyDataModule",
    "ClassMismatchError",
    "DecodeError",
    "ImageFolderDataset",
    "InMemoryImageDataset",
    "load_data",
    "load_image",
]
