"""Classification model implementations."""

from cardiomegaly_prediction.models.base import BaseClassificationModel
from cardiomegaly_prediction.models.cnn import CardiomegalyCNN, conv_output_size

__all__ = [
    "BaseClassificationModel",
    "CardiomegalyCNN",
    "conv_output_size",
]
