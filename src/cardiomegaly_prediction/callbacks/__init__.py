"""Training callbacks for cardiomegaly_prediction."""

from cardiomegaly_prediction.callbacks.model_info import ModelInfoCallback

__all__ = ["ModelInfoCallback"]
