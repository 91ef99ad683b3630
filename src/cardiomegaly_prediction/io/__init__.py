"""Model persistence for cardiomegaly_prediction."""

from cardiomegaly_prediction.io.checkpoint import load_model, save_model

__all__ = ["load_model", "save_model"]
