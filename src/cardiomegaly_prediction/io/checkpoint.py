"""Persist and restore trained CardiomegalyCNN weights."""

from __future__ import annotations

import os
from pathlib import Path

import torch
from loguru import logger

from cardiomegaly_prediction.data.datamodule import write_labels_mapping
from cardiomegaly_prediction.models.cnn import CardiomegalyCNN

LABELS_MAPPING_NAME = "labels_mapping.json"


def save_model(
    model: CardiomegalyCNN, path: str | Path, class_to_idx: dict[str, int]
) -> Path:
    """Write weights, hparams and class mapping; ``labels_mapping.json`` goes alongside.

    The weights file is written to a temporary sibling first and moved into
    place, so ``path`` never holds a half-written file.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = {
        "state_dict": model.state_dict(),
        "hparams": dict(model.hparams),
        "class_to_idx": dict(class_to_idx),
    }
    tmp_path = path.with_name(path.name + ".tmp")
    torch.save(payload, tmp_path)
    os.replace(tmp_path, path)

    write_labels_mapping(
        path.parent / LABELS_MAPPING_NAME,
        class_to_idx,
        image_height=model.hparams["input_height"],
        image_width=model.hparams["input_width"],
        num_classes=model.hparams["num_classes"],
    )
    logger.info(f"Saved model to {path}")
    return path


def load_model(
    path: str | Path, map_location: str | torch.device = "cpu"
) -> tuple[CardiomegalyCNN, dict[str, int]]:
    """Rebuild a saved model in eval mode; returns it with its class mapping."""
    path = Path(path)
    if not path.exists():
        msg = f"Model file not found: {path}"
        raise FileNotFoundError(msg)

    payload = torch.load(path, map_location=map_location, weights_only=True)
    model = CardiomegalyCNN(**payload["hparams"])
    model.load_state_dict(payload["state_dict"])
    model.eval()
    logger.info(f"Loaded model from {path}")
    return model, payload["class_to_idx"]
