"""Fit-start summary of the network and the class mapping it is trained on."""

from __future__ import annotations

from pathlib import Path
from typing import NamedTuple

import lightning as L
from loguru import logger
from rich import box
from rich.console import Console
from rich.table import Table
from torch import nn

from cardiomegaly_prediction.io.checkpoint import LABELS_MAPPING_NAME


class ParameterStats(NamedTuple):
    total: int
    trainable: int
    size_mb: float


def parameter_stats(module: nn.Module) -> ParameterStats:
    """Parameter counts and in-memory size of parameters plus buffers."""
    params = list(module.parameters())
    size_bytes = sum(p.numel() * p.element_size() for p in params)
    size_bytes += sum(b.numel() * b.element_size() for b in module.buffers())
    return ParameterStats(
        total=sum(p.numel() for p in params),
        trainable=sum(p.numel() for p in params if p.requires_grad),
        size_mb=size_bytes / (1024 * 1024),
    )


class ModelInfoCallback(L.Callback):
    """Print what is about to be trained, and on which labels.

    The table lists the model class, its input geometry and output width,
    the parameter counts, and the ``class -> index`` mapping taken from the
    trainer's datamodule. The same mapping is written to
    ``<output_dir>/labels_mapping.json`` so it survives a crashed run.

    Args:
        output_dir: Directory for labels_mapping.json.
    """

    def __init__(self, output_dir: str = "outputs") -> None:
        super().__init__()
        self.output_dir = Path(output_dir)

    @staticmethod
    def summary_rows(
        pl_module: L.LightningModule, datamodule: L.LightningDataModule | None = None
    ) -> list[tuple[str, str]]:
        """(label, value) pairs shown in the fit-start table."""
        hparams = getattr(pl_module, "hparams", {})
        stats = parameter_stats(pl_module)

        rows = [("Model Class", type(pl_module).__name__)]
        if "input_height" in hparams and "input_width" in hparams:
            rows.append(
                ("Input", f"{hparams['input_height']} x {hparams['input_width']} x 3")
            )
        if "num_classes" in hparams:
            rows.append(("Output Classes", str(hparams["num_classes"])))
        rows += [
            ("Total Parameters", f"{stats.total:,}"),
            ("Trainable Parameters", f"{stats.trainable:,}"),
            ("Model Size", f"{stats.size_mb:.2f} MB"),
        ]

        class_to_idx = getattr(datamodule, "class_to_idx", None)
        if class_to_idx:
            rows.append(
                (
                    "Class Mapping",
                    ", ".join(f"{idx}: {name}" for name, idx in class_to_idx.items()),
                )
            )
        return rows

    def on_fit_start(
        self, trainer: L.Trainer, pl_module: L.LightningModule
    ) -> None:
        table = Table(
            title="Cardiomegaly Model",
            header_style="bold magenta",
            box=box.SQUARE,
            show_lines=True,
        )
        table.add_column("Item", style="cyan")
        table.add_column("Value", style="green")
        datamodule = trainer.datamodule
        rows = self.summary_rows(pl_module, datamodule)
        for label, value in rows:
            table.add_row(label, value)
        Console().print(table)
        logger.info(" | ".join(f"{label}: {value}" for label, value in rows))

        if datamodule is None or not hasattr(datamodule, "save_labels_mapping"):
            logger.info("No datamodule attached; skipping labels_mapping.json")
            return
        self.output_dir.mkdir(parents=True, exist_ok=True)
        datamodule.save_labels_mapping(self.output_dir / LABELS_MAPPING_NAME)
