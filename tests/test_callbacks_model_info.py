"""Tests for ModelInfoCallback."""

from __future__ import annotations

import json
from pathlib import Path

import lightning as L
import pytest
from torch import nn

from cardiomegaly_prediction.callbacks import ModelInfoCallback
from cardiomegaly_prediction.callbacks.model_info import parameter_stats
from cardiomegaly_prediction.data import CardiomegalyDataModule
from cardiomegaly_prediction.models import CardiomegalyCNN


class TestModelInfoCallback:
    def test_writes_labels_mapping_on_fit_start(
        self, tmp_xray_dirs: tuple[Path, Path], tmp_path: Path
    ) -> None:
        train_root, test_root = tmp_xray_dirs
        dm = CardiomegalyDataModule(
            train_root=str(train_root),
            test_root=str(test_root),
            image_height=16,
            image_width=16,
        )
        model = CardiomegalyCNN(input_height=16, input_width=16, num_classes=dm.num_classes)
        out_dir = tmp_path / "outputs"

        trainer = L.Trainer(
            max_epochs=1,
            callbacks=[ModelInfoCallback(output_dir=str(out_dir))],
            enable_checkpointing=False,
            enable_progress_bar=False,
            logger=False,
            accelerator="cpu",
            devices=1,
            default_root_dir=str(tmp_path),
        )
        trainer.fit(model, datamodule=dm)

        mapping = json.loads((out_dir / "labels_mapping.json").read_text())
        assert mapping["num_classes"] == 2
        assert mapping["class_to_idx"]["cardiomegaly"] == 0

    def test_without_datamodule_skips_mapping(self, tmp_path: Path) -> None:
        model = CardiomegalyCNN(input_height=16, input_width=16)
        trainer = L.Trainer(logger=False, accelerator="cpu", devices=1)
        cb = ModelInfoCallback(output_dir=str(tmp_path / "outputs"))
        cb.on_fit_start(trainer, model)
        assert not (tmp_path / "outputs").exists()

    def test_summary_lists_geometry_and_class_mapping(
        self, tmp_xray_dirs: tuple[Path, Path]
    ) -> None:
        train_root, test_root = tmp_xray_dirs
        dm = CardiomegalyDataModule(
            train_root=str(train_root), test_root=str(test_root)
        )
        model = CardiomegalyCNN(input_height=16, input_width=24)
        rows = dict(ModelInfoCallback.summary_rows(model, dm))

        assert rows["Model Class"] == "CardiomegalyCNN"
        assert rows["Input"] == "16 x 24 x 3"
        assert rows["Output Classes"] == "2"
        assert rows["Class Mapping"] == "0: cardiomegaly, 1: no_cardiomegaly"
        assert rows["Total Parameters"] == f"{parameter_stats(model).total:,}"

    def test_summary_without_datamodule_omits_mapping(self) -> None:
        model = CardiomegalyCNN(input_height=16, input_width=16)
        rows = dict(ModelInfoCallback.summary_rows(model))
        assert "Class Mapping" not in rows


def test_parameter_stats_counts_frozen_parameters() -> None:
    module = nn.Linear(4, 2)
    module.bias.requires_grad_(False)
    stats = parameter_stats(module)
    assert stats.total == 10
    assert stats.trainable == 8
    assert stats.size_mb == pytest.approx(10 * 4 / (1024 * 1024))
