"""Training entrypoint for cardiomegaly_prediction.

Usage:
    python -m cardiomegaly_prediction.train                        # defaults
    python -m cardiomegaly_prediction.train epochs=1               # override epochs
    python -m cardiomegaly_prediction.train data.batch_size=16     # mini-batches
    python -m cardiomegaly_prediction.train data.train_root=/x/train data.test_root=/x/test
"""

import sys
from typing import Any

import hydra
import lightning as L
from loguru import logger
from omegaconf import DictConfig, OmegaConf

# CRITICAL: import models to trigger @register decorators BEFORE Hydra parses config
import cardiomegaly_prediction.models  # noqa: F401
from cardiomegaly_prediction.config import PipelineConfig
from cardiomegaly_prediction.data.datamodule import CardiomegalyDataModule
from cardiomegaly_prediction.pipeline import CardiomegalyPipeline


def build_pipeline(cfg: DictConfig) -> CardiomegalyPipeline:
    """Instantiate datamodule, model factory and callbacks from a composed config."""
    datamodule: CardiomegalyDataModule = hydra.utils.instantiate(cfg.data)
    model_factory = hydra.utils.instantiate(cfg.model, _partial_=True)

    callbacks: list[L.Callback] = []
    if cfg.get("callbacks"):
        for v in cfg.callbacks.values():
            if v is not None and "_target_" in v:
                callbacks.append(hydra.utils.instantiate(v))

    trainer_cfg: dict[str, Any] = OmegaConf.to_container(cfg.trainer, resolve=True)  # type: ignore[assignment]
    config = PipelineConfig(
        epochs=cfg.epochs,
        seed=cfg.get("seed"),
        save_path=cfg.get("save_path"),
        trainer=trainer_cfg,
    )
    return CardiomegalyPipeline(
        datamodule,
        config=config,
        model_factory=model_factory,
        callbacks=callbacks,
    )


@hydra.main(version_base=None, config_path="conf", config_name="train")
def main(cfg: DictConfig) -> None:
    """Run one train/evaluate pass with the given Hydra config."""
    logger.remove()
    logger.add(sys.stderr, level=cfg.get("log_level", "INFO"))

    logger.info(f"Configuration:\n{OmegaConf.to_yaml(cfg)}")

    pipeline = build_pipeline(cfg)
    pipeline.train_and_evaluate()


if __name__ == "__main__":
    main()
