"""Put model classes in Hydra's ConfigStore so ``model=<name>`` selects them."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

from hydra.core.config_store import ConfigStore
from loguru import logger

T = TypeVar("T", bound=type)


def target_path(cls: type) -> str:
    """Dotted import path Hydra's ``instantiate`` resolves back to ``cls``."""
    return f"{cls.__module__}.{cls.__qualname__}"


def register(*, group: str, name: str | None = None, **defaults: Any) -> Callable[[T], T]:
    """Class decorator storing ``{"_target_": <cls>, **defaults}`` under ``group/name``.

    ``name`` defaults to the class name. The decorated class is returned
    unchanged, so registration has no effect on direct construction.

    Example::

        @register(group="model", name="cardiomegaly_cnn")
        class CardiomegalyCNN(BaseClassificationModel): ...

    composes with ``defaults: [{model: cardiomegaly_cnn}]`` or the
    ``model=cardiomegaly_cnn`` override.
    """

    def decorator(cls: T) -> T:
        config_name = name or cls.__name__
        node: dict[str, Any] = {"_target_": target_path(cls), **defaults}
        ConfigStore.instance().store(group=group, name=config_name, node=node)
        logger.debug(f"Stored {group}/{config_name} -> {node['_target_']}")
        return cls

    return decorator
