"""Shared pytest fixtures for cardiomegaly_prediction tests."""

from pathlib import Path

import pytest
from PIL import Image

CLASSES = ("no_cardiomegaly", "cardiomegaly")

# Trainer settings that keep Lightning quiet and on CPU in tests.
CPU_TRAINER = {
    "accelerator": "cpu",
    "enable_progress_bar": False,
    "enable_model_summary": False,
}


def make_jpeg(
    path: Path,
    size: tuple[int, int] = (64, 48),
    color: tuple[int, int, int] = (120, 60, 200),
    mode: str = "RGB",
) -> Path:
    """Write a solid-color JPEG with a bright corner so it is not uniform."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fill = color[0] if mode == "L" else color
    img = Image.new(mode, size, color=fill)
    img.paste(255 if mode == "L" else (255, 255, 255), (0, 0, size[0] // 4, size[1] // 4))
    img.save(path, format="JPEG")
    return path


def make_split(root: Path, counts: dict[str, int]) -> Path:
    """Create ``root/<class>/img_XX.jpg`` files; a count of 0 makes an empty dir."""
    for cls_i, (cls, n) in enumerate(counts.items()):
        class_dir = root / cls
        class_dir.mkdir(parents=True, exist_ok=True)
        for i in range(n):
            make_jpeg(
                class_dir / f"img_{i:02d}.jpg",
                size=(40 + 10 * i, 30 + 5 * cls_i),
                color=(30 + 100 * cls_i, 80 + 20 * i, 150),
            )
    return root


@pytest.fixture()
def tmp_xray_dirs(tmp_path: Path) -> tuple[Path, Path]:
    """Train/test roots mirroring the real cardiomegaly dataset layout.

    Train: 3 images per class (6 total). Test: 2 images per class (4 total).
    Source images have varying sizes so resizing is exercised.
    """
    train_root = make_split(tmp_path / "train", {c: 3 for c in CLASSES})
    test_root = make_split(tmp_path / "test", {c: 2 for c in CLASSES})
    return train_root, test_root
