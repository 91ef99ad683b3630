"""Utility functions for the data pipeline."""

from pathlib import Path

from loguru import logger


def get_files(
    root: Path,
    extensions: tuple[str, ...] | None = None,
    recursive: bool = False,
) -> list[Path]:
    """Find regular files under root, optionally filtered by extension.

    Args:
        root: Directory to search.
        extensions: Tuple of lowercase extensions including dot
            (e.g., (".jpg", ".jpeg")). ``None`` accepts every file.
        recursive: Descend into subdirectories when True.

    Returns:
        Sorted list of matching file paths.
    """
    pattern = root.rglob("*") if recursive else root.iterdir()
    files = []
    for p in pattern:
        if not p.is_file():
            continue
        if extensions is None or p.suffix.lower() in extensions:
            files.append(p)
    return sorted(files)


def list_class_dirs(root: Path) -> list[Path]:
    """Return the immediate subdirectories of root, sorted by name.

    Each subdirectory is one class. Sorting makes the order independent of
    how the filesystem happens to enumerate entries.
    """
    if not root.exists():
        msg = f"Dataset root not found: {root}"
        raise FileNotFoundError(msg)
    if not root.is_dir():
        msg = f"Dataset root is not a directory: {root}"
        raise NotADirectoryError(msg)
    return sorted((p for p in root.iterdir() if p.is_dir()), key=lambda p: p.name)


def build_class_to_idx(root: Path) -> dict[str, int]:
    """Map each class directory name under root to its index in sorted order.

    Build this once from the train split and pass it to every split so labels
    mean the same thing in train and test.
    """
    class_to_idx = {p.name: i for i, p in enumerate(list_class_dirs(root))}
    logger.info(f"Built class_to_idx: {len(class_to_idx)} classes from {root}")
    logger.debug(f"class_to_idx: {class_to_idx}")
    return class_to_idx
