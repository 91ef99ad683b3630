"""Cardiomegaly chest X-ray classification pipeline."""

__version__ = "0.1.0"
