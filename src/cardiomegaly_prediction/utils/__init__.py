"""Shared helpers for cardiomegaly_prediction."""
