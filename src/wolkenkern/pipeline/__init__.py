"""Stage chain construction and execution."""

from wolkenkern.pipeline.pipeline import Pipeline

__all__ = ["Pipeline"]
