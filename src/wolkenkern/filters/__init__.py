"""Point processing filters."""

from wolkenkern.filters.reprojection import ReprojectionFilter

__all__ = ["ReprojectionFilter"]
