"""Point readers."""

from wolkenkern.readers.faux import FauxReader, Mode

__all__ = ["FauxReader", "Mode"]
