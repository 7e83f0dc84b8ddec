"""Opaque coordinate reference system identity."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from wolkenkern.utils.crs import horizontal_wkt


class WKTMode(Enum):
    """Textual form requested from a SpatialReference."""

    COMPACT = "compact"
    COMPOUND_OK = "compound_ok"


@dataclass(frozen=True)
class SpatialReference:
    """A CRS identity carried as text (WKT, "EPSG:nnnn" or a PROJ string).

    No CRS semantics are evaluated here; the text is handed to the CRS
    backend when a transform is needed. The compact form is the only one
    that needs the backend, to drop the vertical part of compound systems.
    """

    wkt: str = ""

    @classmethod
    def coerce(cls, value: SpatialReference | str | None) -> SpatialReference:
        """Accept a SpatialReference or CRS text (as found in stage options)."""
        if value is None:
            return cls()
        if isinstance(value, SpatialReference):
            return value
        return cls(str(value).strip())

    @property
    def empty(self) -> bool:
        return not self.wkt

    def get_wkt(self, mode: WKTMode = WKTMode.COMPACT) -> str:
        if mode is WKTMode.COMPOUND_OK or self.empty:
            return self.wkt
        return horizontal_wkt(self.wkt)

    def __str__(self) -> str:
        return self.wkt

    def __repr__(self) -> str:
        text = self.wkt if len(self.wkt) <= 40 else self.wkt[:37] + "..."
        return f"SpatialReference({text!r})"
