"""CRS (Coordinate Reference System) backend wrapping pyproj.

Backend failures never leave state behind: every problem is raised as a
:class:`ResourceAcquisitionError` or :class:`TransformError` carrying the
message pyproj reported.
"""

from __future__ import annotations

from typing import Any

import numpy as np
from pyproj import CRS, Transformer
from pyproj.exceptions import CRSError, ProjError

from wolkenkern.errors import ResourceAcquisitionError, TransformError


def parse_crs(crs_input: str | CRS | None) -> CRS | None:
    """Parse a CRS from various input formats.

    Args:
        crs_input: EPSG string ("EPSG:25832"), WKT string, proj4 string,
                   or a pyproj.CRS object.

    Returns:
        pyproj.CRS object or None.
    """
    if crs_input is None:
        return None
    if isinstance(crs_input, CRS):
        return crs_input
    return CRS.from_user_input(crs_input)


def horizontal_wkt(descriptor: str) -> str:
    """WKT of the horizontal part of a CRS (compound systems drop their vertical part)."""
    try:
        crs = parse_crs(descriptor)
    except CRSError as err:
        raise ResourceAcquisitionError(
            f"Could not import spatial reference: {err}",
            descriptor=descriptor,
            diagnostic=str(err),
        ) from err
    if crs.is_compound:
        crs = crs.sub_crs_list[0]
    return crs.to_wkt()


class CoordinateTransform:
    """Handle on an acquired pyproj transformer.

    The handle is released by :meth:`close` (or on leaving a ``with``
    block); applying a released transform raises :class:`TransformError`.
    """

    def __init__(self, transformer: Transformer, source: CRS, target: CRS) -> None:
        self._transformer: Transformer | None = transformer
        self.source = source
        self.target = target

    @property
    def closed(self) -> bool:
        return self._transformer is None

    def apply(
        self, x: Any, y: Any, z: Any
    ) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Transform coordinates (scalars or arrays) into the target CRS.

        Raises:
            TransformError: If any coordinate could not be transformed.
        """
        if self._transformer is None:
            raise TransformError("Coordinate transformation has been released")
        try:
            new_x, new_y, new_z = self._transformer.transform(x, y, z, errcheck=True)
        except ProjError as err:
            raise TransformError(
                f"Could not project point: {err}", diagnostic=str(err)
            ) from err

        new_x = np.asarray(new_x, dtype=np.float64)
        new_y = np.asarray(new_y, dtype=np.float64)
        new_z = np.asarray(new_z, dtype=np.float64)
        if not (
            np.isfinite(new_x).all()
            and np.isfinite(new_y).all()
            and np.isfinite(new_z).all()
        ):
            raise TransformError(
                "Could not project point: non-finite result",
                diagnostic="non-finite result",
            )
        return new_x, new_y, new_z

    def close(self) -> None:
        self._transformer = None

    def __enter__(self) -> CoordinateTransform:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self.closed else "open"
        return f"CoordinateTransform({self.source.name!r} -> {self.target.name!r}, {state})"


def _import_crs(descriptor: str, role: str) -> CRS:
    try:
        return CRS.from_user_input(descriptor)
    except CRSError as err:
        raise ResourceAcquisitionError(
            f"Could not import {role} spatial reference: {err} wkt: '{descriptor}'",
            descriptor=descriptor,
            diagnostic=str(err),
        ) from err


def acquire_transform(source: str, target: str) -> CoordinateTransform:
    """Build a transform between two CRS descriptors.

    Args:
        source: Input CRS text (WKT, "EPSG:nnnn", PROJ string).
        target: Output CRS text.

    Raises:
        ResourceAcquisitionError: If either descriptor cannot be parsed or
            pyproj cannot construct the transformation.
    """
    src = _import_crs(source, "input")
    dst = _import_crs(target, "output")
    try:
        transformer = Transformer.from_crs(src, dst, always_xy=True)
    except ProjError as err:
        raise ResourceAcquisitionError(
            f"Could not construct coordinate transformation: {err}",
            descriptor=f"{source} -> {target}",
            diagnostic=str(err),
        ) from err
    return CoordinateTransform(transformer, src, dst)
