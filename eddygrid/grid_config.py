"""Grid parameters, per-rank extents and topography input.

A topography file is binary in native byte order.  It starts with two 32-bit
integers, ``nx`` then ``ny``.  They are followed by ``nx * ny`` 32-bit floats
stored with the x index varying fastest.  In memory, topography is indexed
``[i, j]`` with shape ``(nx, ny)``.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Union

import numpy as np

from .topology import RankTopology

__all__ = [
    "GridError",
    "LocalExtents",
    "GridConfig",
    "read_topography",
    "write_topography",
    "local_topography",
]

FLT_MIN = float(np.finfo(np.float32).tiny)
FLT_MAX = float(np.finfo(np.float32).max)

_INT = np.dtype("=i4")
_FLOAT = np.dtype("=f4")

PathLike = Union[str, "os.PathLike[str]"]


class GridError(ValueError):
    """Raised for invalid grid parameters, decompositions or topography files."""


@dataclass(frozen=True)
class LocalExtents:
    """Extents of one rank's subdomain and its non-halo index bounds."""

    nxp: int
    nyp: int
    nzp: int
    nh: int

    @property
    def i_min(self) -> int:
        return self.nh

    @property
    def i_max(self) -> int:
        return self.nxp + self.nh

    @property
    def j_min(self) -> int:
        return self.nh

    @property
    def j_max(self) -> int:
        return self.nyp + self.nh

    @property
    def k_min(self) -> int:
        return self.nh

    @property
    def k_max(self) -> int:
        return self.nzp + self.nh

    @property
    def shape_3d(self) -> tuple[int, int, int]:
        """Shape of a per-rank 3-D field including halos."""
        return (
            self.nxp + 2 * self.nh,
            self.nyp + 2 * self.nh,
            self.nzp + 2 * self.nh,
        )

    @property
    def shape_2d(self) -> tuple[int, int]:
        """Shape of a per-rank 2-D x-y field including halos."""
        return (self.nxp + 2 * self.nh, self.nyp + 2 * self.nh)


@dataclass(frozen=True)
class GridConfig:
    """Runtime parameters of the computational grid."""

    nx: int = 1
    ny: int = 1
    nz: int = 1
    nh: int = 0
    d_xi: float = 1.0
    d_eta: float = 1.0
    d_zeta: float = 1.0
    coord_horiz_halos: int = 1
    vertical_deform_switch: int = 0
    vertical_deform_factor: float = 0.0
    vertical_deform_quad_coeff: float = 0.0
    grid_file: str | None = None
    topo_file: str | None = None

    @property
    def dx_inv(self) -> float:
        return 1.0 / self.d_xi

    @property
    def dy_inv(self) -> float:
        return 1.0 / self.d_eta

    @property
    def dz_inv(self) -> float:
        return 1.0 / self.d_zeta

    def validate(self) -> None:
        """Raise GridError listing every parameter outside its allowed range."""
        checks = [
            ("Nx", self.nx, 1, None),
            ("Ny", self.ny, 1, None),
            ("Nz", self.nz, 1, None),
            ("Nh", self.nh, 0, None),
            ("d_xi", self.d_xi, FLT_MIN, FLT_MAX),
            ("d_eta", self.d_eta, FLT_MIN, FLT_MAX),
            ("d_zeta", self.d_zeta, FLT_MIN, FLT_MAX),
            ("coordHorizHalos", self.coord_horiz_halos, 0, 1),
            ("verticalDeformSwitch", self.vertical_deform_switch, 0, 1),
            ("verticalDeformFactor", self.vertical_deform_factor, 0.0, 1.0),
            ("verticalDeformQuadCoeff", self.vertical_deform_quad_coeff, -2.0, 2.0),
        ]
        errors = []
        for name, value, low, high in checks:
            if value != value or value < low or (high is not None and value > high):
                bound = f"[{low}, {high}]" if high is not None else f">= {low}"
                errors.append(f"{name} = {value} outside {bound}")
        if errors:
            raise GridError("; ".join(errors))

    def local_extents(self, num_procs_x: int, num_procs_y: int) -> LocalExtents:
        """Per-rank extents; the global extents must divide evenly."""
        if num_procs_x < 1 or num_procs_y < 1:
            raise GridError(
                f"numProcsX and numProcsY must be at least 1, "
                f"got {num_procs_x} and {num_procs_y}"
            )
        problems = []
        if self.nx % num_procs_x != 0:
            problems.append(
                f"Nx is not an exact multiple of numProcsX, "
                f"Nx = {self.nx}, numProcsX = {num_procs_x}"
            )
        if self.ny % num_procs_y != 0:
            problems.append(
                f"Ny is not an exact multiple of numProcsY, "
                f"Ny = {self.ny}, numProcsY = {num_procs_y}"
            )
        if problems:
            raise GridError("; ".join(problems))
        return LocalExtents(
            nxp=self.nx // num_procs_x,
            nyp=self.ny // num_procs_y,
            nzp=self.nz,
            nh=self.nh,
        )


def read_topography(path: PathLike, nx: int, ny: int) -> np.ndarray:
    """Read a topography file into a float32 array of shape ``(nx, ny)``."""
    try:
        with open(path, "rb") as stream:
            header = stream.read(2 * _INT.itemsize)
            if len(header) != 2 * _INT.itemsize:
                raise GridError(f"topoFile {path} is too short to hold its extents")
            file_nx, file_ny = (int(v) for v in np.frombuffer(header, dtype=_INT))
            if (file_nx, file_ny) != (nx, ny):
                raise GridError(
                    f"topoFile extents (tmpNx,tmpNy) = ({file_nx},{file_ny}) "
                    f"!= (Nx,Ny) = ({nx},{ny})"
                )
            count = nx * ny
            payload = stream.read(count * _FLOAT.itemsize)
    except OSError as exc:
        raise GridError(f"failed to open topoFile, {path}") from exc
    if len(payload) != count * _FLOAT.itemsize:
        raise GridError(f"topoFile {path} holds fewer than {count} values")
    return np.frombuffer(payload, dtype=_FLOAT).reshape(ny, nx).T.copy()


def write_topography(path: PathLike, topo: np.ndarray) -> None:
    """Write a ``(nx, ny)`` topography array in the topography file format."""
    array = np.asarray(topo)
    if array.ndim != 2:
        raise GridError(f"topography must be 2-D, got {array.ndim}-D")
    nx, ny = array.shape
    with open(path, "wb") as stream:
        stream.write(np.array([nx, ny], dtype=_INT).tobytes())
        stream.write(np.ascontiguousarray(array.T, dtype=_FLOAT).tobytes())


def local_topography(
    topo_global: np.ndarray, topology: RankTopology, extents: LocalExtents
) -> np.ndarray:
    """Per-rank topography with halos, taken from the global field.

    Halo cells past the global domain edge repeat the nearest edge value.
    """
    source = np.asarray(topo_global)
    if source.ndim != 2:
        raise GridError(f"global topography must be 2-D, got {source.ndim}-D")
    nx, ny = source.shape
    nh = extents.nh
    i_global = topology.rank_x * extents.nxp + np.arange(extents.nxp + 2 * nh) - nh
    j_global = topology.rank_y * extents.nyp + np.arange(extents.nyp + 2 * nh) - nh
    i_global = np.clip(i_global, 0, nx - 1)
    j_global = np.clip(j_global, 0, ny - 1)
    return source[np.ix_(i_global, j_global)].astype(np.float32)