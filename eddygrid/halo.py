"""Lateral halo exchange between the ranks of a horizontal decomposition.

Every rank holds a field that carries ``nh`` halo cells on each side of each
axis.  A 3-D field is indexed ``[i, j, k]`` with shape
``(nxp + 2*nh, nyp + 2*nh, nzp + 2*nh)``, and a 2-D x-y field is indexed
``[i, j]`` with shape ``(nxp + 2*nh, nyp + 2*nh)``.

An exchange along one axis copies the ``nh`` interior planes next to each
rank's edge into the facing halo of the neighbour on that side.  All
outgoing planes are taken before any halo is written, so the outcome does
not depend on the order in which ranks are visited.  The fields are updated
in place.
"""

from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from .topology import DecompositionError, RankTopology

__all__ = [
    "halo_buffer_size",
    "exchange_x",
    "exchange_y",
    "exchange_x_2d",
    "exchange_y_2d",
]


def halo_buffer_size(nxp: int, nyp: int, nzp: int, nh: int) -> int:
    """Number of elements in each send/receive buffer of a rank.

    The buffer is large enough for one lateral face, whichever horizontal
    extent is the larger, including halos, over the full vertical column.
    """
    if min(nxp, nyp, nzp) < 1:
        raise ValueError(
            f"subdomain extents must be at least 1, got ({nxp}, {nyp}, {nzp})"
        )
    if nh < 0:
        raise ValueError(f"halo width must not be negative, got {nh}")
    return max(nxp + 2 * nh, nyp + 2 * nh) * (nzp + 2 * nh) * nh


def _plane(ndim: int, axis: int, start: int, stop: int) -> tuple[slice, ...]:
    index = [slice(None)] * ndim
    index[axis] = slice(start, stop)
    return tuple(index)


def _checked_fields(
    fields: Sequence[np.ndarray],
    topologies: Sequence[RankTopology],
    nh: int,
    ndim: int,
) -> list[np.ndarray]:
    if nh < 0:
        raise ValueError(f"halo width must not be negative, got {nh}")
    arrays = list(fields)
    if len(arrays) != len(topologies):
        raise ValueError(
            f"{len(arrays)} fields given for {len(topologies)} ranks"
        )
    for rank, (array, topology) in enumerate(zip(arrays, topologies)):
        if not isinstance(array, np.ndarray):
            raise TypeError(f"field of rank {rank} is not a numpy array")
        if array.ndim != ndim:
            raise ValueError(
                f"field of rank {rank} has {array.ndim} dimensions, expected {ndim}"
            )
        if topology.rank != rank:
            raise DecompositionError(
                f"topology at position {rank} describes rank {topology.rank}"
            )
    if arrays:
        shape = arrays[0].shape
        if any(array.shape != shape for array in arrays):
            raise ValueError("all ranks must hold fields of the same shape")
        if any(extent < 2 * nh + 1 for extent in shape[:2]):
            raise ValueError(
                f"field shape {shape} leaves no interior cells for halo width {nh}"
            )
    return arrays


def _neighbor(
    topologies: Sequence[RankTopology],
    rank: int,
    attr: str,
    reverse_attr: str,
) -> int | None:
    nbr = getattr(topologies[rank], attr)
    if nbr is None:
        return None
    if not 0 <= nbr < len(topologies):
        raise DecompositionError(
            f"rank {rank} names neighbour {nbr} outside a world of "
            f"{len(topologies)} ranks"
        )
    if getattr(topologies[nbr], reverse_attr) != rank:
        raise DecompositionError(
            f"rank {rank} expects to exchange with rank {nbr}, "
            f"which does not name it back"
        )
    return nbr


def _exchange(
    fields: Sequence[np.ndarray],
    topologies: Sequence[RankTopology],
    nh: int,
    axis: int,
    ndim: int,
    lo_attr: str,
    hi_attr: str,
) -> None:
    arrays = _checked_fields(fields, topologies, nh, ndim)
    if nh == 0 or not arrays:
        return
    n = arrays[0].shape[axis] - 2 * nh

    lo_send = [array[_plane(ndim, axis, nh, 2 * nh)].copy() for array in arrays]
    hi_send = [array[_plane(ndim, axis, n, n + nh)].copy() for array in arrays]

    lo_halo = _plane(ndim, axis, 0, nh)
    hi_halo = _plane(ndim, axis, n + nh, n + 2 * nh)
    for rank, array in enumerate(arrays):
        lo = _neighbor(topologies, rank, lo_attr, hi_attr)
        hi = _neighbor(topologies, rank, hi_attr, lo_attr)
        if lo is not None:
            array[lo_halo] = hi_send[lo]
        if hi is not None:
            array[hi_halo] = lo_send[hi]


def exchange_x(
    fields: Sequence[np.ndarray], topologies: Sequence[RankTopology], nh: int
) -> None:
    """Exchange x-direction halos of 3-D per-rank fields in place."""
    _exchange(fields, topologies, nh, 0, 3, "nbr_x_lo", "nbr_x_hi")


def exchange_y(
    fields: Sequence[np.ndarray], topologies: Sequence[RankTopology], nh: int
) -> None:
    """Exchange y-direction halos of 3-D per-rank fields in place."""
    _exchange(fields, topologies, nh, 1, 3, "nbr_y_lo", "nbr_y_hi")


def exchange_x_2d(
    fields: Sequence[np.ndarray], topologies: Sequence[RankTopology], nh: int
) -> None:
    """Exchange x-direction halos of 2-D x-y per-rank fields in place."""
    _exchange(fields, topologies, nh, 0, 2, "nbr_x_lo", "nbr_x_hi")


def exchange_y_2d(
    fields: Sequence[np.ndarray], topologies: Sequence[RankTopology], nh: int
) -> None:
    """Exchange y-direction halos of 2-D x-y per-rank fields in place."""
    _exchange(fields, topologies, nh, 1, 2, "nbr_y_lo", "nbr_y_hi")