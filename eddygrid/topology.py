"""Rank topology for a 2-D horizontal domain decomposition.

Ranks are laid out row-major: a rank's x-index is ``rank % num_procs_x`` and
its y-index is ``rank // num_procs_x``.  Each rank knows its four lateral
neighbours, or ``None`` where it owns a global domain boundary.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import NamedTuple


class DecompositionError(ValueError):
    """Raised when a requested decomposition is inconsistent."""


class HaloTags(NamedTuple):
    """Message tags used for one side of a halo exchange."""

    send: int
    recv: int


def _check_procs(num_procs_x: int, num_procs_y: int) -> None:
    if num_procs_x < 1 or num_procs_y < 1:
        raise DecompositionError(
            f"numProcsX and numProcsY must be at least 1, "
            f"got {num_procs_x} and {num_procs_y}"
        )


@dataclass(frozen=True)
class RankTopology:
    """Position of one rank in the decomposition and its lateral neighbours."""

    rank: int
    num_procs_x: int
    num_procs_y: int
    rank_x: int
    rank_y: int
    nbr_x_lo: int | None
    nbr_x_hi: int | None
    nbr_y_lo: int | None
    nbr_y_hi: int | None
    x_lo_boundary: bool
    x_hi_boundary: bool
    y_lo_boundary: bool
    y_hi_boundary: bool

    @property
    def world_size(self) -> int:
        return self.num_procs_x * self.num_procs_y

    def with_periodic(self, x_periodic: bool, y_periodic: bool) -> RankTopology:
        """Return a copy whose missing neighbours wrap around cyclically.

        Boundary ownership flags are left unchanged: a rank on the global
        edge still owns that boundary even when its neighbour wraps.
        """
        changes: dict[str, int] = {}
        if x_periodic:
            if self.nbr_x_lo is None:
                changes["nbr_x_lo"] = self.rank + (self.num_procs_x - 1)
            if self.nbr_x_hi is None:
                changes["nbr_x_hi"] = self.rank - (self.num_procs_x - 1)
        if y_periodic:
            span = (self.num_procs_y - 1) * self.num_procs_x
            if self.nbr_y_lo is None:
                changes["nbr_y_lo"] = self.rank + span
            if self.nbr_y_hi is None:
                changes["nbr_y_hi"] = self.rank - span
        return replace(self, **changes)


def validate_world_size(world_size: int, num_procs_x: int, num_procs_y: int) -> None:
    """Raise DecompositionError unless world_size equals num_procs_x * num_procs_y."""
    _check_procs(num_procs_x, num_procs_y)
    if world_size != num_procs_x * num_procs_y:
        raise DecompositionError(
            f"mpi_size_world = {world_size} not equal to "
            f"numProcsX*numProcsY = {num_procs_x * num_procs_y}"
        )


def build_topology(rank: int, num_procs_x: int, num_procs_y: int) -> RankTopology:
    """Compute the non-periodic topology of ``rank``."""
    _check_procs(num_procs_x, num_procs_y)
    world_size = num_procs_x * num_procs_y
    if not 0 <= rank < world_size:
        raise DecompositionError(
            f"rank {rank} outside world of size {world_size}"
        )
    rank_x = rank % num_procs_x
    rank_y = rank // num_procs_x

    x_lo_boundary = rank_x - 1 < 0
    x_hi_boundary = rank_x + 1 > num_procs_x - 1
    y_lo_boundary = rank_y - 1 < 0
    y_hi_boundary = rank_y + 1 > num_procs_y - 1

    return RankTopology(
        rank=rank,
        num_procs_x=num_procs_x,
        num_procs_y=num_procs_y,
        rank_x=rank_x,
        rank_y=rank_y,
        nbr_x_lo=None if x_lo_boundary else rank_y * num_procs_x + rank_x - 1,
        nbr_x_hi=None if x_hi_boundary else rank_y * num_procs_x + rank_x + 1,
        nbr_y_lo=None if y_lo_boundary else (rank_y - 1) * num_procs_x + rank_x,
        nbr_y_hi=None if y_hi_boundary else (rank_y + 1) * num_procs_x + rank_x,
        x_lo_boundary=x_lo_boundary,
        x_hi_boundary=x_hi_boundary,
        y_lo_boundary=y_lo_boundary,
        y_hi_boundary=y_hi_boundary,
    )


def build_world(num_procs_x: int, num_procs_y: int) -> list[RankTopology]:
    """Topologies of every rank, indexed by rank."""
    _check_procs(num_procs_x, num_procs_y)
    return [
        build_topology(rank, num_procs_x, num_procs_y)
        for rank in range(num_procs_x * num_procs_y)
    ]


def halo_tags(
    rank: int, neighbor: int, num_procs_x: int, num_procs_y: int, high_side: bool
) -> HaloTags:
    """Send and receive tags for exchanging halos with ``neighbor``.

    ``high_side`` selects the neighbour on the high side of the rank.  The
    send tag of one side always matches the receive tag the neighbour uses
    for the opposite side.
    """
    _check_procs(num_procs_x, num_procs_y)
    twice_world = 2 * num_procs_x * num_procs_y
    send_base = (rank + num_procs_x) * (neighbor + twice_world)
    recv_base = (rank + twice_world) * (neighbor + num_procs_x)
    if high_side:
        return HaloTags(send=send_base + 200, recv=recv_base + 100)
    return HaloTags(send=send_base + 100, recv=recv_base + 200)