# eddygrid

Building blocks for grids of atmospheric simulations that are split
horizontally over many ranks, written with NumPy.

The package has three modules:

- `eddygrid.topology` lays out ranks for a 2-D horizontal decomposition
  over `num_procs_x × num_procs_y` ranks.
- `eddygrid.halo` exchanges halo cells between neighbouring subdomains.
- `eddygrid.grid_config` holds grid parameters and per-rank extents, and
  reads and writes topography files.

Arrays are indexed `[i, j, k]` (x, y, z). A 3-D per-rank field has shape
`(nxp + 2*nh, nyp + 2*nh, nzp + 2*nh)`. A 2-D x-y field has shape
`(nxp + 2*nh, nyp + 2*nh)`.

## Installation

```
pip install eddygrid
```

## Rank topology

Ranks are numbered row-major. A rank's x-index is `rank % num_procs_x`
and its y-index is `rank // num_procs_x`.

- `build_topology(rank, num_procs_x, num_procs_y)` returns a frozen
  `RankTopology`. It holds the rank's x and y indices and the neighbour
  ranks `nbr_x_lo`, `nbr_x_hi`, `nbr_y_lo` and `nbr_y_hi`. A neighbour is
  `None` where the rank lies on the global domain edge. In that case the
  flag `x_lo_boundary`, `x_hi_boundary`, `y_lo_boundary` or
  `y_hi_boundary` is true.
- `build_world(num_procs_x, num_procs_y)` returns the topologies of all
  ranks as a list indexed by rank.
- `RankTopology.with_periodic(x_periodic, y_periodic)` returns a copy in
  which the missing neighbours wrap around cyclically. The boundary flags
  are kept.
- `validate_world_size(world_size, num_procs_x, num_procs_y)` checks that
  the world size equals `num_procs_x * num_procs_y`.
- `halo_tags(rank, neighbor, num_procs_x, num_procs_y, high_side)`
  returns the `send` and `recv` message tags for one side of an exchange.
  The send tag of one side matches the receive tag that the neighbour
  uses for the opposite side.

```python
from eddygrid.topology import build_world

for topo in build_world(3, 2):
    print(topo.rank, topo.nbr_x_lo, topo.nbr_x_hi, topo.nbr_y_lo, topo.nbr_y_hi)
```

## Halo exchange

`exchange_x`, `exchange_y`, `exchange_x_2d` and `exchange_y_2d` each
take a list of per-rank fields (one NumPy array per rank, all of the same
shape), the list of topologies, and the halo width `nh`. Each function
copies the `nh` interior planes next to each rank's edge into the facing
halo of the neighbour on that side. The fields are updated in place.
Halos on a side without a neighbour are left untouched. With `nh == 0`
nothing is exchanged.

```python
import numpy as np
from eddygrid.topology import build_world
from eddygrid.halo import exchange_x

world = build_world(2, 1)
nh = 1
fields = [
    np.full((4 + 2 * nh, 3 + 2 * nh, 2 + 2 * nh), float(t.rank), dtype=np.float32)
    for t in world
]
exchange_x(fields, world, nh)
assert (fields[0][-1] == 1.0).all()  # rank 0's high-x halo now holds rank 1's data
```

`halo_buffer_size(nxp, nyp, nzp, nh)` gives the number of elements in one
send or receive buffer. The buffer holds the larger lateral face,
including halos, over the full vertical column.

## Grid parameters and topography

`GridConfig` holds `nx`, `ny`, `nz`, `nh`, the resolutions `d_xi`,
`d_eta` and `d_zeta`, `coord_horiz_halos`, the vertical-deformation
settings, and the optional `grid_file` and `topo_file` names. Its
properties `dx_inv`, `dy_inv` and `dz_inv` give the inverse resolutions.

- `GridConfig.validate()` raises `GridError` and lists every parameter
  that lies outside its allowed range.
- `GridConfig.local_extents(num_procs_x, num_procs_y)` returns a
  `LocalExtents` with the fields `nxp`, `nyp`, `nzp` and `nh`. It also
  gives the non-halo index bounds (`i_min` … `k_max`) and the padded
  shapes `shape_3d` and `shape_2d`. `nx` and `ny` must divide evenly by
  the rank counts.

```python
from eddygrid.grid_config import GridConfig

config = GridConfig(nx=16, ny=16, nz=8, nh=3, d_xi=10.0, d_eta=10.0, d_zeta=5.0)
config.validate()
extents = config.local_extents(2, 2)
print(extents.nxp, extents.shape_3d)   # 8 (14, 14, 14)
```

A topography file is binary and uses native byte order. It starts with
two 32-bit integers, `nx` and `ny`. They are followed by `nx * ny`
32-bit floats, with the x index varying fastest.

- `write_topography(path, topo)` writes an `(nx, ny)` array to a file in
  this format.
- `read_topography(path, nx, ny)` reads a file back as a float32
  `(nx, ny)` array. It checks the extents stored in the file.
- `local_topography(topo_global, topology, extents)` cuts one rank's
  halo-padded piece out of the global field. Halo cells beyond the global
  edge repeat the nearest edge value.

## Errors

- `DecompositionError` (a `ValueError`) is raised by the topology
  functions for rank counts below 1, a rank outside the world, or a world
  size that does not match. The halo exchange raises it for inconsistent
  neighbour relations.
- `GridError` (a `ValueError`) is raised for parameters out of range, for
  extents that do not divide evenly, and for topography files that are
  missing, short or of the wrong extents.
- The halo functions raise `ValueError` or `TypeError` for fields of the
  wrong number, kind, dimension or shape.

## What it does not do

The package does not scatter a global field into per-rank subdomains or
gather it back. It does not generate cell-centre coordinates, coordinate
halos or vertical stretching, and it does not compute Jacobian metric
terms. The exchanges run on lists of arrays held in one process. No
messages are passed between processes.

## Running the tests

```
pip install "eddygrid[test]"
pytest
```