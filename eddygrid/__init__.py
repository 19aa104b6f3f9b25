"""Rank topology, halo exchange, grid parameters and topography input for decomposed grids."""

__version__ = "0.1.0"

__all__ = [
    "topology",
    "halo",
    "grid_config",
]