"""Lattice geometry.

Lattices hold the lattice vectors as columns.
"""

from ._src.lattice import (
  estimate_integer_lattice_bounds,
  is_degenerate,
  lattice_index_vectors,
  reciprocal_lattice,
  unit_cell_volume,
)

__all__ = [
  "estimate_integer_lattice_bounds",
  "is_degenerate",
  "lattice_index_vectors",
  "reciprocal_lattice",
  "unit_cell_volume",
]
