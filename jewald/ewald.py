"""Ewald summation for periodic systems. """

from ._src.dynmat import dynmat_ewald, dynmat_ewald_recip
from ._src.ewald import (
  default_eta,
  energy_ewald,
  numerical_cutoffs,
  real_space_bounds,
  reciprocal_bounds,
)
from ._src.term import EwaldTerm

__all__ = [
  "default_eta",
  "energy_ewald",
  "numerical_cutoffs",
  "real_space_bounds",
  "reciprocal_bounds",
  "dynmat_ewald",
  "dynmat_ewald_recip",
  "EwaldTerm",
]
