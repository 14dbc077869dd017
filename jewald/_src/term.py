# Copyright 2025 Garena Online Private Limited
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Ewald term of a crystal.

The electrostatic energy per unit cell of the array of point charges defined
by a :class:`Crystal`, in a uniform background of compensating charge
yielding net neutrality. The energy does not depend on the electrons and is
computed once.
"""
from functools import cached_property
from typing import Optional

import jax.numpy as jnp
from jaxtyping import Array, Complex, Float

from ..errors import DegenerateLatticeError
from .crystal import Crystal
from .dynmat import dynmat_ewald
from .ewald import default_eta, energy_ewald
from .lattice import is_degenerate


class EwaldTerm:
  """The Ewald term of a crystal.

  Args:
    crystal (Crystal): the crystal.
    eta (float, optional): the splitting parameter. Defaults to the default
      splitting parameter of the crystal lattice.
  """

  def __init__(self, crystal: Crystal, eta: Optional[float] = None):
    self.crystal = crystal
    self._eta = eta

  @cached_property
  def eta(self) -> float:
    """The splitting parameter, derived from the lattice on first access."""
    if self._eta is not None:
      return float(self._eta)
    eta = default_eta(self.crystal.lattice)
    if eta is None:
      raise DegenerateLatticeError(self.crystal.cell_vectors)
    return eta

  def _eta_or_none(self):
    # Degenerate lattices are evaluated to zero without a splitting parameter.
    if self._eta is None and is_degenerate(self.crystal.lattice):
      return None
    return self.eta

  def _charges(self):
    return jnp.asarray(self.crystal.charges)

  @cached_property
  def energy(self) -> Float:
    """The Ewald energy, computed once."""
    if self.crystal.num_atom == 0:
      return jnp.zeros(())
    return energy_ewald(
      self.crystal.lattice,
      self._charges(),
      self.crystal.scaled_positions,
      eta=self._eta_or_none(),
    )

  def forces(self) -> Float[Array, 'atom 3']:
    """Minus the derivatives of the energy with respect to the fractional
    positions."""
    _, forces = energy_ewald(
      self.crystal.lattice,
      self._charges(),
      self.crystal.scaled_positions,
      eta=self._eta_or_none(),
      compute_forces=True,
    )
    return forces

  def dynmat(
    self, q: Optional[Float[Array, '3']] = None
  ) -> Complex[Array, 'n n']:
    """The dynamical matrix at the phonon wavevector ``q``."""
    return dynmat_ewald(
      self.crystal.lattice,
      self._charges(),
      self.crystal.scaled_positions,
      eta=self._eta_or_none(),
      q=q,
    )
