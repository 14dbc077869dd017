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
"""Lattice geometry and integer summation bounds.

Throughout this package a ``lattice`` is a (3, 3) matrix whose **columns**
are the lattice vectors, so that ``lattice @ x`` maps fractional
coordinates ``x`` to Cartesian coordinates.
"""
import itertools
from typing import Optional, Sequence, Union

import jax.numpy as jnp
import numpy as np
from jaxtyping import Array, Float, Int


def reciprocal_lattice(lattice: Float[Array, '3 3']) -> Float[Array, '3 3']:
  r"""The reciprocal lattice :math:`B = 2\pi A^{-T}`, vectors as columns."""
  return 2 * jnp.pi * jnp.linalg.inv(lattice).T


def unit_cell_volume(lattice: Float[Array, '3 3']) -> Float:
  """The volume of the unit cell."""
  return jnp.abs(jnp.linalg.det(lattice))


def is_degenerate(lattice: Union[np.ndarray, Float[Array, '3 3']]) -> bool:
  """Whether one of the lattice vectors is identically zero.

  Such lattices describe systems of lower dimension (or no periodicity at
  all) for which no Ewald sum is computed.
  """
  lattice = np.asarray(lattice)
  return bool(np.any(np.all(lattice == 0, axis=0)))


def estimate_integer_lattice_bounds(
  lattice: Union[np.ndarray, Float[Array, '3 3']],
  cutoff: float,
  shift: Optional[Sequence[float]] = None,
) -> Int[np.ndarray, '3']:
  r"""Estimate integer bounds for a lattice sum truncated at a radius.

  If :math:`\|A x\| \leq \delta` then
  :math:`|x_i| = |\langle A^{-T} e_i, A x \rangle| \leq \|A^{-T} e_i\|\delta`,
  so every integer vector :math:`x` inside the sphere of radius ``cutoff``
  satisfies :math:`|x_i| \leq` ``bounds[i]``. The estimate is conservative,
  it never truncates a vector lying inside the sphere.

  Args:
    lattice: lattice vectors as columns.
    cutoff: the radius in Cartesian space.
    shift: optional per-axis extension of the bounds, e.g. the largest span
      of fractional atomic positions along that axis.

  Returns:
    np.ndarray: three non-negative integers.
  """
  lattice = np.asarray(lattice, dtype=float)
  if shift is None:
    shift = np.zeros(3)
  shift = np.asarray(shift, dtype=float)

  inv_lattice_tr = np.linalg.inv(lattice.T)
  xlims = np.linalg.norm(inv_lattice_tr, axis=0) * cutoff + shift

  # Round up, unless exactly zero: a zero limit keeps a single index.
  tol = np.sqrt(np.finfo(float).eps)
  return np.array(
    [0 if xlim == 0 else int(np.ceil(xlim - tol)) for xlim in xlims],
    dtype=int
  )


def lattice_index_vectors(
  bounds: Union[Sequence[int], Int[np.ndarray, '3']]
) -> Int[np.ndarray, 'num 3']:
  """All integer vectors within symmetric bounds.

  Args:
    bounds: three non-negative integers. Axis ``i`` runs over
      ``[-bounds[i], bounds[i]]``.

  Returns:
    np.ndarray: an integer array of shape (num, 3), first axis varying
    slowest.
  """
  ranges = [np.arange(-int(b), int(b) + 1) for b in bounds]
  return np.array(list(itertools.product(*ranges)), dtype=int).reshape(-1, 3)
