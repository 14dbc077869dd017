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
"""Dynamical matrix of the Ewald energy.

The matrix is the Fourier transform at the phonon wavevector ``q`` of the
force constants, i.e. of the second derivatives of the Ewald energy with
respect to atomic displacements. It is not weighted by the atomic masses.
Displacements, forces and ``q`` are all expressed in fractional coordinates.
"""
from typing import Optional

import jax.numpy as jnp
import numpy as np
from absl import logging
from jaxtyping import Array, Complex, Float

from ..errors import EwaldShapeMismatchError
from .ewald import (
  _working_dtype,
  default_eta,
  energy_ewald,
  reciprocal_bounds,
)
from .lattice import (
  is_degenerate,
  lattice_index_vectors,
  reciprocal_lattice,
  unit_cell_volume,
)
from .utils import forward_derivative


def dynmat_ewald_recip(
  lattice: Float[Array, '3 3'],
  charges: Float[Array, 'atom'],
  positions: Float[Array, 'atom 3'],
  eta: float,
  q: Optional[Float[Array, '3']] = None,
) -> Complex[Array, 'atom 3 atom 3']:
  r"""Reciprocal-space part of the dynamical matrix, in closed form.

  For every ordered pair of atoms :math:`(\sigma, \tau)` the block is

  .. math::
    \frac{4\pi}{V} \sum_{G + q \neq 0} Z_\sigma Z_\tau
    \frac{e^{-|B(G+q)|^2 / 4\eta^2}}{|B(G+q)|^2}
    e^{2\pi i (G+q) \cdot (r_\sigma - r_\tau)}
    \, 4\pi^2 (G+q)(G+q)^T,

  and the diagonal blocks :math:`\sigma = \tau` are corrected by the
  derivative of the self term of the structure factor, summed over the
  non-zero :math:`G` only.

  Returns:
    Complex[Array, 'atom 3 atom 3']: the blocks, indexed
    ``[sigma, alpha, tau, gamma]``.
  """
  lattice = jnp.asarray(lattice)
  dtype = _working_dtype(lattice)
  lattice = lattice.astype(dtype)
  charges = jnp.asarray(charges, dtype=dtype)
  positions = jnp.asarray(positions, dtype=dtype)
  q = np.zeros(3) if q is None else np.asarray(q, dtype=float)

  recip_lattice = reciprocal_lattice(lattice)
  g_int = lattice_index_vectors(reciprocal_bounds(lattice, eta, dtype))

  k_int = g_int + q
  k_int = k_int[np.any(k_int != 0, axis=1)]
  k_vec = jnp.asarray(k_int, dtype=dtype)
  k_sq = jnp.sum((k_vec @ recip_lattice.T)**2, axis=-1)
  weight = jnp.exp(-k_sq / 4 / eta**2) / k_sq  # [k]
  bloch = jnp.exp(2j * jnp.pi * positions @ k_vec.T)  # [atom, k]
  dynmat_recip = (2 * jnp.pi)**2 * jnp.einsum(
    's,t,sk,tk,k,ka,kb->satb',
    charges,
    charges,
    bloch,
    jnp.conj(bloch),
    weight,
    k_vec,
    k_vec,
    optimize=True,
  )

  g_int = g_int[np.any(g_int != 0, axis=1)]
  g_vec = jnp.asarray(g_int, dtype=dtype)
  g_sq = jnp.sum((g_vec @ recip_lattice.T)**2, axis=-1)
  weight = jnp.exp(-g_sq / 4 / eta**2) / g_sq
  bloch = jnp.exp(2j * jnp.pi * positions @ g_vec.T)
  strucfac = charges @ bloch  # [g]
  dsum = charges[:, None] * jnp.conj(strucfac)[None] * bloch  # [atom, g]
  # dsum + conj(dsum), halved
  self_correction = (2 * jnp.pi)**2 * jnp.einsum(
    'sg,g,ga,gb->sab', jnp.real(dsum), weight, g_vec, g_vec
  )
  diag = jnp.arange(positions.shape[0])
  dynmat_recip = dynmat_recip.at[diag, :, diag, :].add(-self_correction)

  return dynmat_recip * 4 * jnp.pi / unit_cell_volume(lattice)


def dynmat_ewald(
  lattice: Float[Array, '3 3'],
  charges: Float[Array, 'atom'],
  positions: Float[Array, 'atom 3'],
  eta: Optional[float] = None,
  q: Optional[Float[Array, '3']] = None,
) -> Complex[Array, 'n n']:
  """Fourier transform of the force constant matrix of the Ewald energy.

  The real-space part is obtained by differentiating the forces with respect
  to the amplitude of a phonon displacement of one atom along one direction.
  The reciprocal-space part uses the closed form of
  :func:`dynmat_ewald_recip`.

  Lattices having a zero lattice vector give a zero matrix, like the
  energy and the forces.

  Args:
    lattice (Float[Array, '3 3']): lattice vectors as columns.
    charges (Float[Array, 'atom']): the point charges.
    positions (Float[Array, 'atom 3']): fractional positions.
    eta (float, optional): the splitting parameter. Defaults to
      :func:`jewald.ewald.default_eta`.
    q (Float[Array, '3'], optional): the phonon wavevector in fractional
      reciprocal coordinates. Defaults to zero.

  Returns:
    Complex[Array, 'n n']: the dynamical matrix with ``n = 3 * atom``; row
    and column ``3 * atom + direction``.
  """
  lattice = jnp.asarray(lattice)
  dtype = _working_dtype(lattice)
  charges = jnp.asarray(charges, dtype=dtype)
  positions = jnp.asarray(positions, dtype=dtype)
  if charges.shape[0] != positions.shape[0]:
    raise EwaldShapeMismatchError(
      "charges", charges.shape, "positions", positions.shape
    )
  num_atom = positions.shape[0]
  complex_dtype = jnp.result_type(dtype, jnp.complex64)
  if is_degenerate(lattice) or num_atom == 0:
    return jnp.zeros((3 * num_atom, 3 * num_atom), dtype=complex_dtype)

  if eta is None:
    eta = default_eta(lattice)
  eta = float(eta)
  if q is None:
    q = np.zeros(3)
  logging.info(f"Ewald dynamical matrix at q={np.asarray(q)}, eta={eta:.6f}")

  dynmat = jnp.zeros((num_atom, 3, num_atom, 3), dtype=complex_dtype)

  # Real part
  for tau in range(num_atom):
    for gamma in range(3):
      displacement = jnp.zeros_like(positions).at[tau, gamma].set(1.)

      def forces_fn(eps):
        _, forces = energy_ewald(
          lattice,
          charges,
          positions,
          eta=eta,
          compute_forces=True,
          q=q,
          ph_disp=eps * displacement,
        )
        return forces

      dynmat = dynmat.at[:, :, tau, gamma].set(-forward_derivative(forces_fn))

  # Reciprocal part
  dynmat = dynmat + dynmat_ewald_recip(lattice, charges, positions, eta, q)

  return jnp.reshape(dynmat, (3 * num_atom, 3 * num_atom))
