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
r"""Ewald summation for periodic systems.

To compute the electrostatics of an array of point charges in a uniform
compensating background we use the Ewald splitting

.. math::
  \frac{1}{r} = \frac{\mathrm{erf}(\eta r)}{r} + \frac{\mathrm{erfc}(\eta r)}{r},

where the smooth part is summed in reciprocal space and the singular part in
real space. :math:`\eta` balances the cost of the two sums.

All positions are fractional, the lattice holds its vectors as columns, and
forces are minus the derivatives of the energy with respect to the fractional
positions.
"""
from typing import Optional, Tuple, Union

import jax.numpy as jnp
import numpy as np
from absl import logging
from jaxtyping import Array, Complex, Float, Int

from ..errors import EwaldShapeMismatchError, PhononDisplacementError
from .lattice import (
  estimate_integer_lattice_bounds,
  is_degenerate,
  lattice_index_vectors,
  reciprocal_lattice,
  unit_cell_volume,
)
from .utils import complex_erfc


def _working_dtype(lattice: Array):
  if jnp.issubdtype(lattice.dtype, jnp.floating):
    return lattice.dtype
  return jnp.result_type(float)


def default_eta(lattice: Float[Array, '3 3']) -> Optional[float]:
  """The default splitting parameter of a lattice.

  The choice balances the decay of both sums with a slight bias towards the
  reciprocal summation.

  Args:
    lattice (Float[Array, '3 3']): lattice vectors as columns.

  Returns:
    Optional[float]: the splitting parameter, ``None`` if the lattice has a
    zero lattice vector.
  """
  if is_degenerate(lattice):
    return None
  lattice = np.asarray(lattice, dtype=float)
  recip_lattice = 2 * np.pi * np.linalg.inv(lattice).T
  return float(
    np.sqrt(
      np.sqrt(
        1.69 * np.linalg.norm(recip_lattice / (2 * np.pi)) /
        np.linalg.norm(lattice)
      )
    ) / 2
  )


def numerical_cutoffs(dtype) -> Tuple[float, float]:
  """Largest arguments of ``exp(-x)`` and ``erfc(x)`` worth summing.

  Both are derived from the machine epsilon of ``dtype``, hence the sums
  widen automatically in higher precision. They are very conservative.

  Returns:
    Tuple[float, float]: ``(max_exp_arg, max_erfc_arg)``.
  """
  max_exp_arg = -np.log(np.finfo(dtype).eps) + 5  # add some wiggle room
  # erfc(x) ~= exp(-x^2)/(sqrt(pi)x) for large x
  max_erfc_arg = np.sqrt(max_exp_arg)
  return float(max_exp_arg), float(max_erfc_arg)


def reciprocal_bounds(
  lattice: Float[Array, '3 3'],
  eta: float,
  dtype=None,
) -> Int[np.ndarray, '3']:
  r"""Summation bounds of the reciprocal-space sum.

  The terms decay as :math:`\exp(-\|BG\|^2 / 4\eta^2)`, where :math:`B` is the
  reciprocal lattice, so we sum :math:`\|BG\| / 2\eta \leq`
  ``sqrt(max_exp_arg)``.
  """
  lattice = jnp.asarray(lattice)
  dtype = dtype or _working_dtype(lattice)
  max_exp_arg, _ = numerical_cutoffs(dtype)
  return estimate_integer_lattice_bounds(
    reciprocal_lattice(lattice), np.sqrt(max_exp_arg) * 2 * eta
  )


def real_space_bounds(
  lattice: Float[Array, '3 3'],
  positions: Float[Array, 'atom 3'],
  eta: float,
  dtype=None,
) -> Int[np.ndarray, '3']:
  r"""Summation bounds of the real-space sum.

  The terms decay as :math:`\mathrm{erfc}(\eta\|A(r_j - r_k - R)\|)`, so we
  sum :math:`\|A(r_j - r_k - R)\|\eta \leq` ``max_erfc_arg``, the bounds
  being extended by the span of the positions along each axis.
  """
  lattice = jnp.asarray(lattice)
  dtype = dtype or _working_dtype(lattice)
  _, max_erfc_arg = numerical_cutoffs(dtype)
  positions = np.asarray(positions, dtype=float)
  pos_lims = np.max(positions, axis=0) - np.min(positions, axis=0)
  return estimate_integer_lattice_bounds(
    lattice, max_erfc_arg / eta, pos_lims
  )


def _check_inputs(charges, positions, compute_forces, q, ph_disp):
  if charges.shape[0] != positions.shape[0]:
    raise EwaldShapeMismatchError(
      "charges", charges.shape, "positions", positions.shape
    )
  if ph_disp is not None:
    if q is None:
      raise PhononDisplacementError("a wavevector q. Got q=None")
    if not compute_forces:
      raise PhononDisplacementError(
        "the forces to be computed. Got compute_forces=False"
      )
    if ph_disp.shape != positions.shape:
      raise EwaldShapeMismatchError(
        "ph_disp", ph_disp.shape, "positions", positions.shape
      )


def _reciprocal_sum(
  recip_lattice, charges, positions, eta, g_lims, q=None, ph_disp=None
):
  """Reciprocal-space sum without the neutrality correction and the
  ``4 pi / V`` factor, together with the (unscaled) gradient of the sum with
  respect to the positions."""
  g_int = lattice_index_vectors(g_lims)
  g_int = g_int[np.any(g_int != 0, axis=1)]
  dtype = positions.dtype

  if ph_disp is None:
    g_vec = jnp.asarray(g_int, dtype=dtype)
    g_sq = jnp.sum((g_vec @ recip_lattice.T)**2, axis=-1)  # [g]
    weight = jnp.exp(-g_sq / 4 / eta**2) / g_sq
    phase = 2 * jnp.pi * positions @ g_vec.T  # [atom, g]
    cos_strucfac = charges @ jnp.cos(phase)
    sin_strucfac = charges @ jnp.sin(phase)
    sum_strucfac = cos_strucfac**2 + sin_strucfac**2
    sum_recip = jnp.sum(sum_strucfac * weight)

    # d|S|^2/dr_i = 2 cos_sf dc_i + 2 sin_sf ds_i, with
    # dc_i = -Z_i 2pi G sin(2pi G.r_i) and ds_i = Z_i 2pi G cos(2pi G.r_i).
    dsum = 2 * 2 * jnp.pi * charges[:, None] * (
      sin_strucfac * jnp.cos(phase) - cos_strucfac * jnp.sin(phase)
    )  # [atom, g]
    grad_recip = (dsum * weight) @ g_vec  # [atom, 3]
    return sum_recip, grad_recip

  k_int = g_int + np.asarray(q, dtype=float)
  k_int = k_int[np.any(k_int != 0, axis=1)]
  k_vec = jnp.asarray(k_int, dtype=dtype)
  k_sq = jnp.sum((k_vec @ recip_lattice.T)**2, axis=-1)
  weight = jnp.exp(-k_sq / 4 / eta**2) / k_sq
  phase = 2j * jnp.pi * (positions + ph_disp) @ k_vec.T
  # S(k) S(-k) is |S(k)|^2 for real displacements and holomorphic otherwise.
  strucfac_plus = charges @ jnp.exp(phase)
  strucfac_minus = charges @ jnp.exp(-phase)
  return jnp.sum(strucfac_plus * strucfac_minus * weight), None


def _real_space_sum(
  lattice, charges, positions, eta, r_lims, q=None, ph_disp=None
):
  """Real-space sum without the self-energy correction, together with the
  gradient of the full real-space energy with respect to the positions."""
  num_atom = positions.shape[0]
  r_int = lattice_index_vectors(r_lims)
  # Avoid self-interaction: only the atom itself in the home cell.
  self_pair = (
    np.all(r_int == 0, axis=1)[:, None, None] &
    np.eye(num_atom, dtype=bool)[None]
  )  # [R, atom, atom]

  r_vec = jnp.asarray(r_int, dtype=positions.dtype)
  t_i = positions[None, :, None, :]
  t_j = positions[None, None, :, :] + r_vec[:, None, None, :]
  if ph_disp is not None:
    # The forces are evaluated at the nuclei of the home cell, where the
    # phase factor is one.
    t_i = t_i + ph_disp[None, :, None, :]
    bloch_phase = jnp.exp(2j * jnp.pi * r_vec @ jnp.asarray(q, r_vec.dtype))
    t_j = t_j + ph_disp[None, None, :, :] * bloch_phase[:, None, None, None]

  delta_r = (t_i - t_j) @ lattice.T  # [R, atom, atom, 3]
  delta_r = jnp.where(self_pair[..., None], 1., delta_r)
  # No conjugation: the distance is continued holomorphically.
  dist = jnp.sqrt(jnp.sum(delta_r**2, axis=-1))

  zz = charges[:, None] * charges[None, :]
  energy_contribution = zz * complex_erfc(eta * dist) / dist
  energy_contribution = jnp.where(self_pair, 0., energy_contribution)

  # derivative of the energy contribution with respect to the distance
  de_ddist = zz * eta * (-2 * jnp.exp(-(eta * dist)**2) / jnp.sqrt(jnp.pi))
  de_ddist = (de_ddist - energy_contribution) / dist
  de_ddist = jnp.where(self_pair, 0., de_ddist)
  de_dti = jnp.sum((de_ddist / dist)[..., None] * delta_r, axis=(0, 2))
  grad_real = de_dti @ lattice  # lattice.T @ dE/dr for every atom

  return jnp.sum(energy_contribution), grad_real


def energy_ewald(
  lattice: Float[Array, '3 3'],
  charges: Float[Array, 'atom'],
  positions: Float[Array, 'atom 3'],
  eta: Optional[float] = None,
  compute_forces: bool = False,
  q: Optional[Float[Array, '3']] = None,
  ph_disp: Optional[Complex[Array, 'atom 3']] = None,
) -> Union[Float, Tuple[Float, Float[Array, 'atom 3']]]:
  r"""Ewald energy (and forces) of an array of point charges.

  Computes the energy of the atoms of the reference unit cell, for an
  infinite array of atoms at positions
  :math:`r_{iR} = r_i + R + u_i e^{2\pi i q \cdot R}` in a uniform
  background of compensating charge yielding net neutrality.

  For now this function returns zero energy and forces for lattices having a
  zero lattice vector (non-3D systems).

  .. note::
    Further reading:

    - Textbook: Martin, R. M. (2020). Electronic structure: basic theory and practical methods. Cambridge university press. (Appendix F.2)

  Args:
    lattice (Float[Array, '3 3']): lattice vectors as columns.
    charges (Float[Array, 'atom']): the point charges.
    positions (Float[Array, 'atom 3']): fractional positions of the charges.
    eta (float, optional): the splitting parameter. Defaults to
      :func:`default_eta`.
    compute_forces (bool): also return minus the derivatives of the energy
      with respect to ``positions``. Defaults to False.
    q (Float[Array, '3'], optional): the phonon wavevector, in fractional
      reciprocal coordinates.
    ph_disp (Complex[Array, 'atom 3'], optional): the phonon displacement
      :math:`u_i` of each atom, in fractional coordinates. Requires ``q``
      and ``compute_forces``.

  Returns:
    The energy, or a tuple ``(energy, forces)`` if ``compute_forces``. The
    energy is complex when a phonon displacement is given.

  Raises:
    EwaldShapeMismatchError: if charges, positions and displacements do not
      describe the same atoms.
    PhononDisplacementError: if ``ph_disp`` comes without ``q`` or without
      ``compute_forces``.
  """
  lattice = jnp.asarray(lattice)
  dtype = _working_dtype(lattice)
  lattice = lattice.astype(dtype)
  charges = jnp.asarray(charges, dtype=dtype)
  positions = jnp.asarray(positions, dtype=dtype)
  if ph_disp is not None:
    ph_disp = jnp.asarray(ph_disp)
  _check_inputs(charges, positions, compute_forces, q, ph_disp)

  zero_energy = jnp.zeros((), dtype=dtype)
  if is_degenerate(lattice) or positions.shape[0] == 0:
    if compute_forces:
      return zero_energy, jnp.zeros_like(positions)
    return zero_energy

  if eta is None:
    eta = default_eta(lattice)
  eta = float(eta)

  recip_lattice = reciprocal_lattice(lattice)
  g_lims = reciprocal_bounds(lattice, eta, dtype)
  r_lims = real_space_bounds(lattice, positions, eta, dtype)
  logging.debug(
    f"Ewald sum with eta={eta:.6f}, reciprocal bounds {g_lims}, "
    f"real-space bounds {r_lims}."
  )

  # Reciprocal space sum, initialized with the charge neutrality correction.
  sum_recip, grad_recip = _reciprocal_sum(
    recip_lattice, charges, positions, eta, g_lims, q, ph_disp
  )
  sum_recip = sum_recip - jnp.sum(charges)**2 / 4 / eta**2
  recip_factor = 4 * jnp.pi / unit_cell_volume(lattice)
  sum_recip = sum_recip * recip_factor

  # Real space sum, initialized with the uniform background correction.
  sum_real, grad_real = _real_space_sum(
    lattice, charges, positions, eta, r_lims, q, ph_disp
  )
  sum_real = sum_real - 2 * eta / jnp.sqrt(jnp.pi) * jnp.sum(charges**2)

  energy = (sum_recip + sum_real) / 2  # divide by 2 for double counting

  if not compute_forces:
    return energy
  forces = -grad_real
  if ph_disp is None:
    forces = forces - grad_recip * recip_factor / 2
  return energy, forces
