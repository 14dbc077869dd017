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
"""Test for ewald.py"""

import jax
import jax.numpy as jnp
import numpy as np
import scipy.special
from absl.testing import absltest, parameterized

from jewald import errors
from jewald._src.ewald import (
  _real_space_sum,
  _reciprocal_sum,
  default_eta,
  energy_ewald,
  numerical_cutoffs,
  real_space_bounds,
  reciprocal_bounds,
)
from jewald._src.lattice import (
  lattice_index_vectors,
  reciprocal_lattice,
  unit_cell_volume,
)

jax.config.update("jax_enable_x64", True)


def _rocksalt(a):
  na = np.array([[0, 0, 0], [0, .5, .5], [.5, 0, .5], [.5, .5, 0]])
  cl = na + np.array([.5, 0, 0])
  positions = np.concatenate([na, cl]) % 1.
  charges = np.array([1.] * 4 + [-1.] * 4)
  return a * np.eye(3), charges, positions


class TestEwald(parameterized.TestCase):

  def setUp(self):
    self.key = jax.random.PRNGKey(123)
    self.lattice = np.array(
      [[7.0, 0.5, -0.3], [0.2, 6.5, 0.4], [-0.4, 0.1, 8.0]]
    )
    self.charges = np.array([1.5, -1.0, 2.0, -2.5])
    self.positions = np.array(
      [
        [0.10, 0.20, 0.30],
        [0.55, 0.45, 0.15],
        [0.80, 0.10, 0.70],
        [0.30, 0.75, 0.60],
      ]
    )

  def test_default_eta(self):
    for side in [5., 20.]:
      np.testing.assert_allclose(
        default_eta(side * np.eye(3)), np.sqrt(1.3 / side) / 2
      )
    self.assertIsNone(default_eta(np.diag([1., 1., 0.])))
    self.assertGreater(default_eta(self.lattice), 0.)

  def test_numerical_cutoffs(self):
    max_exp_arg, max_erfc_arg = numerical_cutoffs(jnp.float64)
    np.testing.assert_allclose(max_exp_arg, 52 * np.log(2) + 5)
    np.testing.assert_allclose(max_erfc_arg, np.sqrt(max_exp_arg))
    max_exp_arg_32, _ = numerical_cutoffs(jnp.float32)
    self.assertLess(max_exp_arg_32, max_exp_arg)

  def test_bounds_grow_with_eta(self):
    small = reciprocal_bounds(self.lattice, 0.5)
    large = reciprocal_bounds(self.lattice, 2.)
    self.assertTrue(np.all(large >= small))
    self.assertTrue(np.all(large > 0))
    small = real_space_bounds(self.lattice, self.positions, 2.)
    large = real_space_bounds(self.lattice, self.positions, 0.5)
    self.assertTrue(np.all(large >= small))

  def test_pair_in_large_box(self):
    lattice = 20. * np.eye(3)
    charges = np.array([1., -1.])
    positions = np.array([[0., 0., 0.], [2. / 20., 0., 0.]])
    energy, forces = energy_ewald(
      lattice, charges, positions, compute_forces=True
    )
    np.testing.assert_allclose(energy, -0.5, atol=5e-3)

    # Cartesian force 1 / d^2, i.e. 20 / 4 in fractional coordinates.
    np.testing.assert_allclose(forces[0, 0], 5., rtol=2e-2)
    np.testing.assert_allclose(forces[0, 1:], 0., atol=1e-8)
    np.testing.assert_allclose(forces[0], -forces[1], atol=1e-8)

  def test_coulomb_limit(self):
    separation = 2.
    charges = np.array([1., -1.])
    errs = []
    for side in [20., 40., 80.]:
      positions = np.array([[0., 0., 0.], [separation / side, 0., 0.]])
      energy = energy_ewald(side * np.eye(3), charges, positions)
      errs.append(abs(energy + 1 / separation))
    self.assertTrue(errs[0] > errs[1] > errs[2], msg=f"{errs}")
    self.assertLess(errs[-1], 1e-4)

  @parameterized.parameters((2.0, 3.0), (2.0, None))
  def test_eta_independence(self, eta1, eta2):
    lattice = 5. * np.eye(3)
    charges = np.array([1., -1.])
    positions = np.array([[0.1, 0.2, 0.3], [0.4, 0.2, 0.3]])
    e1 = energy_ewald(lattice, charges, positions, eta=eta1)
    e2 = energy_ewald(lattice, charges, positions, eta=eta2)
    np.testing.assert_allclose(e1, e2, rtol=1e-10)

  @parameterized.parameters(
    # rocksalt, Madelung constant per ion pair, nearest neighbour a / 2
    ("rocksalt", 1.747564594633),
    # cesium chloride, nearest neighbour a sqrt(3) / 2
    ("cscl", 1.762674773070),
  )
  def test_madelung_constant(self, structure, madelung):
    a = 10.
    if structure == "rocksalt":
      lattice, charges, positions = _rocksalt(a)
      expected = -4 * madelung / (a / 2)
    else:
      lattice = a * np.eye(3)
      charges = np.array([1., -1.])
      positions = np.array([[0., 0., 0.], [.5, .5, .5]])
      expected = -madelung / (a * np.sqrt(3) / 2)
    energy = energy_ewald(lattice, charges, positions)
    np.testing.assert_allclose(energy, expected, rtol=1e-9)

  def test_permutation_invariance(self):
    perm = np.array([2, 0, 3, 1])
    e1, f1 = energy_ewald(
      self.lattice, self.charges, self.positions, compute_forces=True
    )
    e2, f2 = energy_ewald(
      self.lattice,
      self.charges[perm],
      self.positions[perm],
      compute_forces=True
    )
    np.testing.assert_allclose(e1, e2, rtol=1e-10)
    np.testing.assert_allclose(f1[perm], f2, rtol=1e-8, atol=1e-10)

  def test_translation_invariance(self):
    shift = jax.random.uniform(self.key, (3,), dtype=jnp.float64)
    e1 = energy_ewald(self.lattice, self.charges, self.positions)
    e2 = energy_ewald(self.lattice, self.charges, self.positions + shift)
    np.testing.assert_allclose(e1, e2, rtol=1e-10)

  def test_forces_are_minus_gradient(self):
    _, forces = energy_ewald(
      self.lattice, self.charges, self.positions, compute_forces=True
    )
    for i in range(len(self.charges)):
      key = jax.random.fold_in(self.key, i)
      delta = 1e-4 * jax.random.normal(key, (3,), dtype=jnp.float64)
      pos_plus = self.positions.copy()
      pos_plus[i] += delta
      pos_minus = self.positions.copy()
      pos_minus[i] -= delta
      e_plus = energy_ewald(self.lattice, self.charges, pos_plus)
      e_minus = energy_ewald(self.lattice, self.charges, pos_minus)
      np.testing.assert_allclose(
        (e_plus - e_minus) / 2, -jnp.dot(forces[i], delta),
        rtol=1e-5,
        atol=1e-10
      )

  @parameterized.parameters(True, False)
  def test_total_force_vanishes(self, neutral):
    charges = self.charges if neutral else np.array([1., 2., -0.5, 0.7])
    _, forces = energy_ewald(
      self.lattice, charges, self.positions, compute_forces=True
    )
    np.testing.assert_allclose(jnp.sum(forces, axis=0), 0., atol=1e-10)

  def test_degenerate_lattice(self):
    lattice = np.diag([10., 10., 0.])
    energy, forces = energy_ewald(
      lattice, self.charges, self.positions, compute_forces=True
    )
    self.assertEqual(energy, 0.)
    np.testing.assert_array_equal(forces, np.zeros_like(self.positions))
    self.assertEqual(energy_ewald(lattice, self.charges, self.positions), 0.)

  def test_phonon_displacement_zero_amplitude(self):
    # A vanishing displacement leaves out the reciprocal-space gradient.
    q = np.array([0.1, 0.0, 0.2])
    eta = default_eta(self.lattice)
    energy, forces = energy_ewald(
      self.lattice,
      self.charges,
      self.positions,
      eta=eta,
      compute_forces=True,
      q=q,
      ph_disp=jnp.zeros(self.positions.shape, dtype=jnp.complex128),
    )
    self.assertTrue(jnp.iscomplexobj(forces))
    np.testing.assert_allclose(jnp.imag(forces), 0., atol=1e-12)
    self.assertTrue(np.all(np.isfinite(np.asarray(energy))))

    _, unperturbed_forces = energy_ewald(
      self.lattice, self.charges, self.positions, eta=eta, compute_forces=True
    )
    _, grad_recip = _reciprocal_sum(
      reciprocal_lattice(jnp.asarray(self.lattice)),
      jnp.asarray(self.charges),
      jnp.asarray(self.positions),
      eta,
      reciprocal_bounds(self.lattice, eta),
    )
    recip_forces = -grad_recip * 4 * np.pi / unit_cell_volume(self.lattice) / 2
    np.testing.assert_allclose(
      jnp.real(forces), unperturbed_forces - recip_forces, atol=1e-10
    )
    self.assertGreater(np.max(np.abs(recip_forces)), 1e-6)

  def test_real_space_sum_finite_phonon_displacement(self):
    q = np.array([0.2, 0.0, 0.1])
    eta = default_eta(self.lattice)
    ph_disp = np.zeros(self.positions.shape, dtype=complex)
    ph_disp[0, 0] = 0.05
    ph_disp[2, 1] = 0.03 - 0.02j
    r_lims = real_space_bounds(self.lattice, self.positions, eta)
    sum_real, _ = _real_space_sum(
      jnp.asarray(self.lattice),
      jnp.asarray(self.charges),
      jnp.asarray(self.positions),
      eta,
      r_lims,
      q,
      jnp.asarray(ph_disp),
    )

    expected = 0j
    num_atom = len(self.charges)
    for r in lattice_index_vectors(r_lims):
      bloch_phase = np.exp(2j * np.pi * np.dot(q, r))
      for i in range(num_atom):
        for j in range(num_atom):
          if i == j and not np.any(r):
            continue
          t_i = self.positions[i] + ph_disp[i]
          t_j = self.positions[j] + r + ph_disp[j] * bloch_phase
          delta_r = self.lattice @ (t_i - t_j)
          dist = np.sqrt(np.sum(delta_r**2))
          expected += (
            self.charges[i] * self.charges[j] *
            scipy.special.erfc(eta * dist) / dist
          )

    self.assertGreater(abs(expected.imag), 1e-6)
    np.testing.assert_allclose(sum_real, expected, rtol=1e-10)

  def test_mismatched_shapes(self):
    with self.assertRaises(errors.EwaldShapeMismatchError):
      energy_ewald(self.lattice, self.charges[:3], self.positions)
    with self.assertRaises(errors.EwaldShapeMismatchError):
      energy_ewald(
        self.lattice,
        self.charges,
        self.positions,
        compute_forces=True,
        q=np.zeros(3),
        ph_disp=np.zeros((2, 3)),
      )

  def test_phonon_displacement_preconditions(self):
    ph_disp = np.zeros_like(self.positions)
    with self.assertRaises(errors.PhononDisplacementError):
      energy_ewald(
        self.lattice,
        self.charges,
        self.positions,
        compute_forces=True,
        ph_disp=ph_disp
      )
    with self.assertRaises(errors.PhononDisplacementError):
      energy_ewald(
        self.lattice,
        self.charges,
        self.positions,
        q=np.zeros(3),
        ph_disp=ph_disp
      )


if __name__ == "__main__":
  absltest.main()
