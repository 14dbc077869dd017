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

import os
from dataclasses import dataclass
from typing import Optional

import cloudpickle as pickle
import jax
import numpy as np
from absl import logging

from .._src.const import HARTREE2EV
from .._src.crystal import Crystal
from .._src.ewald import real_space_bounds, reciprocal_bounds
from .._src.term import EwaldTerm
from .._src.utils import safe_real
from ..config import JewaldConfigDict
from .calc_utils import create_crystal, set_env_params


@dataclass
class EwaldOutput:
  """Output of the Ewald calculation.

  Args:
    config (JewaldConfigDict): Configuration for the calculation.
    crystal (Crystal): The crystal object.
    eta (float): The splitting parameter.
    energy (float): The Ewald energy in Hartree.
    forces (Optional[jax.Array]): Minus the gradient of the energy with
      respect to the fractional positions.
    dynmat (Optional[jax.Array]): The dynamical matrix at ``config.q``.
  """
  config: JewaldConfigDict
  crystal: Crystal
  eta: float
  energy: float
  forces: Optional[jax.Array] = None
  dynmat: Optional[jax.Array] = None


def calc(
  config: JewaldConfigDict, crystal: Optional[Crystal] = None
) -> EwaldOutput:
  """Calculate the Ewald energy, forces and dynamical matrix of a crystal.

  Args:
    config (JewaldConfigDict): Configuration for the calculation.
    crystal (Crystal, optional): The crystal. Defaults to the crystal read
      from ``config.crystal_file_path``.

  Returns:
    EwaldOutput: The Ewald quantities of the crystal.
  """
  set_env_params(config)
  if crystal is None:
    crystal = create_crystal(config)
  logging.info(f"Crystal: {''.join(crystal.symbols or [])}")
  logging.info(f"Number of atoms: {crystal.num_atom}")
  logging.info(f"Unit cell volume: {float(crystal.vol):.6f} Bohr^3")
  logging.info(f"Total charge: {np.sum(crystal.charges)}")

  term = EwaldTerm(crystal, eta=config.ewald_eta)
  eta = term.eta
  logging.info(f"Ewald splitting parameter: {eta:.6f}")
  logging.info(
    f"Reciprocal-space bounds: {reciprocal_bounds(crystal.lattice, eta)}"
  )
  logging.info(
    "Real-space bounds: "
    f"{real_space_bounds(crystal.lattice, crystal.scaled_positions, eta)}"
  )

  energy = float(safe_real(term.energy))
  logging.info(f"Ewald Energy: {energy:.8f} Ha ({energy * HARTREE2EV:.6f} eV)")

  output = EwaldOutput(config, crystal, eta, energy)

  if config.compute_forces:
    output.forces = term.forces()
    logging.info(f"Ewald forces (fractional):\n{np.asarray(output.forces)}")

  if config.compute_dynmat:
    q = np.asarray(config.q, dtype=float)
    output.dynmat = term.dynmat(q)
    logging.info(f"Dynamical matrix at q={q}: shape {output.dynmat.shape}")

  if config.save_dir is not None:
    os.makedirs(config.save_dir, exist_ok=True)
    save_file = os.path.join(
      config.save_dir, ''.join(crystal.symbols or ["crystal"]) + "_ewald.pkl"
    )
    with open(save_file, "wb") as f:
      pickle.dump(output, f)
    logging.info(f"Output saved to {save_file}")

  return output
