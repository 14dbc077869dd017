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
"""The Crystal class.

This module establishes the interface for the crystal structure. It's important
to note that all values are presented in ATOMIC UNITS inside, specifically
hartree for energy and Bohr for length. The input positions of atoms read from
geometry files should be in angstrom.
"""
from typing import List, Optional, Sequence, Union

import ase
import jax.numpy as jnp
import numpy as np
from ase.io import read
from chex import dataclass
from jaxtyping import Array, Float

from .const import ANGSTROM2BOHR
from .lattice import unit_cell_volume


@dataclass
class Crystal:
  r"""Crystal Structure Dataclass.

  A periodic array of point charges: the ionic charges, the absolute
  coordinates of each atom and the cell vectors.

  A Crystal object can be created via three methods:

  1. create from specifying the core attributes: ionic charges, absolute
  coordinates of each atom in Bohr unit (positions) and cell vectors (in Bohr
  unit, one lattice vector per row).
  2. create from a geometry file.
  3. create from atomic symbols.

  Examples:

  .. code:: python

    from jewald import Crystal

    # Create a crystal object from a xyz file.
    crystal = Crystal.create_from_file("nacl.xyz", charges=[1, -1])

    # Create a crystal object from crystal attributes.
    crystal = Crystal(
      charges=[1, -1],
      positions=[[0, 0, 0], [5.3, 5.3, 5.3]],
      cell_vectors=[[10.6, 0, 0], [0, 10.6, 0], [0, 0, 10.6]],
    )

  Args:
    charges (Float[Array, "atom"]): The ionic charges.
    positions (Float[Array, "atom 3"]): The absolute coordinates of each atom
      in Bohr unit.
    cell_vectors (Float[Array, '3 3']): The cell vectors in Bohr unit, one per
      row.
    symbols (Optional[List[str]], optional): The atomic symbols. Defaults to
      None.

  """
  charges: Float[Array, "atom"]
  positions: Float[Array, "atom 3"]
  cell_vectors: Float[Array, '3 3']
  symbols: Optional[List[str]] = None

  @property
  def lattice(self):
    r"""The lattice vectors as columns, the convention of
    :mod:`jewald.ewald`."""
    return jnp.asarray(self.cell_vectors).T

  @property
  def scaled_positions(self):
    r"""
    The scaled (fractional) coordinate of the atoms.
    """
    return jnp.asarray(self.positions) @ jnp.linalg.inv(
      jnp.asarray(self.cell_vectors)
    )

  @property
  def vol(self):
    r"""
    The volume of the unit cell in Bohr^3.
    """
    return unit_cell_volume(self.lattice)

  @property
  def num_atom(self):
    r"""Total number of atoms."""
    return np.shape(self.positions)[0]

  @staticmethod
  def create_from_file(
    file_path: str,
    charges: Optional[Sequence[float]] = None,
  ):
    r"""
    Create a crystal object from a geometry file.

    Args:
      file_path (str): The path of any geometry file readable by ``ase``.
      charges (Sequence[float], optional): The ionic charges. Defaults to the
        atomic numbers.

    Returns:
      A Crystal object.

    """
    _ase_cell = read(file_path)
    return Crystal._from_ase(_ase_cell, charges)

  @staticmethod
  def create_from_symbols(
    symbols: str,
    positions: Union[List[List], Float[Array, "num_atom 3"]],
    cell_vectors: Float[Array, "3 3"],
    charges: Optional[Sequence[float]] = None,
  ):
    r"""
    Create a crystal object from symbols, positions, and cell vectors.

    Args:
      symbols (str): The atomic symbols.
      positions (Union[List[List], Float[Array, "num_atom 3"]): The absolute
        coordinates of each atom in angstrom.
      cell_vectors (Float[Array, "3 3"]): The cell vectors in angstrom.
      charges (Sequence[float], optional): The ionic charges. Defaults to the
        atomic numbers.

    Returns:
      A Crystal object.
    """
    _ase_cell = ase.Atoms(symbols, positions, cell=cell_vectors, pbc=True)
    return Crystal._from_ase(_ase_cell, charges)

  @staticmethod
  def _from_ase(_ase_cell: ase.Atoms, charges=None):
    positions = np.array(_ase_cell.get_positions()) * ANGSTROM2BOHR
    cell_vectors = np.array(_ase_cell.get_cell()) * ANGSTROM2BOHR
    if charges is None:
      charges = _ase_cell.get_atomic_numbers()
    charges = np.array(charges, dtype=float)

    return Crystal(
      charges=charges,
      positions=positions,
      cell_vectors=cell_vectors,
      symbols=_ase_cell.get_chemical_symbols()
    )
