import jax
import numpy as np

import jewald as jw
from jewald.crystal import Crystal

jax.config.update("jax_enable_x64", True)

# Rocksalt NaCl in its primitive cell, with ionic charges +1 / -1.
a = 5.64  # angstrom
cell_vectors = [(0, a / 2, a / 2), (a / 2, 0, a / 2), (a / 2, a / 2, 0)]
positions = [(0, 0, 0), (a / 2, 0, 0)]
nacl = Crystal.create_from_symbols(
  "NaCl", positions, cell_vectors, charges=[1, -1]
)

term = jw.EwaldTerm(nacl)
print("splitting parameter: ", term.eta)
print("Ewald energy (Ha): ", term.energy)

# Madelung constant, with respect to the nearest neighbour distance.
nearest = a / 2 * jw._src.const.ANGSTROM2BOHR
print("Madelung constant: ", -term.energy * nearest)

print("forces: ", term.forces())

# Dynamical matrix along Gamma-X.
for x in np.linspace(0., 0.5, 3):
  q = np.array([0., x, x])
  dynmat = term.dynmat(q)
  print(f"q = {q}: eigenvalues {np.linalg.eigvalsh(np.asarray(dynmat))}")
