"""Error modules.

(follows Flax: https://github.com/google/flax/blob/main/flax/errors.py)

=== When to create an error class?

If an error message requires more explanation than a one-liner, it is useful to
add it as a separate error class. This may lead to some duplication with
existing documentation or docstrings, but it will provide users with more help
when they are debugging a problem. We can also point to existing documentation
from the error docstring directly.

=== How to name the error class?

* If the error occurs when doing something, name the error
  <Verb><Object><TypeOfError>Error

* If there is no concrete action involved the only a description of the error
 is sufficient. For instance: DegenerateLatticeError.


=== Copy/pastable template for new error messages:

class Template(JewaldError):
  "" "

  "" "
  def __init__(self):
    super().__init__(f'')
"""


class JewaldError(Exception):

  def __init__(self, message):
    super().__init__(message)


class EwaldShapeMismatchError(JewaldError):
  """The Ewald sum requires one charge, one position and (if given) one
  phonon displacement per atom. This error is thrown when the leading
  dimensions of these arrays disagree.

  Example:

    >>> from jewald.ewald import energy_ewald
    >>> energy_ewald(jnp.eye(3), jnp.ones(2), jnp.zeros([3, 3]))

    >>> jewald.errors.EwaldShapeMismatchError: charges and positions have
    mismatched shapes. Got (2,) and (3, 3).

  """

  def __init__(self, first_name, first_shape, second_name, second_shape):
    super().__init__(
      f"{first_name} and {second_name} have mismatched shapes. "
      f"Got {first_shape} and {second_shape}."
    )


class PhononDisplacementError(JewaldError):
  """A phonon displacement is only meaningful together with a phonon
  wavevector ``q``, and it is only used to differentiate the forces. This
  error is thrown when ``ph_disp`` is passed without ``q``, or without
  requesting the forces.

  Example:

    >>> energy_ewald(lattice, charges, positions, ph_disp=disp)

    >>> jewald.errors.PhononDisplacementError: a phonon displacement requires
    a wavevector q. Got q=None.

  """

  def __init__(self, reason):
    super().__init__(f"a phonon displacement requires {reason}.")


class DegenerateLatticeError(JewaldError):
  """No default Ewald splitting parameter exists for a lattice having a zero
  lattice vector. The evaluators return zero for such lattices, but a
  calculation that explicitly asks for the splitting parameter raises this
  error.

  Example:

    >>> lattice = jnp.diag(jnp.array([10., 10., 0.]))
    >>> EwaldTerm(Crystal(..., cell_vectors=lattice.T)).eta

    >>> jewald.errors.DegenerateLatticeError: The lattice has a zero lattice
    vector, no splitting parameter can be derived. Got lattice vectors
    [[10. 0. 0.] [0. 10. 0.] [0. 0. 0.]]

  """

  def __init__(self, lattice):
    super().__init__(
      "The lattice has a zero lattice vector, no splitting parameter can be "
      f"derived. Got lattice vectors {lattice}"
    )
