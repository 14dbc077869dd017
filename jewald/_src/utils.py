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
"""Utility functions."""
from typing import Any, Callable, Union

import jax
import jax.numpy as jnp
import numpy as np
import scipy.special
from jaxtyping import Array, Complex, Float


def safe_real(array: Array, tol: float = 1e-8) -> Array:
  """Safely converts a complex array to real by checking imaginary components.

    Args:
        array (Array): Input array that may be real or complex.
        tol (float): Tolerance threshold for considering imaginary components
          as zero. Defaults to 1e-8.

    Returns:
        Array: The real component of the input if imaginary parts are within
            tolerance, otherwise the original array.

    Raises:
        ValueError: If the array has imaginary components larger than the
            specified tolerance.

    Example:

    .. code-block:: python

      x = 1.0 + 1e-10j
      safe_real(x)  # Returns 1.0
      y = 1.0 + 1.0j
      safe_real(y)  # Raises ValueError
    """
  if jnp.iscomplexobj(array):
    if jnp.allclose(array.imag, 0, atol=tol):
      return array.real
    else:
      raise ValueError("Array has non-zero imaginary part")
  return array


def forward_derivative(f: Callable[[Float], Any], x0: float = 0.) -> Any:
  """Derivative of a function of one real scalar, in forward mode.

  The output of ``f`` can be any pytree of (real or complex) arrays; the
  derivative has the same structure.

  Example:

  .. code-block:: python

    forward_derivative(lambda x: jnp.sin(x) * jnp.ones(3))  # [1., 1., 1.]

  Args:
    f (Callable): a function of a real scalar.
    x0 (float): the point at which the derivative is evaluated.
      Defaults to 0.

  Returns:
    The tangent of ``f`` at ``x0``.
  """
  x0 = jnp.asarray(x0, dtype=jnp.result_type(float))
  _, tangent = jax.jvp(f, (x0,), (jnp.ones_like(x0),))
  return tangent


def _erfc_host(z: np.ndarray) -> np.ndarray:
  return np.asarray(scipy.special.erfc(z), dtype=z.dtype)


@jax.custom_jvp
def _erfc_complex(z: Complex[Array, '...']) -> Complex[Array, '...']:
  return jax.pure_callback(
    _erfc_host, jax.ShapeDtypeStruct(z.shape, z.dtype), z
  )


@_erfc_complex.defjvp
def _erfc_complex_jvp(primals, tangents):
  z, = primals
  dz, = tangents
  return _erfc_complex(z), -2 / jnp.sqrt(jnp.pi) * jnp.exp(-z**2) * dz


def complex_erfc(
  z: Union[Float[Array, '...'], Complex[Array, '...']]
) -> Union[Float[Array, '...'], Complex[Array, '...']]:
  r"""Complementary error function for real or complex arguments.

  Real input goes through :func:`jax.scipy.special.erfc`. Complex input is
  evaluated on the host by :func:`scipy.special.erfc` (Faddeeva function),
  with the holomorphic derivative

  .. math::
    \frac{d}{dz} \mathrm{erfc}(z) = -\frac{2}{\sqrt{\pi}} e^{-z^2}

  attached as a custom JVP, so forward-mode derivatives (and
  :func:`forward_derivative`) work on complex arguments.
  """
  if not jnp.iscomplexobj(z):
    return jax.scipy.special.erfc(z)
  return _erfc_complex(z)
