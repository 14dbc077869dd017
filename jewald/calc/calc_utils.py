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
"""Utility functions for calculations. """
import os

import jax
from absl import logging

from .._src.crystal import Crystal
from ..config import JewaldConfigDict


def set_env_params(config: JewaldConfigDict):
  os.environ["OPENBLAS_NUM_THREADS"] = "4"
  os.environ["MKL_NUM_THREADS"] = "4"
  os.environ["OMP_NUM_THREADS"] = "4"
  jax.config.update("jax_debug_nans", config.jax_debug_nans)

  if config.verbose:
    logging.set_verbosity(logging.INFO)
    logging.info('Verbose mode is on.')
    if config.jax_enable_x64:
      logging.info("Precision: Double (64 bit).")
    else:
      logging.info("Precision: Single (32 bit).")
  else:
    logging.set_verbosity(logging.WARNING)
    logging.warning('Verbose mode is off.')

  jax.config.update("jax_enable_x64", config.jax_enable_x64)


def create_crystal(config: JewaldConfigDict) -> Crystal:
  if config.crystal_file_path is None:
    raise ValueError("crystal_file_path must be set in the configuration.")
  return Crystal.create_from_file(
    file_path=config.crystal_file_path, charges=config.charges
  )
