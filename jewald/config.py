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

from typing import List, Optional

import yaml
from ml_collections import ConfigDict


class JewaldConfigDict(ConfigDict):
  crystal_file_path: Optional[str]
  charges: Optional[List[float]]
  save_dir: Optional[str]
  ewald_eta: Optional[float]
  q: List[float]
  compute_forces: bool
  compute_dynmat: bool
  jax_enable_x64: bool
  jax_debug_nans: bool
  verbose: bool


default_config = {
  "crystal_file_path": None,
  "charges": None,
  "save_dir": None,
  "ewald_eta": None,
  "q": [0., 0., 0.],
  "compute_forces": True,
  "compute_dynmat": False,
  "jax_enable_x64": True,
  "jax_debug_nans": False,
  "verbose": True,
}


def get_config(config_file: Optional[str] = None) -> JewaldConfigDict:
  if config_file is not None:
    with open(config_file, 'r') as file:
      config = yaml.safe_load(file) or {}
    config = JewaldConfigDict({**default_config, **config})

  else:
    config = JewaldConfigDict(default_config)

  return config
