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

__version__ = "0.0.1"

from . import (
  _src,
  calc,
  config,
  crystal,
  errors,
  ewald,
  lattice,
  utils,
)
from .crystal import Crystal
from .ewald import EwaldTerm, dynmat_ewald, energy_ewald

__all__ = [
  "_src",
  "calc",
  "config",
  "crystal",
  "Crystal",
  "errors",
  "ewald",
  "EwaldTerm",
  "dynmat_ewald",
  "energy_ewald",
  "lattice",
  "utils",
]
