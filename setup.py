"""Install script for setuptools."""

import os
from setuptools import setup, find_packages

_CURRENT_DIR = os.path.dirname(os.path.abspath(__file__))

PACKAGE_NAME = 'jewald'
VERSION = '0.0.1'
CLASSIFIERS = [
  'Environment :: Console',
  'Intended Audience :: Science/Research',
  'Intended Audience :: Developers',
  'License :: OSI Approved :: Apache Software License',
  'Programming Language :: Python',
  'Programming Language :: Python :: 3',
  'Topic :: Software Development :: Libraries :: Python Modules',
  'Topic :: Scientific/Engineering',
]
LICENSE = 'Apache License 2.0'


def _read_requirements():
  with open(os.path.join(_CURRENT_DIR, 'requirements.txt')) as f:
    requirements = f.readlines()
  return [req.strip() for req in requirements if req.strip()]


setup(
  name=PACKAGE_NAME,
  version=VERSION,
  packages=find_packages(include=['jewald', 'jewald.*']),
  py_modules=['main'],
  description=(
    'A JAX-based Ewald summation engine for periodic point charges.'
  ),
  classifiers=CLASSIFIERS,
  license=LICENSE,
  install_requires=_read_requirements(),
  extras_require={
    'test': ['pytest'],
  },
  entry_points={
    'console_scripts': [
      'jewald=main:main',
    ],
  },
)
