"""Pytest configuration: let absltest-based tests run under pytest."""

from absl import flags


def pytest_configure(config):
  # absltest.TestCase helpers (e.g. create_tempdir) read absl flags, which
  # are only parsed by absltest.main(); mark them parsed for pytest runs.
  if not flags.FLAGS.is_parsed():
    flags.FLAGS.mark_as_parsed()
