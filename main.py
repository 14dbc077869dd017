import argparse

import jewald as jw


def main():
  parser = argparse.ArgumentParser(
    prog='Jewald', description='Command for Jewald package.'
  )

  parser.add_argument(
    "-m",
    "--mode",
    choices=["energy", "forces", "dynmat"],
    default='energy',
    help="Set the computation mode. For the Ewald energy only, please use "
    "\'energy\'. To also compute the forces, please use \'forces\'. For the "
    "dynamical matrix at the wavevector q of the configuration, please use "
    "\'dynmat\'."
  )

  parser.add_argument(
    "-c",
    "--config",
    default='config.yaml',
    help="Set the configuration file path."
  )

  args = parser.parse_args()

  config = jw.config.get_config(args.config)
  config.compute_forces = args.mode in ["forces", "dynmat"]
  config.compute_dynmat = args.mode == "dynmat"

  jw.calc.ewald(config)


if __name__ == "__main__":
  main()
