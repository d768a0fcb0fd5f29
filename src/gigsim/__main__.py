import logging
import os
import sys

from dotenv import load_dotenv

from gigsim.bootstrap import create_simulation_service, default_seed
from gigsim.presentation.cli import run


def main(argv=None) -> int:
    load_dotenv()
    logging.basicConfig(level=os.getenv("GIGSIM_LOG_LEVEL", "WARNING").upper())
    try:
        return run(create_simulation_service(), argv, default_seed=default_seed())
    except KeyboardInterrupt:
        print("\nSession ended.")
        return 130


if __name__ == "__main__":
    sys.exit(main())
