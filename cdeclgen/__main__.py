"""Enable running cdeclgen as a module: python -m cdeclgen"""

import sys

from cdeclgen import (
    cli,
)

if __name__ == "__main__":
    # pylint: disable=no-value-for-parameter
    sys.exit(cli())
