"""Allow ``python -m feature_triggers``."""

import sys

from feature_triggers.cli import main

if __name__ == "__main__":
    sys.exit(main())
