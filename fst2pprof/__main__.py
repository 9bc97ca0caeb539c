"""Allow ``python -m fst2pprof``."""

import sys

from .cli import main

sys.exit(main())
