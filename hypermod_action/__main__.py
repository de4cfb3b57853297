"""Allow running the action with ``python -m hypermod_action``."""

import sys

from hypermod_action.main import main

sys.exit(main())
