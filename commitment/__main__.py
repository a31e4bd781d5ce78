"""Allow running as: python -m commitment"""

import sys

from .cli import main

sys.exit(main())
