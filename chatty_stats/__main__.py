import sys

from .stats_framework import main

sys.exit(main())
