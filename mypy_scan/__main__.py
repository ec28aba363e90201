# FILE: mypy_scan/__main__.py
import sys

from mypy_scan.cli import main

sys.exit(main())
