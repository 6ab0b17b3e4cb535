from __future__ import annotations

import sys

from road_importer.cli import main

if __name__ == "__main__":
    sys.exit(main())
