"""Astra DB vector search movie demo.

Run with ``python app.py`` from this directory. Credentials are read from
``.env`` (written by create-astradb-app) or from the environment.
"""

import sys
from pathlib import Path

from astradb_starter.core.demo_runner import main

if __name__ == "__main__":
    sys.exit(main(project_dir=Path(__file__).resolve().parent))
