"""Root conftest.py: ensures the local mockserver_client package takes precedence over any installed version."""

from __future__ import annotations

import sys
from pathlib import Path

# Insert the project root at the front of sys.path so that
# `import mockserver_client` and `import tests` resolve to this source tree.
_root = str(Path(__file__).parent)
if _root not in sys.path:
    sys.path.insert(0, _root)

pytest_plugins = ["pytester"]
