from __future__ import annotations

import logging
from importlib import metadata

try:
    __version__ = metadata.version("claimsched")
except metadata.PackageNotFoundError:
    __version__ = "0.0.0+local"

logging.getLogger(__name__).addHandler(logging.NullHandler())
