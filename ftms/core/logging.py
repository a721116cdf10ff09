"""Process-wide logging setup for FTMS entrypoints."""

from __future__ import annotations

import logging
import sys
from typing import Optional

from ftms.core.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_CONFIGURED = False


def configure_logging(level: Optional[str] = None) -> None:
    """Attach a stderr handler to the root logger once; later calls only adjust the level."""

    global _CONFIGURED
    resolved = (level or settings.LOG_LEVEL).upper()
    root = logging.getLogger()
    root.setLevel(resolved)

    if _CONFIGURED:
        return

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    root.addHandler(handler)

    # pdfplumber's parser is chatty at INFO
    logging.getLogger("pdfminer").setLevel(logging.WARNING)

    _CONFIGURED = True


__all__ = ["configure_logging", "LOG_FORMAT"]
