from __future__ import annotations

import logging
import sys
from typing import Optional

# Client libraries that log every sheet fetch or token refresh at INFO/DEBUG.
NOISY_LOGGERS = ("httpx", "httpcore", "google.auth", "urllib3")


def configure_logging(level: Optional[str] = None) -> None:
    log_level = (level or "INFO").upper()
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
