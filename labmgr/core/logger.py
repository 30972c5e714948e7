# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
Centralised logging configuration.

All log settings (levels, rotation, format …) live in  etc/logging.conf.
The log directory comes from LOG_DIR (settings.log_dir); this module patches
the resulting app.log path into the config text and applies it via the
standard-library fileConfig loader.

Import the ready-made logger anywhere:
    from labmgr.core.logger import logger
"""

import configparser as _cp
import logging
import logging.config
from pathlib import Path

from labmgr.core.config import settings

# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------
# project root: labmgr/core/logger.py  →  ../../
_PROJECT_ROOT  = Path(__file__).resolve().parent.parent.parent
_LOG_DIR       = Path(settings.log_dir)
_LOG_FILE      = _LOG_DIR / "app.log"
_LOGGING_CONF  = _PROJECT_ROOT / "etc" / "logging.conf"

_LOG_DIR.mkdir(parents=True, exist_ok=True)

# ---------------------------------------------------------------------------
# Load & apply logging.conf
# ---------------------------------------------------------------------------
# logging.conf uses %(log_file)s as a placeholder for the rotating handler.
# RawConfigParser is required: the format strings contain %(asctime)s etc.
# which ConfigParser would try to interpolate and fail on.

_raw = _LOGGING_CONF.read_text(encoding="utf-8")
_raw = _raw.replace("%(log_file)s", str(_LOG_FILE).replace("\\", "/"))

_parser = _cp.RawConfigParser()
_parser.read_string(_raw)

logging.config.fileConfig(_parser, disable_existing_loggers=False)

# ---------------------------------------------------------------------------
# Module-level handle
# ---------------------------------------------------------------------------
logger = logging.getLogger("labmgr")
