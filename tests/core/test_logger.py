import logging
import os

from labmgr.core.config import settings
from labmgr.core.logger import logger


def test_labmgr_logger_writes_app_log_under_log_dir() -> None:
    files = [h for h in logger.handlers if isinstance(h, logging.FileHandler)]

    assert logger.name == "labmgr"
    assert logger.propagate is False
    assert len(files) == 1
    assert files[0].baseFilename == os.path.join(os.path.abspath(settings.log_dir), "app.log")
