import logging
from pathlib import Path
from datetime import datetime
from typing import Optional

CONSOLE_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'
FILE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'


class LogManager:
    """
    Logging setup for command line runs

    Everything goes to the console at ``log_level``. With a ``log_dir`` the
    full debug log and a warnings-only log are also written to daily files
    (``tickercrawl_YYYYMMDD.log`` and ``tickercrawl_errors_YYYYMMDD.log``).
    """

    def __init__(self, log_dir: Optional[str] = "crawl_data/logs", log_level: str = "INFO"):
        self.log_dir = Path(log_dir) if log_dir else None
        self.level = getattr(logging, log_level.upper())
        if self.log_dir:
            self.log_dir.mkdir(parents=True, exist_ok=True)

        self.setup_logging()

    def setup_logging(self):
        root_logger = logging.getLogger()
        root_logger.handlers.clear()

        console = logging.StreamHandler()
        console.setLevel(self.level)
        console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        root_logger.addHandler(console)

        if self.log_dir is None:
            root_logger.setLevel(self.level)
            return

        # Files keep debug output even when the console is quieter
        root_logger.setLevel(logging.DEBUG)
        root_logger.addHandler(self._daily_file('tickercrawl', logging.DEBUG))
        root_logger.addHandler(self._daily_file('tickercrawl_errors', logging.WARNING))

    def _daily_file(self, prefix: str, level: int) -> logging.Handler:
        path = self.log_dir / f"{prefix}_{datetime.now().strftime('%Y%m%d')}.log"
        handler = logging.FileHandler(path, encoding='utf-8')
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter(FILE_FORMAT))
        return handler
