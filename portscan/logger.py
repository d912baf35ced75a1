import json
import logging
import time
from typing import Any, Dict, List, Optional

LOGGER_NAME = "portscan"
LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"

# Handlers installed by setup_logging, so a second call replaces them
_installed: List[logging.Handler] = []


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    while _installed:
        h = _installed.pop()
        logger.removeHandler(h)
        h.close()

    formatter = logging.Formatter(LOG_FORMAT)
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    for h in handlers:
        h.setFormatter(formatter)
        logger.addHandler(h)
        _installed.append(h)
    return logger


def now_iso() -> str:
    return time.strftime("%Y-%m-%dT%H:%M:%S", time.gmtime())


def log_event(logger: logging.Logger, event: str, fields: Dict[str, Any]) -> None:
    payload = {"ts": now_iso(), "event": event, **fields}
    logger.info(json.dumps(payload, ensure_ascii=False))
