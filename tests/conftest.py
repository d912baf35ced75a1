import logging
import pathlib
import socket
import sys

import pytest

# Make 'import portscan' work without installing the package
_ROOT = pathlib.Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))


@pytest.fixture
def listen():
    """Factory: open a listening socket on 127.0.0.1 and return its port."""
    socks = []

    def _listen(port=0):
        s = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            s.bind(("127.0.0.1", port))
        except OSError as e:
            s.close()
            pytest.skip(f"cannot bind 127.0.0.1:{port}: {e}")
        s.listen(128)
        socks.append(s)
        return s.getsockname()[1]

    yield _listen
    for s in socks:
        s.close()


@pytest.fixture
def closed_port():
    # Bind then release an ephemeral port; nothing listens on it afterwards
    s = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    s.bind(("127.0.0.1", 0))
    port = s.getsockname()[1]
    s.close()
    return port


@pytest.fixture(autouse=True)
def reset_portscan_logging():
    # main() binds a StreamHandler to whatever sys.stderr is during that test
    yield
    from portscan import logger as scan_logger

    logger = logging.getLogger(scan_logger.LOGGER_NAME)
    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()
    scan_logger._installed.clear()
    logger.setLevel(logging.NOTSET)
