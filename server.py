"""Long-running listener for the Medzy API.

The listening socket is bound up front so that a port conflict is reported
with guidance instead of a uvicorn traceback. SIGINT and SIGTERM drain
in-flight requests through uvicorn before the process exits with 0.
"""

import errno
import logging
import signal
import socket
import sys

import uvicorn

from config import HOST, LOG_LEVEL, PORT
from main import app, configure_logging

logger = logging.getLogger("medzy.server")


class MedzyServer(uvicorn.Server):
    def handle_exit(self, sig: int, frame) -> None:
        if not self.should_exit:
            logger.info("Received %s. Shutting down gracefully...", signal.Signals(sig).name)
        super().handle_exit(sig, frame)


def bind_socket(host: str, port: int) -> socket.socket:
    sock = socket.socket(socket.AF_INET6 if ":" in host else socket.AF_INET, socket.SOCK_STREAM)
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((host, port))
    except OSError:
        sock.close()
        raise
    sock.set_inheritable(True)
    return sock


def _ignore_signal(signum, frame) -> None:
    pass


def main(host: str | None = None, port: int | None = None) -> None:
    configure_logging()
    host = host or HOST
    port = PORT if port is None else port

    try:
        sock = bind_socket(host, port)
    except OSError as exc:
        if exc.errno == errno.EADDRINUSE:
            logger.error("Port %s is already in use. Please:", port)
            logger.error("1. Stop any other server running on port %s", port)
            logger.error("2. Use a different port by setting PORT environment variable")
        else:
            logger.error("Server error: %s", exc)
        sys.exit(1)

    server = MedzyServer(uvicorn.Config(app, log_level=LOG_LEVEL.lower(), lifespan="on"))
    # uvicorn restores the previous handlers and re-raises the captured
    # signal after shutdown; these handlers turn that into a clean return.
    signal.signal(signal.SIGINT, _ignore_signal)
    signal.signal(signal.SIGTERM, _ignore_signal)

    logger.info("Server running on %s:%s", host, port)
    try:
        server.run(sockets=[sock])
    finally:
        sock.close()

    if not server.started:
        logger.error("Server failed to start")
        sys.exit(1)
    logger.info("Process terminated")
    sys.exit(0)


if __name__ == "__main__":
    main()
