"""Run the imagehost server.

Usage:
    imagehost [--host HOST] [--port PORT] [--serve-dir DIR]
    python -m imagehost
"""

import argparse
import errno
import logging
import os
import socket
import sys

import uvicorn

from imagehost.config import Settings
from imagehost.log_utils import configure_logging, log_server_starting
from imagehost.main import create_app

logger = logging.getLogger("imagehost")

STARTUP_FAILURE = 3


def bind_socket(host: str, port: int) -> socket.socket:
    """Bind the listening socket up front so port conflicts are reported clearly."""
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    sock = socket.socket(family, socket.SOCK_STREAM)
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((host, port))
    except OSError:
        sock.close()
        raise
    sock.set_inheritable(True)
    return sock


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Serve and manage image files over HTTP")
    parser.add_argument("--host", help="Interface to bind (env HOST)")
    parser.add_argument("--port", type=int, help="Port to listen on (env PORT)")
    parser.add_argument("--serve-dir", help="Directory holding stored images (env SERVE_DIR)")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    overrides = {
        name: value
        for name, value in (("host", args.host), ("port", args.port), ("serve_dir", args.serve_dir))
        if value is not None
    }
    settings = Settings(**overrides)
    configure_logging(settings.log_level, settings.log_format)

    app = create_app(settings)

    try:
        sock = bind_socket(settings.host, settings.port)
    except OSError as e:
        if e.errno == errno.EADDRINUSE:
            logger.error(f"Port {settings.port} is already in use")
        else:
            logger.error(f"Server error: {e}")
        sys.exit(1)

    server = uvicorn.Server(uvicorn.Config(app, log_config=None, log_level=settings.log_level.lower()))
    app.state.server = server

    log_server_starting(
        logger,
        settings.port,
        str(settings.serve_dir.resolve()),
        settings.environment,
        os.getpid(),
    )
    server.run(sockets=[sock])

    if not server.started:
        sys.exit(STARTUP_FAILURE)
    if app.state.fatal_error is not None:
        logger.error(f"Exiting after fatal error: {app.state.fatal_error!r}")
        sys.exit(1)


if __name__ == "__main__":
    main()
