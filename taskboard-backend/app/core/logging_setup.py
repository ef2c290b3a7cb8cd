# File: app/core/logging_setup.py

import logging
import sys


def setup_logging(level: str = "INFO") -> None:
    """
    Configure the root logger with one stderr handler.

    Safe to call more than once (the app factory runs it on every
    create_application(), e.g. in tests): existing handlers are replaced.
    """
    root = logging.getLogger()
    root.setLevel(level.upper())

    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(fmt)
    root.addHandler(handler)

    # uvicorn access logs duplicate what we log per request
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
