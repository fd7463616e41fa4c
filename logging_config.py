"""
Logging setup for the API.

``setup_logging`` attaches a console handler to the root logger the
first time it is called; later calls (tests building several apps,
uvicorn reloads) leave the existing configuration alone.
"""
import logging


def setup_logging(level: str = "INFO") -> None:
    logger = logging.getLogger()
    if logger.handlers:
        return

    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    logger.addHandler(handler)
