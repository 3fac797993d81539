"""Logging configuration: one console handler, standard line format."""

from __future__ import annotations

import logging.config

# Logger of the package itself, whatever path it was imported under.
PACKAGE_LOGGER = __name__.rpartition(".")[0]

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "standard": {"format": LOG_FORMAT},
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "standard",
                    "stream": "ext://sys.stderr",
                },
            },
            "loggers": {
                PACKAGE_LOGGER: {"level": level.upper(), "propagate": True},
            },
            "root": {"handlers": ["console"], "level": "WARNING"},
        }
    )
