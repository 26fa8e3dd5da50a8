from __future__ import annotations

import logging


LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
# Connection pool chatter from requests drowns out the pipeline at DEBUG.
QUIET_LOGGERS = ("urllib3",)


def configure_logging(level: str = "INFO", *, quiet_loggers: tuple[str, ...] = QUIET_LOGGERS) -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    for name in quiet_loggers:
        logging.getLogger(name).setLevel(logging.WARNING)
