"""Log formatting for the accounts service."""

import logging

from pythonjsonlogger import jsonlogger

FORMAT = '%(asctime)s %(levelname)s %(name)s %(message)s'


def setup_logger(level: int = logging.INFO, json_format: bool = True) -> None:
    """Install a single stderr handler on the root logger."""
    logger = logging.getLogger()
    logger.setLevel(level)
    for handler in logger.handlers:
        if getattr(handler, '_qa_accounts', False):
            return

    log_handler = logging.StreamHandler()
    if json_format:
        formatter: logging.Formatter = jsonlogger.JsonFormatter(
            FORMAT,
            rename_fields={'levelname': 'level', 'asctime': 'timestamp'}
        )
    else:
        formatter = logging.Formatter(FORMAT)
    log_handler.setFormatter(formatter)
    log_handler._qa_accounts = True  # type: ignore
    logger.addHandler(log_handler)
