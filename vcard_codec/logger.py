"""
Logging configuration and utilities for the vCard codec.

Library modules only obtain the ``vcard_codec`` logger and log at debug
level; handlers are installed by :func:`setup_logger`, which the command
line calls once at start-up.

Dependencies:
    - logging: Standard library for logging functionality
    - sys: Standard library for system-specific parameters
    - pathlib: Standard library for path handling
    - datetime: Standard library for date/time operations
    - typing: Standard library for type hints
"""
# pylint: disable=logging-fstring-interpolation

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from logging import Logger

from vcard_codec.contact import Contact

LOGGER_NAME = "vcard_codec"


def setup_logger(
    log_level: str = "INFO",
    log_file: Optional[Path] = None,
    console_output: bool = True
) -> Logger:
    """
    Set up and configure the application logger.

    :param log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
    :param log_file: Optional path to log file. If None, creates timestamped
                     log in logs/
    :param console_output: Whether to output logs to console
    :return: Configured logger instance
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    logger.handlers.clear()

    detailed_formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    simple_formatter = logging.Formatter(
        '%(levelname)s: %(message)s'
    )

    if console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logging.INFO)
        console_handler.setFormatter(simple_formatter)
        logger.addHandler(console_handler)

    if log_file is None:
        logs_dir = Path("logs")
        logs_dir.mkdir(exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = logs_dir / f"vcard_codec_{timestamp}.log"

    log_file.parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(log_file, encoding='utf-8')
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(detailed_formatter)
    logger.addHandler(file_handler)

    logger.info("Logging initialized. Log file: %s", log_file)

    return logger


def log_conversion(
    logger: Logger,
    index: int,
    contact: Contact,
    source_version: int
) -> None:
    """
    Log one converted card.

    :param logger: Logger instance
    :param index: Position of the card in the input file
    :param contact: Contact after conversion
    :param source_version: Version the card was read as
    """
    name = contact.names[0] if contact.names else 'Unknown'
    logger.info(
        f"Card #{index}: {name} (version {source_version}.0 -> {contact.version}.0)"
    )
    logger.debug(
        f"  Phones: {len(contact.phones)}, emails: {len(contact.emails)}, "
        f"addresses: {len(contact.addresses)}"
    )
    if contact.version == 3 and (
        contact.anniversary or contact.gender or contact.instant_messages
    ):
        logger.warning(
            f"Card #{index}: anniversary, gender and IMPP are not written "
            f"in version 3.0"
        )


def log_statistics(logger: Logger, stats: Dict[str, Any]) -> None:
    """
    Log summary statistics.

    :param logger: Logger instance
    :param stats: Dictionary containing statistics
    """
    logger.info("=" * 60)
    logger.info("CONVERSION SUMMARY")
    logger.info("=" * 60)
    logger.info(f"Cards read: {stats.get('cards_read', 0)}")
    logger.info(f"Cards written: {stats.get('cards_written', 0)}")
    logger.info(f"Target version: {stats.get('target_version', '?')}.0")
    logger.info(f"Kinds defaulted: {stats.get('kinds_defaulted', 0)}")
    logger.info("=" * 60)
