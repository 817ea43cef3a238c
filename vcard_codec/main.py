#!/usr/bin/env python3
"""
Command-line entry point: convert vCard files between versions 3.0 and 4.0.

Reads every card of the input file, switches it to the target version and
writes the result, then re-reads the output to validate it.

Dependencies:
    - argparse: Standard library for command-line argument parsing
    - sys: Standard library for system-specific parameters
    - pathlib: Standard library for path handling
    - vcard_codec.vcard_parser: Local module for reading vCard files
    - vcard_codec.vcard_writer: Local module for writing vCard files
    - vcard_codec.logger: Local module for logging configuration
"""
# pylint: disable=logging-fstring-interpolation, broad-except

import argparse
import sys
from pathlib import Path
from typing import Any, Dict, List

from vcard_codec.contact import KIND_INDIVIDUAL, KINDS, Contact
from vcard_codec.errors import VCardError
from vcard_codec.logger import log_conversion, log_statistics, setup_logger
from vcard_codec.properties import DEFAULT_VERSION, SUPPORTED_VERSIONS
from vcard_codec.vcard_parser import parse_vcard_file
from vcard_codec.vcard_writer import validate_vcard_file, write_vcard_file


def _create_argument_parser() -> argparse.ArgumentParser:
    """
    Create and configure the argument parser.

    :return: Configured argument parser
    """
    parser = argparse.ArgumentParser(
        description='Convert vCard files between versions 3.0 and 4.0',
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    parser.add_argument(
        '--input', '-i',
        type=str,
        required=True,
        help='Path to input vCard file (.vcf)'
    )

    parser.add_argument(
        '--output', '-o',
        type=str,
        required=True,
        help='Path to output vCard file (.vcf)'
    )

    parser.add_argument(
        '--target-version',
        type=int,
        default=DEFAULT_VERSION,
        choices=SUPPORTED_VERSIONS,
        help=f'vCard version to write (default: {DEFAULT_VERSION})'
    )

    parser.add_argument(
        '--default-kind',
        type=str,
        default=KIND_INDIVIDUAL,
        choices=KINDS,
        help='KIND for cards that have none, required for version 4 '
             f'(default: {KIND_INDIVIDUAL})'
    )

    parser.add_argument(
        '--log-level',
        type=str,
        default='INFO',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        help='Logging level (default: INFO)'
    )

    parser.add_argument(
        '--log-file',
        type=str,
        default=None,
        metavar='PATH',
        help='Log file path (default: timestamped file in logs/)'
    )

    parser.add_argument(
        '--no-validate',
        action='store_true',
        help='Skip output validation (not recommended)'
    )

    return parser


def convert_contacts(
    contacts: List[Contact],
    target_version: int,
    default_kind: str,
    logger: Any
) -> Dict[str, Any]:
    """
    Switch contacts to the target version in place.

    :param contacts: Decoded contacts
    :param target_version: 3 or 4
    :param default_kind: Kind given to version 4 cards without one
    :param logger: Logger instance
    :return: Statistics dictionary
    """
    kinds_defaulted = 0

    for index, contact in enumerate(contacts, 1):
        source_version = contact.version
        contact.set_version(target_version)

        if target_version == 4 and not contact.kind:
            contact.set_kind(default_kind)
            kinds_defaulted += 1
            logger.debug(f"Card #{index}: KIND set to {default_kind}")

        log_conversion(logger, index, contact, source_version)

    return {
        'cards_read': len(contacts),
        'target_version': target_version,
        'kinds_defaulted': kinds_defaulted,
    }


def _handle_validation(
    output_path: Path,
    expected_count: int,
    skip_validation: bool,
    logger: Any
) -> None:
    """
    Validate output file if requested.

    :param output_path: Path to output file
    :param expected_count: Number of cards written
    :param skip_validation: Whether to skip validation
    :param logger: Logger instance
    :raises SystemExit: If validation fails
    """
    if skip_validation:
        logger.info("Output validation skipped (--no-validate flag used)")
        return

    logger.info("Validating output file...")
    is_valid, report = validate_vcard_file(output_path, expected_count)

    for warning in report['warnings']:
        logger.warning(warning)
    for error in report['errors']:
        logger.error(error)

    if not is_valid:
        logger.error("Validation failed - output file may have issues")
        sys.exit(1)


def main() -> None:
    """Main application entry point."""
    parser = _create_argument_parser()
    args = parser.parse_args()

    log_file = Path(args.log_file) if args.log_file else None
    logger = setup_logger(log_level=args.log_level, log_file=log_file)

    try:
        input_path = Path(args.input)
        logger.info(f"Reading contacts from {input_path}")
        contacts = parse_vcard_file(input_path)

        stats = convert_contacts(
            contacts, args.target_version, args.default_kind, logger
        )

        output_path = Path(args.output)
        logger.info(f"Writing {len(contacts)} contacts to {output_path}")
        write_vcard_file(contacts, output_path)
        stats['cards_written'] = len(contacts)

        _handle_validation(output_path, len(contacts), args.no_validate, logger)

        log_statistics(logger, stats)
        logger.info("Conversion completed successfully!")

    except FileNotFoundError as e:
        logger.error(f"File not found: {e}")
        sys.exit(1)
    except VCardError as e:
        logger.error(f"Invalid input: {e}")
        sys.exit(1)
    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
        sys.exit(1)


if __name__ == '__main__':
    main()
