"""
Command-line interface for converting content packages to feature models.

This module provides a user-friendly CLI for the cp2fm tool.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import NoReturn

from cp2fm.core.converter import ContentPackageConverter
from cp2fm.core.settings import DEFAULT_HANDLERS, ConverterSettings, load_settings
from cp2fm.exceptions import (
    ArchiveError,
    ConfigurationFormatError,
    ConversionError,
    DeployError,
    DuplicateConfigurationError,
    InputError,
    SettingsError,
)
from cp2fm.handlers import HANDLER_TYPES

EXIT_CODES: list[tuple[type[Exception], int]] = [
    (InputError, 1),
    (ArchiveError, 2),
    (DuplicateConfigurationError, 3),
    (ConfigurationFormatError, 4),
    (DeployError, 5),
    (SettingsError, 6),
    (ConversionError, 7),
]


def show_banner() -> None:
    """Display the cp2fm banner."""
    print("content-package -> feature model converter")
    print()


def show_available_handlers() -> NoReturn:
    """Show available entry handlers and exit."""
    show_banner()

    print("Available Entry Handlers (default order first):")
    print("=" * 50)

    ordered = DEFAULT_HANDLERS + [n for n in HANDLER_TYPES if n not in DEFAULT_HANDLERS]
    for name in ordered:
        handler_class = HANDLER_TYPES[name]
        summary = (handler_class.__doc__ or "").strip().splitlines()[0]
        print(f"  {name:<10} - {summary}")
        print(f"               Pattern: {handler_class.pattern}")
        print()

    sys.exit(0)


def configure_logging(debug: bool = False, verbose: bool = False) -> None:
    """Configure application logging.

    Args:
        debug: Enable debug-level logging if True.
        verbose: Enable verbose per-entry logging if True.
    """
    if debug:
        level = logging.DEBUG
        format_str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    elif verbose:
        level = logging.INFO
        format_str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    else:
        level = logging.INFO
        format_str = "%(levelname)s: %(message)s"

    logging.basicConfig(
        level=level,
        format=format_str,
        stream=sys.stdout,
        force=True,  # Override existing configuration
    )

    if not verbose and not debug:
        # Quiet mode: only warnings from the pipeline internals
        logging.getLogger("cp2fm").setLevel(logging.WARNING)
        logging.getLogger(__name__).setLevel(logging.INFO)


def build_settings(args: argparse.Namespace) -> ConverterSettings:
    """Merge the optional settings file with command line overrides.

    Raises:
        SettingsError: If the settings file or the overrides are invalid.
    """
    overrides = {
        "strict_validation": True if args.strict_validation else None,
        "merge_configurations": True if args.merge_configurations else None,
        "bundles_start_order": args.bundles_start_order,
    }

    if args.settings:
        return load_settings(args.settings, **overrides)

    try:
        return ConverterSettings(**{k: v for k, v in overrides.items() if v is not None})
    except ValueError as e:
        raise SettingsError(f"Invalid settings: {e}") from e


def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse and validate command line arguments.

    Returns:
        Parsed command line arguments.
    """
    parser = argparse.ArgumentParser(
        prog="cp2fm",
        description="Convert a content package into feature model files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Convert a package into ./target/cp2fm
  cp2fm -o target/cp2fm my-package-1.0.zip

  # Merge duplicated configurations and start bundles at level 20
  cp2fm --merge-configurations --bundles-start-order 20 -o out my-package.zip

  # Read settings (handler order included) from a file
  cp2fm --settings cp2fm.yaml -o out my-package.zip
        """,
    )

    parser.add_argument(
        "content_package",
        nargs="?",  # Optional for --list-handlers
        type=Path,
        help="Path of the content package to convert",
    )
    parser.add_argument(
        "-o",
        "--output",
        dest="output_directory",
        type=Path,
        default=Path("."),
        help="Directory receiving the feature files and the bundles repository",
    )
    parser.add_argument(
        "--settings",
        type=Path,
        help="YAML or JSON settings file",
    )
    parser.add_argument(
        "--strict-validation",
        action="store_true",
        help="Reject malformed content packages instead of reading them best-effort",
    )
    parser.add_argument(
        "--merge-configurations",
        action="store_true",
        help="Merge properties of configurations declared more than once",
    )
    parser.add_argument(
        "--bundles-start-order",
        type=int,
        help="Start order assigned to the converted bundles (default: 0)",
    )
    parser.add_argument(
        "--list-handlers",
        action="store_true",
        help="List available entry handlers and exit",
    )
    parser.add_argument(
        "--debug", action="store_true", help="Enable debug logging for detailed output"
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging (shows every processed entry)",
    )

    args = parser.parse_args(argv)

    if args.list_handlers:
        show_available_handlers()

    if not args.content_package:
        parser.error("A content package is required unless --list-handlers is used")

    return args


def exit_code_for(error: Exception) -> int:
    for error_type, code in EXIT_CODES:
        if isinstance(error, error_type):
            return code
    return 9


def run_conversion(args: argparse.Namespace) -> NoReturn:
    """Execute the conversion and exit.

    Raises:
        SystemExit: Always exits with appropriate code (0 for success, >0 for errors).
    """
    configure_logging(args.debug, args.verbose)
    logger = logging.getLogger(__name__)

    try:
        settings = build_settings(args)
        converter = ContentPackageConverter(args.output_directory, settings)
        result = converter.convert(args.content_package)

        for feature_file in result.feature_files:
            logger.info(f"Generated feature model: {feature_file}")
        logger.info(f"Deployed {len(result.artifacts)} artifact(s)")

        sys.exit(0)

    except ConversionError as e:
        logger.error(f"{e.__class__.__name__}: {e}")
        sys.exit(exit_code_for(e))
    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        if args.debug:
            logger.exception("Full traceback:")
        sys.exit(9)


def main(argv: list[str] | None = None) -> NoReturn:
    run_conversion(parse_arguments(argv))


if __name__ == "__main__":
    main()
