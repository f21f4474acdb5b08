#!/usr/bin/env python3

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

# Ensure our shared helper modules are importable when executing as a script
SCRIPT_DIR = Path(__file__).resolve().parent
if str(SCRIPT_DIR) not in sys.path:
    sys.path.insert(0, str(SCRIPT_DIR))

from adminlib import dialogs  # noqa: E402
from adminlib.bootstrap import prepare  # noqa: E402
from adminlib.config import BootstrapConfig  # noqa: E402
from adminlib.errors import AdminKitError  # noqa: E402
from adminlib.logging_utils import configure_logging, error_records, get_logger  # noqa: E402
from adminlib.modules import ModuleSpec  # noqa: E402
from adminlib.timing import measure_runtime  # noqa: E402


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Check that an admin script's environment is ready",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python bootstrap_check.py --assets-dir D:\\Assets
  python bootstrap_check.py --no-admin --module openpyxl --module yaml==PyYAML>=6.0
        """,
    )
    parser.add_argument("--assets-dir", type=Path, help="Folder holding the reference CSV")
    parser.add_argument("--asset-file", help="Name of the reference CSV inside the assets folder")
    parser.add_argument("--no-admin", action="store_true", help="Skip the administrator check")
    parser.add_argument(
        "--module",
        dest="modules",
        action="append",
        default=[],
        metavar="NAME[==PACKAGE][>=VERSION]",
        help="Module the script needs (repeatable)",
    )
    parser.add_argument(
        "--optional-module",
        dest="optional_modules",
        action="append",
        default=[],
        metavar="NAME[==PACKAGE][>=VERSION]",
        help="Module that is used when available (repeatable)",
    )
    parser.add_argument("--no-install", action="store_true", help="Do not pip install missing modules")
    parser.add_argument("--check-updates", action="store_true", help="Upgrade modules with newer releases on PyPI")
    parser.add_argument("--non-interactive", action="store_true", help="Never show dialogs")
    parser.add_argument("--log-file", type=Path, help="Also write the log to this file")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser


def parse_modules(required: List[str], optional: List[str]) -> List[ModuleSpec]:
    specs = [ModuleSpec.parse(text) for text in required]
    specs += [ModuleSpec.parse(text, required=False) for text in optional]
    return specs


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = BootstrapConfig.from_env(
            assets_dir=args.assets_dir,
            asset_file=args.asset_file,
            require_admin=False if args.no_admin else None,
            install_missing=False if args.no_install else None,
            check_updates=True if args.check_updates else None,
            interactive=False if args.non_interactive else None,
            log_file=args.log_file,
            log_level=logging.DEBUG if args.verbose else None,
        )
        specs = parse_modules(args.modules, args.optional_modules)
    except (AdminKitError, ValueError) as exc:
        parser.error(str(exc))

    configure_logging(config.log_level, config.log_file, force=True)
    dialogs.set_interactive(config.interactive)
    logger = get_logger("adminkit.check")

    with measure_runtime("Environment check", logger):
        context = prepare(config, specs)

    if context is None:
        logger.error("Environment NOT ready")
        for record in error_records():
            logger.error("  %s: %s", record.tag, record.message)
        return 1

    logger.info("Environment ready")
    logger.info("  Assets folder : %s", context.assets_dir)
    logger.info("  Asset file    : %s", context.asset_path)
    logger.info("  Modules       : %s", ", ".join(sorted(context.modules)) or "-")
    return 0


if __name__ == "__main__":
    sys.exit(main())
