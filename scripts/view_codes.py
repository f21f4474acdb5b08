#!/usr/bin/env python3

import argparse
import sys
from pathlib import Path
from typing import List, Optional

SCRIPT_DIR = Path(__file__).resolve().parent
if str(SCRIPT_DIR) not in sys.path:
    sys.path.insert(0, str(SCRIPT_DIR))

from adminlib.bootstrap import ScriptContext, run_script  # noqa: E402
from adminlib.config import BootstrapConfig  # noqa: E402
from adminlib.errors import AdminKitError  # noqa: E402
from adminlib.file_ops import export_csv  # noqa: E402
from adminlib.grid import show_grid  # noqa: E402
from adminlib.logging_utils import get_logger  # noqa: E402

logger = get_logger("adminkit.codes")


def make_body(export_path: Optional[Path], select: bool):
    def view_codes(ctx: ScriptContext) -> bool:
        rows = ctx.asset_rows()
        if not rows:
            logger.warning("%s has no rows", ctx.asset_path)
            return False

        if export_path:
            export_csv(rows, export_path)
            return True

        chosen = show_grid(rows, "Building & Department Codes", pass_thru=select)
        for row in chosen:
            print(", ".join(f"{key}={value}" for key, value in row.items()))
        return True

    return view_codes


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Show the building/department codes in a sortable grid")
    parser.add_argument("--assets-dir", type=Path, help="Folder holding the reference CSV")
    parser.add_argument("--export", type=Path, metavar="PATH", help="Write the codes to PATH instead of showing them")
    parser.add_argument("--select", action="store_true", help="Print the rows selected in the grid")
    parser.add_argument("--no-admin", action="store_true", help="Skip the administrator check")
    args = parser.parse_args(argv)

    try:
        config = BootstrapConfig.from_env(
            assets_dir=args.assets_dir,
            require_admin=False if args.no_admin else None,
        )
    except AdminKitError as exc:
        parser.error(str(exc))

    return run_script(make_body(args.export, args.select), config, name="view_codes")


if __name__ == "__main__":
    sys.exit(main())
