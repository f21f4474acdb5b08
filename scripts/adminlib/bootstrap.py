"""
Script environment bootstrap.

A typical admin script looks like::

    from adminlib.bootstrap import run_script
    from adminlib.modules import ModuleSpec

    def body(ctx):
        rows = ctx.asset_rows()
        ...

    if __name__ == "__main__":
        sys.exit(run_script(body, modules=[ModuleSpec("openpyxl")]))

`run_script` verifies the assets folder, elevates, loads the module list, then
runs the body and reports how long it took. Any failing step stops the script.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, Optional

from . import assets, dialogs, elevation
from .config import BootstrapConfig
from .errors import AdminKitError, report_failure
from .logging_utils import configure_logging, get_logger, log_section, log_success
from .modules import ModuleSpec, load_modules, loaded_modules
from .timing import format_elapsed, measure_runtime

logger = get_logger("adminkit.bootstrap")


@dataclass
class ScriptContext:
    config: BootstrapConfig
    assets_dir: Path
    modules: dict = field(default_factory=dict)

    @property
    def asset_path(self) -> Path:
        return assets.asset_path(self.assets_dir, self.config.asset_file)

    def asset_rows(self) -> list[dict[str, str]]:
        return assets.load_asset_rows(self.assets_dir, self.config.asset_file)


def prepare(config: BootstrapConfig, module_specs: Iterable[ModuleSpec] = ()) -> Optional[ScriptContext]:
    """Run verify assets -> elevate -> load modules; None on the first failure."""
    log_section("Preparing script environment")

    assets_dir = assets.verify_assets_folder(
        config.assets_dir, config.asset_file, interactive=config.interactive
    )
    if not assets_dir:
        return None

    # an elevated copy would otherwise ask for a folder the user already located
    relaunch_args = () if assets_dir == Path(config.assets_dir) else ("--assets-dir", str(assets_dir))
    if config.require_admin and not elevation.ensure_admin(
        extra_args=relaunch_args, interactive=config.interactive
    ):
        return None

    if not load_modules(
        module_specs,
        install_missing=config.install_missing,
        check_updates=config.check_updates,
        interactive=config.interactive,
    ):
        return None

    log_success("Script environment ready")
    return ScriptContext(config=config, assets_dir=assets_dir, modules=loaded_modules())


def bootstrap(config: Optional[BootstrapConfig] = None, module_specs: Iterable[ModuleSpec] = ()) -> bool:
    return prepare(config or BootstrapConfig.from_env(), module_specs) is not None


def run_script(
    body: Callable[[ScriptContext], object],
    config: Optional[BootstrapConfig] = None,
    modules: Iterable[ModuleSpec] = (),
    name: Optional[str] = None,
) -> int:
    """Bootstrap, run ``body`` and return a process exit code."""
    config = config or BootstrapConfig.from_env()
    configure_logging(config.log_level, config.log_file, force=config.log_file is not None)
    logging.getLogger().setLevel(config.log_level)
    dialogs.set_interactive(config.interactive)
    name = name or getattr(body, "__name__", "script")

    try:
        context = prepare(config, modules)
        if context is None:
            logger.error("%s aborted: environment checks failed", name)
            return 1

        log_section(f"Running {name}")
        with measure_runtime(name, logger) as watch:
            outcome = body(context)
    except KeyboardInterrupt:
        logger.error("%s interrupted by user", name)
        return 1
    except AdminKitError as exc:
        report_failure(exc, f"{name} failed", interactive=config.interactive)
        return 1
    except Exception as exc:
        logger.exception("%s failed with error: %s", name, exc)
        return 1

    if outcome is False:
        logger.error("%s reported failure after %s", name, format_elapsed(watch.elapsed))
        return 1

    log_success(f"{name} finished in {format_elapsed(watch.elapsed)}")
    return 0
