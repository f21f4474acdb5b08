"""
Load the third-party packages a script depends on.

A script declares a list of `ModuleSpec` entries; `load_modules` makes sure
each one is installed (installing through pip when allowed), optionally checks
the package index for a newer release, imports it, and prints a summary.
"""

from __future__ import annotations

import importlib
import json
import re
import ssl
import sys
import urllib.error
import urllib.request
from dataclasses import dataclass
from importlib import metadata
from types import ModuleType
from typing import Iterable, Optional

import certifi

from . import shell
from .errors import ModuleLoadError, report_failure
from .logging_utils import get_logger, log_section, log_success
from .paths import PYPI_JSON_URL

logger = get_logger("adminkit.modules")

# Import name -> module object for everything loaded in this process
_loaded: dict[str, ModuleType] = {}


@dataclass(frozen=True)
class ModuleSpec:
    name: str
    package: Optional[str] = None
    min_version: Optional[str] = None
    required: bool = True
    description: str = ""

    @property
    def distribution(self) -> str:
        return self.package or self.name

    @property
    def requirement(self) -> str:
        if self.min_version:
            return f"{self.distribution}>={self.min_version}"
        return self.distribution

    @classmethod
    def parse(cls, text: str, *, required: bool = True) -> "ModuleSpec":
        """Parse ``name[==package][>=version]`` as used on the command line."""
        text = text.strip()
        min_version = None
        if ">=" in text:
            text, min_version = (part.strip() for part in text.split(">=", 1))
        package = None
        if "==" in text:
            text, package = (part.strip() for part in text.split("==", 1))
        if not text:
            raise ValueError("Module name is empty")
        return cls(name=text, package=package or None, min_version=min_version or None, required=required)


@dataclass
class ModuleResult:
    name: str
    success: bool
    version: Optional[str] = None
    details: Optional[str] = None


def _version_tuple(version: str) -> tuple[int, ...]:
    parts = []
    for piece in version.split("."):
        match = re.match(r"\d+", piece)
        if not match:
            break
        parts.append(int(match.group()))
    return tuple(parts)


def version_satisfies(installed: Optional[str], minimum: Optional[str]) -> bool:
    """Compare dotted versions numerically; missing parts count as zero."""
    if installed is None:
        return False
    if not minimum:
        return True
    have = list(_version_tuple(installed))
    want = list(_version_tuple(minimum))
    width = max(len(have), len(want))
    have += [0] * (width - len(have))
    want += [0] * (width - len(want))
    return have >= want


def installed_version(package: str) -> Optional[str]:
    try:
        return metadata.version(package)
    except metadata.PackageNotFoundError:
        return None


def latest_version(package: str, timeout: float = 10) -> Optional[str]:
    """Ask PyPI for the newest release of ``package``."""
    url = PYPI_JSON_URL.format(package=package)
    context = ssl.create_default_context(cafile=certifi.where())
    request = urllib.request.Request(
        url,
        headers={"Accept": "application/json", "User-Agent": "adminkit"},
    )
    try:
        with urllib.request.urlopen(request, timeout=timeout, context=context) as response:
            data = json.loads(response.read().decode("utf-8"))
    except (urllib.error.URLError, OSError, ValueError) as exc:
        logger.warning("Failed to query latest version of %s: %s", package, exc)
        return None

    version = data.get("info", {}).get("version") if isinstance(data, dict) else None
    return version or None


def install_package(spec: ModuleSpec, *, upgrade_to: Optional[str] = None) -> bool:
    requirement = f"{spec.distribution}=={upgrade_to}" if upgrade_to else spec.requirement
    logger.info("Installing %s ...", requirement)
    result = shell.run_logged(
        [sys.executable, "-m", "pip", "install", "--upgrade", requirement],
        logger_name="adminkit.pip",
    )
    # pip may have added new distributions to sys.path entries
    importlib.invalidate_caches()
    return result.ok


def load_module(
    spec: ModuleSpec,
    *,
    install_missing: bool = True,
    check_updates: bool = False,
) -> ModuleResult:
    version = installed_version(spec.distribution)

    if not version_satisfies(version, spec.min_version):
        if version is None:
            logger.info("%s is not installed", spec.distribution)
        else:
            logger.info("%s %s is older than required %s", spec.distribution, version, spec.min_version)
        if not install_missing:
            detail = "not installed" if version is None else f"{version} < {spec.min_version}"
            return ModuleResult(spec.name, False, version, detail)
        if not install_package(spec):
            return ModuleResult(spec.name, False, version, f"pip install {spec.requirement} failed")
        version = installed_version(spec.distribution)
    elif check_updates:
        latest = latest_version(spec.distribution)
        if latest and not version_satisfies(version, latest):
            logger.info("Update available for %s: %s -> %s", spec.distribution, version, latest)
            if install_package(spec, upgrade_to=latest):
                version = installed_version(spec.distribution)
            else:
                logger.warning("Continuing with %s %s", spec.distribution, version)

    try:
        module = importlib.import_module(spec.name)
    except ImportError as exc:
        return ModuleResult(spec.name, False, version, f"import failed: {exc}")

    _loaded[spec.name] = module
    return ModuleResult(spec.name, True, version or getattr(module, "__version__", None))


def load_modules(
    specs: Iterable[ModuleSpec],
    *,
    install_missing: bool = True,
    check_updates: bool = False,
    interactive: Optional[bool] = None,
) -> bool:
    """Load every module in ``specs``; False if any required one failed."""
    specs = list(specs)
    if not specs:
        return True

    log_section("Loading modules")
    results: list[tuple[ModuleSpec, ModuleResult]] = []
    for spec in specs:
        result = load_module(spec, install_missing=install_missing, check_updates=check_updates)
        results.append((spec, result))

    logger.info("=" * 50)
    logger.info("MODULE SUMMARY")
    logger.info("=" * 50)
    for spec, result in results:
        status = "OK" if result.success else ("FAILED" if spec.required else "SKIPPED")
        version = result.version or "-"
        logger.info("%-24s : %-8s %s", spec.name, status, version)
        if not result.success and result.details:
            logger.info("%-24s   %s", "", result.details)

    optional_failures = [spec.name for spec, result in results if not result.success and not spec.required]
    if optional_failures:
        logger.warning("Optional module(s) unavailable: %s", ", ".join(optional_failures))

    required_failures = [
        f"{spec.name} ({result.details})" for spec, result in results if not result.success and spec.required
    ]
    if required_failures:
        return report_failure(
            ModuleLoadError("Required module(s) could not be loaded: " + ", ".join(required_failures)),
            "Module Load Failed",
            interactive=interactive,
        )

    log_success("All required modules loaded")
    return True


def loaded_modules() -> dict[str, ModuleType]:
    return dict(_loaded)
