"""
Helper modules shared by the Windows admin scripts.

Scripts call `bootstrap.run_script` (or the individual checks) before doing
any work: assets folder, elevation, module list, then the timed body.
"""

__version__ = "1.2.0"

# Common re-exports for convenience
from .logging_utils import get_logger  # noqa: F401
