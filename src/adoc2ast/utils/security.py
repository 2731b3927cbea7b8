#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Path resolution for include directives.

Include targets are resolved against the directory of the file that
contains the directive. Below :attr:`SafeMode.SAFE` any path is allowed;
from SAFE upward the resolved path must stay inside the base directory
(the jail).

Functions
---------
- resolve_include_path: Resolve an include target and enforce the jail
- is_within_directory: Check that a path stays inside a directory
"""

import logging
from pathlib import Path
from typing import Optional

from adoc2ast.constants import SafeMode
from adoc2ast.exceptions import IncludeSecurityError

logger = logging.getLogger(__name__)


def is_within_directory(path: Path, directory: Path) -> bool:
    """Return True if ``path`` is ``directory`` or lies beneath it."""
    try:
        path.relative_to(directory)
    except ValueError:
        return False
    return True


def resolve_include_path(
    target: str,
    current_dir: Optional[str],
    base_dir: str,
    safe_mode: SafeMode,
) -> Optional[Path]:
    """Resolve an include target to a canonical filesystem path.

    Parameters
    ----------
    target : str
        Include target after attribute substitution
    current_dir : str or None
        Directory of the file containing the directive; ``base_dir`` when None
    base_dir : str
        Root directory include targets are confined to
    safe_mode : SafeMode
        Safe mode of the conversion

    Returns
    -------
    Path or None
        The resolved path, or None when the target escapes the jail under
        :attr:`SafeMode.SAFE` (a warning is logged)

    Raises
    ------
    IncludeSecurityError
        If the target escapes the jail at :attr:`SafeMode.SERVER` or above

    """
    start = Path(current_dir) if current_dir and current_dir != "." else Path(base_dir)
    if not start.is_absolute():
        start = Path(base_dir) / start
    candidate = (start / target).resolve()

    if safe_mode < SafeMode.SAFE:
        return candidate

    jail = Path(base_dir).resolve()
    if is_within_directory(candidate, jail):
        return candidate

    if safe_mode >= SafeMode.SERVER:
        raise IncludeSecurityError(target, str(jail))

    logger.warning("include target %s is outside of jail %s; dropping include", target, jail)
    return None
