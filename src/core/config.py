"""Runtime configuration model for Rollcall.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path

from core.constants import DEFAULT_DATA_ROOT, DEFAULT_FORMS_ROOT
from core.errors import RollcallConfigError


@dataclass(frozen=True)
class RollcallConfig:
    """Validated runtime configuration.

    Attributes:
        data_root: Local root directory holding destination tables.
        forms_root: Local root directory searched for form folders.
    """

    data_root: Path
    forms_root: Path

    @classmethod
    def from_env(cls) -> "RollcallConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            RollcallConfigError: If environment values are invalid.
        """
        data_root_value = os.getenv("ROLLCALL_DATA_ROOT", str(DEFAULT_DATA_ROOT))
        forms_root_value = os.getenv("ROLLCALL_FORMS_ROOT", str(DEFAULT_FORMS_ROOT))
        return cls(
            data_root=_parse_root(data_root_value, "ROLLCALL_DATA_ROOT"),
            forms_root=_parse_root(forms_root_value, "ROLLCALL_FORMS_ROOT"),
        )


def _parse_root(raw_value: str, variable_name: str) -> Path:
    """Parse a directory root environment value.

    Args:
        raw_value: Raw string from environment.
        variable_name: Environment variable name for error context.

    Returns:
        Resolved absolute path.

    Raises:
        RollcallConfigError: If the value is blank.
    """
    if not raw_value.strip():
        raise RollcallConfigError(
            f"Invalid {variable_name} value: expected a directory path, got an empty string. "
            f"Unset {variable_name} or point it at a directory."
        )
    return Path(raw_value.strip()).expanduser().resolve()
