from __future__ import annotations

from typing import Mapping, Optional

from ..core.exceptions import ValidationError


def require_fields(values: Mapping[str, Optional[str]]) -> dict[str, str]:
    """Validate several text fields at once and report every missing one."""
    missing = [name for name, value in values.items() if not value or not str(value).strip()]
    if missing:
        raise ValidationError(f"Missing required field(s): {', '.join(missing)}", fields=missing)
    return {name: str(value).strip() for name, value in values.items()}
