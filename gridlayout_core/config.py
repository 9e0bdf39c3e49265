from __future__ import annotations

import os

from .state import GridOptions


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return max(1, int(raw))
    except ValueError:
        return default


def default_columns() -> int:
    return _env_int('GRIDLAYOUT_COLUMNS', 12)


def max_columns() -> int:
    """Widest grid the API accepts, from GRIDLAYOUT_MAX_COLUMNS."""
    return max(default_columns(), _env_int('GRIDLAYOUT_MAX_COLUMNS', 96))


def max_rows() -> int:
    return _env_int('GRIDLAYOUT_MAX_ROWS', 500)


def default_options() -> GridOptions:
    """Insert/provision spans from GRIDLAYOUT_MIN_SPAN and GRIDLAYOUT_DEFAULT_SPAN."""
    min_span = _env_int('GRIDLAYOUT_MIN_SPAN', 2)
    default_span = max(min_span, _env_int('GRIDLAYOUT_DEFAULT_SPAN', 3))
    return GridOptions(min_span=min_span, default_span=default_span)


def snap_threshold() -> float:
    raw = os.getenv('GRIDLAYOUT_SNAP_THRESHOLD')
    try:
        return float(raw) if raw else 0.6
    except ValueError:
        return 0.6


def debug_enabled() -> bool:
    return os.getenv('FLASK_DEBUG', os.getenv('DEBUG', '0')).lower() in ('1', 'true', 'yes', 'on')
