from __future__ import annotations

"""
Configuration Validation Service.

Normalizes a raw configuration dictionary (file, environment and CLI
layers merged) into strictly typed settings. In lenient mode bad values
fall back to defaults with a warning; in strict mode they raise.
"""

import logging
from typing import Any, Dict, List, Sequence, Tuple

from menuselect.domain.config import ORPHAN_POLICIES, get_default_config
from menuselect.infra.logging.config import LEVEL_MAP

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def validate_config(
        config: Any,
        *,
        strict: bool = False,
) -> Tuple[Dict[str, Any], List[str]]:
    """
    Validate and normalize the provided configuration dictionary.

    Args:
        config: Raw configuration data.
        strict: Raise instead of coercing or falling back.

    Returns:
        Tuple[Dict[str, Any], List[str]]: Normalized configuration and the
                                          list of warnings produced.

    Raises:
        TypeError: In strict mode, on a type mismatch.
        ValueError: In strict mode, on an out-of-range value.
    """
    warnings: List[str] = []
    defaults = get_default_config()

    if not isinstance(config, dict):
        msg = f"Invalid config type: expected dict, received {type(config).__name__}."
        if strict:
            raise TypeError(msg)
        warnings.append(f"{msg} Using defaults.")
        logger.warning(msg)
        return defaults, warnings

    merged: Dict[str, Any] = dict(defaults)
    merged.update({k: v for k, v in config.items() if k in defaults})

    for field in ("api_base_url", "access_token", "log_file", "last_scope"):
        merged[field] = _as_str(merged.get(field), defaults[field], field, warnings, strict)

    merged["request_timeout"] = _as_positive_number(
        merged.get("request_timeout"), defaults["request_timeout"], "request_timeout", warnings, strict
    )
    merged["orphan_policy"] = _as_choice(
        merged.get("orphan_policy"), ORPHAN_POLICIES, defaults["orphan_policy"],
        "orphan_policy", warnings, strict
    )
    merged["log_level"] = _as_choice(
        str(merged.get("log_level") or "").upper(), tuple(LEVEL_MAP), defaults["log_level"],
        "log_level", warnings, strict
    )

    if not merged["api_base_url"].startswith(("http://", "https://")):
        msg = f"Invalid field 'api_base_url': '{merged['api_base_url']}' is not an http(s) URL."
        if strict:
            raise ValueError(msg)
        warnings.append(f"{msg} Using fallback.")
        merged["api_base_url"] = defaults["api_base_url"]

    for w in warnings:
        logger.debug(f"Config: {w}")
    return merged, warnings


# -----------------------------------------------------------------------------
# PRIVATE HELPERS: TYPE COERCION
# -----------------------------------------------------------------------------

def _as_str(value: Any, fallback: str, field: str, warnings: List[str], strict: bool) -> str:
    if value is None:
        return fallback
    if isinstance(value, (int, str)) and not isinstance(value, bool):
        return str(value).strip()

    msg = f"Invalid field '{field}': expected str, received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_positive_number(
        value: Any,
        fallback: float,
        field: str,
        warnings: List[str],
        strict: bool,
) -> float:
    if isinstance(value, bool) or value is None:
        number = None
    elif isinstance(value, (int, float)):
        number = value
    elif isinstance(value, str) and not strict:
        try:
            number = float(value.strip())
            warnings.append(f"Field '{field}' converted from '{value}' to {number}.")
        except ValueError:
            number = None
    else:
        number = None

    if number is not None and number > 0:
        return number

    msg = f"Invalid field '{field}': expected a positive number, received {value!r}."
    if strict:
        raise ValueError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_choice(
        value: Any,
        choices: Sequence[str],
        fallback: str,
        field: str,
        warnings: List[str],
        strict: bool,
) -> str:
    if isinstance(value, str) and value.strip() in choices:
        return value.strip()

    msg = f"Invalid field '{field}': {value!r} is not one of {', '.join(choices)}."
    if strict:
        raise ValueError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback
