"""Policy keeping internal options out of externally visible schemas."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping

__all__ = [
    "INTERNAL_OPTION_PREFIX",
    "is_internal_option",
    "is_not_an_internal_option",
    "filter_internal_options",
    "filter_internal_parameters",
]

INTERNAL_OPTION_PREFIX = "_"


def is_internal_option(key: str, *, prefix: str = INTERNAL_OPTION_PREFIX) -> bool:
    """Return ``True`` when ``key`` names an internal-only option."""

    return key.startswith(prefix)


def is_not_an_internal_option(key: str, *, prefix: str = INTERNAL_OPTION_PREFIX) -> bool:
    return not is_internal_option(key, prefix=prefix)


def filter_internal_options(
    options: Mapping[str, Any], *, prefix: str = INTERNAL_OPTION_PREFIX
) -> Dict[str, Any]:
    """Return a copy of ``options`` without its internal entries."""

    return {
        key: value
        for key, value in options.items()
        if not is_internal_option(key, prefix=prefix)
    }


def filter_internal_parameters(
    parameters: Iterable[Mapping[str, Any]], *, prefix: str = INTERNAL_OPTION_PREFIX
) -> List[Mapping[str, Any]]:
    """Return the parameter descriptors whose ``name`` is not internal."""

    return [
        parameter
        for parameter in parameters
        if not is_internal_option(str(parameter.get("name", "")), prefix=prefix)
    ]
