"""Additive deep merge for the free-form ``analysis_data`` JSON blobs."""

from typing import Any, Dict, Mapping, Optional

from brand_equity.core.errors import MergeDepthError

MAX_MERGE_DEPTH = 32


def deep_merge(
    target: Optional[Mapping[str, Any]],
    source: Optional[Mapping[str, Any]],
    max_depth: int = MAX_MERGE_DEPTH,
) -> Dict[str, Any]:
    """Return a new dict with ``source`` merged into ``target``.

    Nested mappings are merged key by key. Lists and scalars from ``source``
    replace the target value wholesale (lists are never appended). Neither
    input is mutated.
    """
    return _merge(target, source, max_depth, 0)


def _merge(target: Optional[Mapping[str, Any]], source: Optional[Mapping[str, Any]], max_depth: int, depth: int) -> Dict[str, Any]:
    if depth > max_depth:
        raise MergeDepthError(f"analysis data nests deeper than {max_depth} levels")

    output: Dict[str, Any] = dict(target or {})
    for key, value in (source or {}).items():
        if isinstance(value, Mapping):
            existing = output.get(key)
            output[key] = _merge(existing if isinstance(existing, Mapping) else None, value, max_depth, depth + 1)
        elif isinstance(value, list):
            output[key] = list(value)
        else:
            output[key] = value
    return output
