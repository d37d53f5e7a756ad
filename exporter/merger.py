"""Property merging for resource groups.

Combines the property maps of every node in a group into one map. For each
key, only nodes that define it (value present and not None) take part:

1. a single definer wins outright;
2. deep-equal values collapse to the common value;
3. if any value is a mapping, the last definer's value wins (no deep merge);
4. lists are unioned, keeping first-seen order and dropping duplicates;
5. differing scalars surface as a list of the distinct values.

The result depends on node order, so callers must pass groups in placement
order. Rule 3 silently drops earlier mappings; object-valued properties are
not expected to conflict within one group.
"""

from typing import Any, Dict, List, Sequence

from exporter.snapshot import PlacedNode


def _same(a: Any, b: Any) -> bool:
    # True == 1 in Python; a flag and a count are different values here
    if isinstance(a, bool) != isinstance(b, bool):
        return False
    return a == b


def _append_unique(target: List[Any], value: Any) -> None:
    # Values may be unhashable dicts or lists
    if not any(_same(value, existing) for existing in target):
        target.append(value)


def merge_values(values: Sequence[Any]) -> Any:
    """Reduce the values of one key according to the merge rules."""
    if len(values) == 1:
        return values[0]
    if all(_same(v, values[0]) for v in values[1:]):
        return values[0]
    if any(isinstance(v, dict) for v in values):
        return values[-1]
    merged: List[Any] = []
    for value in values:
        if isinstance(value, (list, tuple)):
            for item in value:
                _append_unique(merged, item)
        else:
            _append_unique(merged, value)
    return merged


def merge_properties(nodes: Sequence[PlacedNode]) -> Dict[str, Any]:
    """Merge the property maps of a group's nodes into one map.

    Keys appear in the order they were first seen across the group.
    """
    collected: Dict[str, List[Any]] = {}
    for node in nodes:
        for key, value in node.properties.items():
            if value is None:
                continue
            collected.setdefault(key, []).append(value)
    return {key: merge_values(values) for key, values in collected.items()}
