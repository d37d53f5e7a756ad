"""HCL rendering for resource descriptors.

Turns a :class:`~exporter.values.ResourceDescriptor` into a Terraform
``resource`` block. Which keys become nested blocks (``key { ... }``) and
which become attributes (``key = value``) is decided by a per-resource-type
registry, so adding a resource type only needs a new registry entry.
"""

import json
import math
import re
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from exporter.config import cloud_config_aws as aws_config
from exporter.utils import to_snake_case
from exporter.values import Reference, ResourceDescriptor, Value, to_json_value

INDENT = "  "
EMPTY_BODY_COMMENT = "# No properties configured"
_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_-]*$")

BLOCK_KEYS: Dict[str, frozenset] = {
    resource_type: frozenset(keys)
    for resource_type, keys in aws_config.AWS_BLOCK_KEYS.items()
}


def block_keys_for(resource_type: str) -> frozenset:
    return BLOCK_KEYS.get(resource_type, frozenset())


def escape_string(text: str) -> str:
    """Escape text for a double-quoted HCL string literal."""
    text = text.replace("\\", "\\\\").replace('"', '\\"')
    text = text.replace("\n", "\\n").replace("\r", "\\r").replace("\t", "\\t")
    # Literal template sequences must not be interpolated
    return text.replace("${", "$${").replace("%{", "%%{")


def _format_key(key: str) -> str:
    return key if _IDENTIFIER.match(key) else f'"{escape_string(key)}"'


def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value == "")


def prune(properties: Mapping[str, Value]) -> Dict[str, Value]:
    """Drop keys whose value is None or an empty string."""
    return {k: v for k, v in properties.items() if not _is_empty(v)}


def format_value(value: Value, level: int = 1) -> str:
    """Render a single value. ``level`` is the indentation depth of the
    line the value starts on."""
    if value is None:
        return "null"
    if isinstance(value, Reference):
        return value.address
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and not math.isfinite(value):
        # HCL has no literal for inf/nan
        return f'"{value}"'
    if isinstance(value, (int, float)):
        return json.dumps(value)
    if isinstance(value, (list, tuple)):
        if not value:
            return "[]"
        inner = INDENT * (level + 1)
        lines = [f"{inner}{format_value(item, level + 1)}," for item in value]
        return "[\n" + "\n".join(lines) + "\n" + INDENT * level + "]"
    if isinstance(value, dict):
        entries = prune(value)
        if not entries:
            return "{}"
        body = ", ".join(
            f"{_format_key(k)} = {format_value(v, level)}" for k, v in entries.items()
        )
        return "{ " + body + " }"
    return f'"{escape_string(str(value))}"'


def _split_body(
    properties: Mapping[str, Value], block_keys: frozenset
) -> Tuple[List[Tuple[str, Value]], List[Tuple[str, Dict[str, Value]]]]:
    """Separate snake_cased attributes from nested blocks.

    A block key holding a mapping yields one block, a list of mappings yields
    one block per entry. Anything else under a block key (an empty list, a
    scalar) stays an attribute.
    """
    attributes: List[Tuple[str, Value]] = []
    blocks: List[Tuple[str, Dict[str, Value]]] = []
    for raw_key, value in prune(properties).items():
        key = to_snake_case(raw_key)
        if key in block_keys and isinstance(value, dict):
            blocks.append((key, value))
        elif (
            key in block_keys
            and isinstance(value, (list, tuple))
            and value
            and all(isinstance(item, dict) for item in value)
        ):
            blocks.extend((key, item) for item in value)
        else:
            attributes.append((key, value))
    return attributes, blocks


def json_body(properties: Mapping[str, Value], block_keys: frozenset) -> Dict[str, Any]:
    """Plain JSON data for a body, with keys named as :func:`render_body`
    names them. Inline maps keep their keys verbatim."""
    result: Dict[str, Any] = {}
    for raw_key, value in prune(properties).items():
        key = to_snake_case(raw_key)
        if key in block_keys and isinstance(value, dict):
            result[key] = json_body(value, block_keys)
        elif (
            key in block_keys
            and isinstance(value, (list, tuple))
            and all(isinstance(item, dict) for item in value)
        ):
            result[key] = [json_body(item, block_keys) for item in value]
        else:
            result[key] = to_json_value(value)
    return result


def render_body(
    properties: Mapping[str, Value], block_keys: frozenset, level: int = 1
) -> List[str]:
    """Render the lines inside a ``{ }`` body at the given depth."""
    attributes, blocks = _split_body(properties, block_keys)
    indent = INDENT * level
    lines: List[str] = []
    if attributes:
        width = max(len(key) for key, _ in attributes)
        for key, value in attributes:
            lines.append(f"{indent}{key.ljust(width)} = {format_value(value, level)}")
    for key, body in blocks:
        if lines:
            lines.append("")
        inner = render_body(body, block_keys, level + 1)
        if not inner:
            lines.append(f"{indent}{key} {{}}")
            continue
        lines.append(f"{indent}{key} {{")
        lines.extend(inner)
        lines.append(f"{indent}}}")
    return lines


def render_resource(
    descriptor: ResourceDescriptor, block_keys: Optional[Iterable[str]] = None
) -> str:
    """Render one descriptor as a ``resource "<type>" "<name>" { ... }`` block."""
    keys = (
        frozenset(block_keys)
        if block_keys is not None
        else block_keys_for(descriptor.type)
    )
    lines = render_body(descriptor.properties, keys)
    if not lines:
        lines = [INDENT + EMPTY_BODY_COMMENT]
    header = f'resource "{descriptor.type}" "{descriptor.name}" {{'
    return "\n".join([header, *lines, "}"])


def render_provider(provider: str, region: str) -> str:
    return f'provider "{provider}" {{\n{INDENT}region = "{escape_string(region)}"\n}}'


def render_document(preamble: str, blocks: Sequence[str]) -> str:
    """Join the preamble and resource blocks with blank lines."""
    return "\n\n".join([preamble, *blocks]) + "\n"
