"""Value types shared by the synthesizers and formatters.

A property value is one of: ``None``, ``bool``, ``int``, ``float``, ``str``,
a list of values, a string-keyed dict of values, or a :class:`Reference`.
References are a separate type so that the HCL formatter can emit them
unquoted without inspecting string contents.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Union


@dataclass(frozen=True)
class Reference:
    """Pointer to another resource's attribute, rendered as a bare address.

    Example:
        >>> str(Reference.to("aws_security_group", "web", "id"))
        'aws_security_group.web.id'
    """

    address: str

    @classmethod
    def to(cls, resource_type: str, name: str, attribute: str = "id") -> "Reference":
        return cls(f"{resource_type}.{name}.{attribute}")

    @classmethod
    def resource(cls, resource_type: str, name: str) -> "Reference":
        """Reference a whole resource, e.g. for ``depends_on`` lists."""
        return cls(f"{resource_type}.{name}")

    def __str__(self) -> str:
        return self.address


Value = Union[None, bool, int, float, str, Reference, List[Any], Dict[str, Any]]


@dataclass
class ResourceDescriptor:
    """One Terraform resource ready for rendering.

    Attributes:
        type: Terraform resource type, e.g. ``aws_instance``
        name: Sanitized resource name
        properties: Ordered property map; keys may be camelCase or snake_case
    """

    type: str
    name: str
    properties: Dict[str, Value] = field(default_factory=dict)

    @property
    def address(self) -> str:
        return f"{self.type}.{self.name}"

    def ref(self, attribute: str = "id") -> Reference:
        return Reference.to(self.type, self.name, attribute)


def to_json_value(value: Value) -> Any:
    """Convert a property value into plain JSON data.

    References become Terraform interpolation strings (``${addr}``) so that
    the JSON export stays distinguishable from literal text. Map entries that
    are None or an empty string are dropped, as they are in HCL output.
    """
    if isinstance(value, Reference):
        return "${" + value.address + "}"
    if isinstance(value, float) and not math.isfinite(value):
        return str(value)
    if isinstance(value, dict):
        return {
            k: to_json_value(v)
            for k, v in value.items()
            if v is not None and v != ""
        }
    if isinstance(value, (list, tuple)):
        return [to_json_value(v) for v in value]
    return value
