"""HCL value encoding for the Terrifi import generator."""

from collections.abc import Iterable
from typing import Any

from .models import Attribute, EmitPolicy, FieldSpec, FieldType, NestedBlock

_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}


def hcl_string(value: str) -> str:
    """Escape and quote a string for HCL."""
    chars = []
    for ch in value:
        if ch in _ESCAPES:
            chars.append(_ESCAPES[ch])
        elif ord(ch) < 0x20 or ord(ch) == 0x7F:
            chars.append(f"\\u{ord(ch):04x}")
        else:
            chars.append(ch)
    escaped = "".join(chars)
    # Template sequences would otherwise be interpolated by Terraform
    escaped = escaped.replace("${", "$${").replace("%{", "%%{")
    return f'"{escaped}"'


def hcl_bool(value: bool) -> str:
    return "true" if value else "false"


def hcl_int(value: int) -> str:
    return str(int(value))


def hcl_string_list(values: Iterable[str]) -> str:
    """Render strings as an HCL tuple, preserving order."""
    return "[" + ", ".join(hcl_string(str(v)) for v in values) + "]"


def hcl_string_set(values: Iterable[str]) -> str:
    """Render strings as an HCL tuple, sorted and de-duplicated."""
    return hcl_string_list(sorted({str(v) for v in values}))


def zero_value(field_type: FieldType) -> Any:
    """Return the zero value used when an `always` field is absent."""
    zeros: dict[FieldType, Any] = {
        FieldType.STRING: "",
        FieldType.BOOL: False,
        FieldType.INT: 0,
        FieldType.LIST: [],
        FieldType.SET: [],
        FieldType.BLOCK: {},
    }
    return zeros[field_type]


def render_value(field_type: FieldType, value: Any) -> str:
    """Render a non-block value according to its declared type."""
    if field_type is FieldType.STRING:
        return hcl_string(str(value))
    if field_type is FieldType.BOOL:
        return hcl_bool(bool(value))
    if field_type is FieldType.INT:
        return hcl_int(value)
    if field_type is FieldType.LIST:
        return hcl_string_list(value)
    if field_type is FieldType.SET:
        return hcl_string_set(value)
    raise ValueError(f"Blocks are not rendered as values: {field_type}")


def values_equal(field_type: FieldType, value: Any, default: Any) -> bool:
    """Structural equality; sets compare without regard to order."""
    if field_type is FieldType.SET:
        return {str(v) for v in value} == {str(v) for v in (default or [])}
    if field_type is FieldType.LIST:
        return [str(v) for v in value] == [str(v) for v in (default or [])]
    return bool(value == default)


def is_suppressed(spec: FieldSpec, value: Any) -> bool:
    """Check whether a field is left out of the rendered body."""
    if spec.policy is EmitPolicy.ALWAYS:
        return False
    if value is None:
        return True
    if spec.policy is EmitPolicy.OMIT_IF_ABSENT:
        return False
    if spec.policy is EmitPolicy.OMIT_IF_EMPTY:
        return bool(value == zero_value(spec.type))
    if spec.policy is EmitPolicy.OMIT_IF_EQUALS:
        return values_equal(spec.type, value, spec.default)
    return False


def encode_field(spec: FieldSpec, fields: dict[str, Any]) -> Attribute | NestedBlock | None:
    """
    Encode one declared field of a live object.

    Returns an Attribute, a NestedBlock for block fields, or None when the
    field's policy suppresses it.
    """
    if spec.policy is EmitPolicy.REDACTED:
        # Never read from live data
        return Attribute(spec.name, hcl_string(spec.placeholder or ""), spec.comment)

    value = spec.extractor(fields)
    if is_suppressed(spec, value):
        return None
    if value is None:
        value = zero_value(spec.type)

    if spec.type is FieldType.BLOCK:
        attributes, blocks = encode_fields(spec.fields, value)
        return NestedBlock(label=spec.name, attributes=tuple(attributes), blocks=tuple(blocks))

    return Attribute(spec.name, render_value(spec.type, value), spec.comment)


def encode_fields(
    specs: Iterable[FieldSpec],
    fields: dict[str, Any],
) -> tuple[list[Attribute], list[NestedBlock]]:
    """Encode a field table in declared order, splitting attributes from blocks."""
    attributes: list[Attribute] = []
    blocks: list[NestedBlock] = []

    for spec in specs:
        encoded = encode_field(spec, fields)
        if isinstance(encoded, NestedBlock):
            blocks.append(encoded)
        elif encoded is not None:
            attributes.append(encoded)

    return attributes, blocks
