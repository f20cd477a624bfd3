"""Type mapper tables for the Terrifi import generator.

Field tables are declared in config.yaml and compiled here into FieldSpec
objects whose extractors read values out of raw controller payloads.
"""

from collections.abc import Callable
from typing import Any

from .models import EmitPolicy, Extractor, FieldSpec, FieldType, TypeMapper

Condition = Callable[[dict[str, Any]], bool]

DEFAULT_PLACEHOLDER = "REPLACE_ME"


class UnknownResourceTypeError(ValueError):
    """Raised for a resource type with no declared mapper."""


def lookup(fields: dict[str, Any], path: str) -> Any:
    """Read a dotted path ("schedule.mode") from a nested mapping."""
    value: Any = fields
    for key in path.split("."):
        if not isinstance(value, dict):
            return None
        value = value.get(key)
    return value


def is_blank(value: Any) -> bool:
    """Empty strings, lists and mappings count as not set by the controller."""
    return value is None or value == "" or value == [] or value == {}


def coerce(field_type: FieldType, value: Any) -> Any:
    """
    Convert a raw API value to the declared field type.

    Returns None when the value cannot represent the type (e.g. a port that
    is not a number).
    """
    if value is None:
        return None

    if field_type is FieldType.STRING:
        if isinstance(value, bool):
            return "true" if value else "false"
        return str(value)

    if field_type is FieldType.BOOL:
        if isinstance(value, str):
            return value.strip().lower() in ("true", "1", "yes")
        return bool(value)

    if field_type is FieldType.INT:
        if isinstance(value, bool):
            return None
        try:
            return int(str(value).strip())
        except ValueError:
            return None

    if field_type in (FieldType.LIST, FieldType.SET):
        if isinstance(value, str):
            return [value]
        if isinstance(value, (list, tuple)):
            return [str(v) for v in value if not is_blank(v)]
        return None

    if field_type is FieldType.BLOCK:
        return value if isinstance(value, dict) else None

    return None


def compile_condition(decl: dict[str, Any] | list[dict[str, Any]] | None) -> Condition:
    """
    Build a predicate from a `when` / `include_when` declaration.

    Supported forms (a list means all must hold):
        {field: matching_target, in: [IP]}
        {field: schedule.mode, not_in: ["", ALWAYS]}
        {field: use_fixedip, truthy: true}
    """
    if decl is None:
        return lambda fields: True

    if isinstance(decl, list):
        conditions = [compile_condition(d) for d in decl]
        return lambda fields: all(c(fields) for c in conditions)

    if "field" not in decl:
        raise ValueError(f"Condition is missing 'field': {decl}")
    path = str(decl["field"])

    if "in" in decl:
        allowed = [str(v) for v in decl["in"]]
        return lambda fields: _condition_value(fields, path) in allowed
    if "not_in" in decl:
        denied = [str(v) for v in decl["not_in"]]
        return lambda fields: _condition_value(fields, path) not in denied
    if "truthy" in decl:
        expected = bool(decl["truthy"])
        return lambda fields: _is_truthy(lookup(fields, path)) is expected

    raise ValueError(f"Condition for '{path}' needs one of: in, not_in, truthy")


def _condition_value(fields: dict[str, Any], path: str) -> str:
    value = lookup(fields, path)
    return "" if value is None else str(value)


def _is_truthy(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() not in ("", "false", "0", "no")
    return bool(value)


def compile_extractor(decl: dict[str, Any], field_type: FieldType) -> Extractor:
    """Build the extractor for one field declaration."""
    when = compile_condition(decl.get("when"))
    gather = decl.get("gather")
    source = decl.get("source", decl["name"])
    sources = [source] if isinstance(source, str) else list(source)

    def extract_gathered(fields: dict[str, Any]) -> Any:
        if not when(fields):
            return None
        values = [lookup(fields, key) for key in gather]
        collected = [v for v in values if not is_blank(v)]
        return coerce(field_type, collected) if collected else None

    def extract_first(fields: dict[str, Any]) -> Any:
        if not when(fields):
            return None
        for key in sources:
            value = lookup(fields, key)
            if not is_blank(value):
                return coerce(field_type, value)
        return None

    return extract_gathered if gather else extract_first


def compile_field(decl: dict[str, Any], placeholder: str = DEFAULT_PLACEHOLDER) -> FieldSpec:
    """Compile one field declaration from config.yaml."""
    if "name" not in decl:
        raise ValueError(f"Field declaration is missing 'name': {decl}")
    name = decl["name"]

    try:
        field_type = FieldType(decl.get("type", "string"))
        policy = EmitPolicy(decl.get("policy", "always"))
    except ValueError as e:
        raise ValueError(f"Field '{name}': {e}") from e

    if policy is EmitPolicy.OMIT_IF_EQUALS and "default" not in decl:
        raise ValueError(f"Field '{name}': omit_if_equals requires a 'default'")

    nested: tuple[FieldSpec, ...] = ()
    if field_type is FieldType.BLOCK:
        nested = tuple(compile_field(d, placeholder) for d in decl.get("fields", []))
        if policy is EmitPolicy.REDACTED:
            raise ValueError(f"Field '{name}': blocks cannot be redacted")

    return FieldSpec(
        name=name,
        type=field_type,
        extractor=compile_extractor(decl, field_type),
        policy=policy,
        default=decl.get("default"),
        placeholder=str(decl.get("placeholder", placeholder)) if policy is EmitPolicy.REDACTED else None,
        comment=decl.get("comment"),
        fields=nested,
    )


def compile_mapper(resource_type: str, decl: dict[str, Any], placeholder: str = DEFAULT_PLACEHOLDER) -> TypeMapper:
    """Compile one resource type declaration from config.yaml."""
    include_when = decl.get("include_when")
    return TypeMapper(
        resource_type=resource_type,
        description=decl.get("description", f"{resource_type} resources"),
        api_kind=decl.get("api_kind", resource_type.removeprefix("terrifi_")),
        name_from=tuple(decl.get("name_from", ["name"])),
        required=tuple(decl.get("required", [])),
        fields=tuple(compile_field(d, placeholder) for d in decl.get("fields", [])),
        include_when=compile_condition(include_when) if include_when else None,
    )


def load_mappers(config: dict[str, Any]) -> dict[str, TypeMapper]:
    """Compile every resource type declared in the configuration."""
    general = config.get("general", {})
    placeholder = str(general.get("redaction_placeholder", DEFAULT_PLACEHOLDER))
    return {
        resource_type: compile_mapper(resource_type, decl, placeholder)
        for resource_type, decl in config.get("resource_types", {}).items()
    }


def get_mapper(mappers: dict[str, TypeMapper], resource_type: str) -> TypeMapper:
    """Look up a mapper, rejecting unknown resource types."""
    if resource_type not in mappers:
        valid = ", ".join(sorted(mappers))
        raise UnknownResourceTypeError(f"unknown resource type: {resource_type}\nValid types: {valid}")
    return mappers[resource_type]
