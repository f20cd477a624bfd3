"""Data models for the Terrifi import generator."""

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class FieldType(str, Enum):
    """Value type of a declared field."""

    STRING = "string"
    BOOL = "bool"
    INT = "int"
    LIST = "list"  # ordered, rendered in input order
    SET = "set"  # unordered, rendered sorted
    BLOCK = "block"  # nested sub-block


class EmitPolicy(str, Enum):
    """When a field is written to the resource body."""

    ALWAYS = "always"
    OMIT_IF_ABSENT = "omit_if_absent"  # written whenever the API returns a value
    OMIT_IF_EMPTY = "omit_if_empty"
    OMIT_IF_EQUALS = "omit_if_equals"
    REDACTED = "redacted"


@dataclass(frozen=True)
class LiveObject:
    """A configuration object as returned by the controller."""

    id: str
    site: str
    fields: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_api(cls, raw: dict[str, Any], site: str) -> "LiveObject":
        """Wrap a raw API payload fetched from the given site."""
        return cls(id=str(raw.get("_id") or ""), site=site, fields=raw)


Extractor = Callable[[dict[str, Any]], Any]


@dataclass(frozen=True)
class FieldSpec:
    """Declaration of one emitted field of a resource type."""

    name: str
    type: FieldType
    extractor: Extractor
    policy: EmitPolicy = EmitPolicy.ALWAYS
    default: Any = None  # compared against for omit_if_equals
    placeholder: str | None = None  # emitted for redacted fields
    comment: str | None = None
    fields: tuple["FieldSpec", ...] = ()  # nested table for block fields


@dataclass(frozen=True)
class TypeMapper:
    """Field table and identity rules for one resource type."""

    resource_type: str  # "terrifi_dns_record"
    description: str
    api_kind: str  # listing endpoint key used by the controller client
    name_from: tuple[str, ...]  # display-name sources, first non-empty wins
    required: tuple[str, ...] = ()
    fields: tuple[FieldSpec, ...] = ()
    include_when: Callable[[dict[str, Any]], bool] | None = None


@dataclass(frozen=True)
class Attribute:
    """A single rendered `key = value` line inside a block."""

    name: str
    value: str  # HCL-formatted
    comment: str | None = None


@dataclass(frozen=True)
class NestedBlock:
    """A labeled sub-block such as `source { ... }`."""

    label: str
    attributes: tuple[Attribute, ...] = ()
    blocks: tuple["NestedBlock", ...] = ()


@dataclass(frozen=True)
class ResourceBlock:
    """One import {} + resource {} pair."""

    import_id: str
    resource_type: str
    resource_name: str
    attributes: tuple[Attribute, ...] = ()
    blocks: tuple[NestedBlock, ...] = ()

    @property
    def address(self) -> str:
        """Fully-qualified resource address, e.g. `terrifi_wlan.home`."""
        return f"{self.resource_type}.{self.resource_name}"
