"""Block assembly for the Terrifi import generator."""

import logging
from collections.abc import Iterable

from .encoding import encode_fields
from .mappers import is_blank, lookup
from .models import LiveObject, ResourceBlock, TypeMapper
from .utils import synthesize_name

logger = logging.getLogger(__name__)


class MissingFieldError(ValueError):
    """Raised when a live object lacks a field needed to identify it."""

    def __init__(self, resource_type: str, object_id: str, field_name: str):
        self.resource_type = resource_type
        self.object_id = object_id
        self.field_name = field_name
        super().__init__(f"{resource_type} object {object_id or '<no id>'} has no '{field_name}'")


def display_name(obj: LiveObject, mapper: TypeMapper) -> str:
    """Return the first non-empty display-name source of the object."""
    for key in mapper.name_from:
        value = lookup(obj.fields, key)
        if not is_blank(value):
            return str(value)
    return ""


def import_id(obj: LiveObject, default_site: str) -> str:
    """Import ID, prefixed with `site:` for objects outside the default site."""
    if obj.site and obj.site != default_site:
        return f"{obj.site}:{obj.id}"
    return obj.id


def check_required(obj: LiveObject, mapper: TypeMapper) -> None:
    """Raise MissingFieldError if the object cannot be identified."""
    if not obj.id:
        raise MissingFieldError(mapper.resource_type, obj.id, "_id")
    for key in mapper.required:
        if is_blank(lookup(obj.fields, key)):
            raise MissingFieldError(mapper.resource_type, obj.id, key)


def assemble(
    obj: LiveObject,
    mapper: TypeMapper,
    used_names: set[str],
    default_site: str,
) -> ResourceBlock:
    """
    Build the import + resource block for one live object.

    used_names is updated with the synthesized resource name, so it must be
    shared by every call within one batch and nothing else.
    """
    check_required(obj, mapper)

    attributes, blocks = encode_fields(mapper.fields, obj.fields)

    return ResourceBlock(
        import_id=import_id(obj, default_site),
        resource_type=mapper.resource_type,
        resource_name=synthesize_name(display_name(obj, mapper), used_names),
        attributes=tuple(attributes),
        blocks=tuple(blocks),
    )


def assemble_batch(
    objects: Iterable[LiveObject],
    mapper: TypeMapper,
    default_site: str,
) -> list[ResourceBlock]:
    """
    Build blocks for a homogeneous list of live objects, in input order.

    Objects missing identity fields are skipped with a warning; objects
    outside the mapper's include filter are skipped silently.
    """
    used_names: set[str] = set()
    blocks: list[ResourceBlock] = []

    for obj in objects:
        if mapper.include_when is not None and not mapper.include_when(obj.fields):
            logger.debug(f"Skipping {mapper.resource_type} {obj.id}: not managed by the provider")
            continue
        try:
            blocks.append(assemble(obj, mapper, used_names, default_site))
        except MissingFieldError as e:
            logger.warning(f"Skipping {e}")

    logger.debug(f"Assembled {len(blocks)} {mapper.resource_type} block(s)")
    return blocks
