"""Terrifi import generator."""

from .assembler import MissingFieldError, assemble, assemble_batch
from .cli import main
from .mappers import UnknownResourceTypeError, get_mapper, load_mappers
from .models import Attribute, LiveObject, NestedBlock, ResourceBlock
from .rendering import WriteError, write_blocks

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "main",
    "assemble",
    "assemble_batch",
    "get_mapper",
    "load_mappers",
    "write_blocks",
    "Attribute",
    "LiveObject",
    "NestedBlock",
    "ResourceBlock",
    "MissingFieldError",
    "UnknownResourceTypeError",
    "WriteError",
]
