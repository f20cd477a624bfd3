"""Utility functions for the Terrifi import generator."""

import re

FALLBACK_NAME = "SET_NAME"

_INVALID_CHARS = re.compile(r"[^a-z0-9_]")
_UNDERSCORE_RUNS = re.compile(r"_+")
IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def to_resource_name(display_name: str) -> str:
    """
    Normalize a display name into a Terraform identifier.

    "My Device" -> "my_device"
    "123abc" -> "_123abc"

    Returns an empty string when nothing usable is left.
    """
    s = _INVALID_CHARS.sub("_", display_name.lower())
    s = _UNDERSCORE_RUNS.sub("_", s).strip("_")
    if s and s[0].isdigit():
        s = "_" + s
    return s


def synthesize_name(display_name: str | None, used_names: set[str]) -> str:
    """
    Pick a unique resource name for display_name and record it in used_names.

    Empty or all-symbol names fall back to SET_NAME_1, SET_NAME_2, ...
    Collisions get _2, _3, ... appended in processing order.
    """
    candidate = to_resource_name(display_name or "")

    if not candidate:
        counter = 1
        while f"{FALLBACK_NAME}_{counter}" in used_names:
            counter += 1
        candidate = f"{FALLBACK_NAME}_{counter}"
    elif candidate in used_names:
        counter = 2
        while f"{candidate}_{counter}" in used_names:
            counter += 1
        candidate = f"{candidate}_{counter}"

    used_names.add(candidate)
    return candidate
