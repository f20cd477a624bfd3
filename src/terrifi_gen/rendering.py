"""HCL rendering for the Terrifi import generator."""

from collections.abc import Sequence
from pathlib import Path
from typing import TextIO

from jinja2 import Environment, FileSystemLoader

from .encoding import hcl_string
from .models import ResourceBlock

TEMPLATES_DIR = Path(__file__).parent / "templates"
BLOCKS_TEMPLATE = "blocks.tf.j2"


class WriteError(OSError):
    """Raised when rendered output cannot be written to the sink."""


def create_jinja_environment(templates_dir: Path = TEMPLATES_DIR) -> Environment:
    """Create and configure a Jinja2 environment."""
    env = Environment(
        loader=FileSystemLoader(templates_dir),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    env.filters["hcl_string"] = hcl_string
    return env


def render_blocks(env: Environment, blocks: Sequence[ResourceBlock]) -> str:
    """Render import + resource pairs in the given order."""
    template = env.get_template(BLOCKS_TEMPLATE)
    return str(template.render(blocks=blocks))


def write_blocks(
    sink: TextIO,
    blocks: Sequence[ResourceBlock],
    env: Environment | None = None,
) -> None:
    """
    Render blocks and write them to sink.

    The full text is rendered before anything is written, so a rendering
    error leaves the sink untouched.

    Raises:
        WriteError: the sink rejected the write (closed stream, broken pipe,
            full disk).
    """
    text = render_blocks(env or create_jinja_environment(), blocks)
    if not text:
        return

    try:
        sink.write(text)
        sink.flush()
    except (OSError, ValueError) as e:
        raise WriteError(f"failed to write output: {e}") from e
