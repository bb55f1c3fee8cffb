"""
Evaluator program rendering.

The evaluator only ever sees one kind of file: the user's source wrapped in
a `#lang racket` module that pulls in `racket/control`, so that shift/reset
and call/cc are in scope without the user writing the prelude.
"""

from functools import lru_cache
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined, Template

PROGRAM_TEMPLATES_DIR = Path(__file__).parent / "program_templates"
RACKET_PROGRAM_TEMPLATE = "racket_program.jinja2"

if not (PROGRAM_TEMPLATES_DIR / RACKET_PROGRAM_TEMPLATE).exists():
    raise FileNotFoundError(
        f"Program template missing: {PROGRAM_TEMPLATES_DIR / RACKET_PROGRAM_TEMPLATE}"
    )


@lru_cache(maxsize=1)
def _program_template() -> Template:
    # Racket source is not markup; nothing is escaped and the final newline survives.
    env = Environment(
        loader=FileSystemLoader(PROGRAM_TEMPLATES_DIR),
        autoescape=False,
        keep_trailing_newline=True,
        undefined=StrictUndefined,
    )
    return env.get_template(RACKET_PROGRAM_TEMPLATE)


def render_program(source: str) -> str:
    """Wraps user source in the Racket module the evaluator expects."""
    return _program_template().render(source=source.strip())
