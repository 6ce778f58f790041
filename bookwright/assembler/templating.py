"""Jinja environment and packaged asset locations shared by the targets."""

from __future__ import annotations

from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

PACKAGE_DIR = Path(__file__).resolve().parents[1]
TEMPLATES_DIR = PACKAGE_DIR / "templates"
ASSETS_DIR = PACKAGE_DIR / "assets"


def build_environment(templates_dir: Path | None = None) -> Environment:
    """Return the Jinja environment used for every rendered page."""
    return Environment(
        loader=FileSystemLoader(str(templates_dir or TEMPLATES_DIR)),
        autoescape=select_autoescape(["html", "xml", "jinja"]),
        trim_blocks=True,
        lstrip_blocks=True,
    )


def render_template(env: Environment, name: str, **context: object) -> str:
    """Render ``name`` and guarantee a trailing newline."""
    text = env.get_template(name).render(**context)
    if not text.endswith("\n"):
        text += "\n"
    return text


__all__ = [
    "ASSETS_DIR",
    "PACKAGE_DIR",
    "TEMPLATES_DIR",
    "build_environment",
    "render_template",
]
