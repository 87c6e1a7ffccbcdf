"""Jinja2 rendering for the files the installer writes."""

import os

from jinja2 import Environment, FileSystemLoader, StrictUndefined

TEMPLATE_DIR = os.path.join(os.path.dirname(__file__), "templates")

_env = Environment(
    loader=FileSystemLoader(TEMPLATE_DIR),
    undefined=StrictUndefined,
    keep_trailing_newline=True,
    autoescape=False,
)


def render(template_name: str, **context: object) -> str:
    """Render a template from the package ``templates`` directory."""
    return _env.get_template(template_name).render(**context)
