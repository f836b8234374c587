"""
WallDecorator - Template Configuration
=======================================
Jinja2 environment for transactional email templates, with custom filters.
"""

import os

from jinja2 import Environment, FileSystemLoader, select_autoescape

from common.helpers import format_rupees, format_long_date

TEMPLATE_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "templates")

env = Environment(
    loader=FileSystemLoader(TEMPLATE_DIR),
    autoescape=select_autoescape(["html", "xml"]),
    trim_blocks=True,
    lstrip_blocks=True,
)

# Filters (usage in template: {{ value | rupees }})
env.filters["rupees"] = format_rupees
env.filters["long_date"] = format_long_date


def render_template(name: str, **context) -> str:
    """Render a template from TEMPLATE_DIR to a string."""
    return env.get_template(name).render(**context)
