"""
InspectPilot Output Contract

Renders validated finding pages into the field map handed to the
document layer: field name -> HTML fragment. Layout, fonts and binary
document generation are out of scope; fragments only use h3/h4, p, ul
and a.

All text is autoescaped by Jinja2. Newlines in block text become <br/>.
"""
from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable, Optional, Sequence

from jinja2 import Environment, FileSystemLoader, select_autoescape
from markupsafe import Markup, escape

from .exceptions import RenderValidationError
from .models import PAGE_FIELDS, FindingPage

logger = logging.getLogger(__name__)


SENTINEL = "SENTINEL_FINDINGS_V1"
NO_FINDINGS_TEXT = "No findings were identified during this assessment."
NO_LIMITATIONS_TEXT = "No limitations were recorded during this assessment."

FIELD_FINDING_PAGES = "FINDING_PAGES_HTML"
FIELD_FINDING_COUNT = "FINDING_COUNT"
FIELD_LIMITATIONS = "LIMITATIONS_HTML"

SECTION_HEADINGS = tuple(
    f"<h4>{name.replace('_', ' ').title()}</h4>" for name in PAGE_FIELDS
)

# Setup Jinja2 templates
templates_dir = Path(__file__).parent / "templates"


def _nl2br(value: object) -> Markup:
    return Markup("<br/>").join(escape(str(value or "")).split("\n"))


def _environment() -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(templates_dir)),
        autoescape=select_autoescape(["html", "j2"], default_for_string=True),
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["nl2br"] = _nl2br
    return env


_env = _environment()


# =============================================================================
# Rendering
# =============================================================================

def render_finding_pages(pages: Sequence[FindingPage]) -> str:
    """Render every page into one HTML fragment, in the order given."""
    template = _env.get_template("finding_pages.html.j2")
    return template.render(
        pages=list(pages), sentinel=SENTINEL, empty_text=NO_FINDINGS_TEXT,
    ).strip()


def render_limitations(limitations: Iterable[str]) -> str:
    template = _env.get_template("limitations.html.j2")
    return template.render(
        limitations=list(limitations), empty_text=NO_LIMITATIONS_TEXT,
    ).strip()


def render_fields(
    pages: Sequence[FindingPage],
    limitations: Optional[Iterable[str]] = None,
) -> dict[str, str]:
    """
    Build the output field map.

    The finding pages fragment is checked with validate_rendered_html
    before it is returned.

    Args:
        pages: Validated pages, already in tier order
        limitations: Optional limitation lines to render as a list

    Returns:
        Mapping of field name to HTML fragment or plain text

    Raises:
        RenderValidationError: If the rendered fragment fails the checks
    """
    html = render_finding_pages(pages)
    errors = validate_rendered_html(html, len(pages))
    if errors:
        logger.error("Rendered finding pages failed %d check(s): %s", len(errors), "; ".join(errors))
        raise RenderValidationError(
            message=f"Rendered finding pages failed validation: {errors[0]}",
            details={"errors": errors, "page_count": len(pages)},
        )

    fields = {
        FIELD_FINDING_PAGES: html,
        FIELD_FINDING_COUNT: str(len(pages)),
    }
    if limitations is not None:
        fields[FIELD_LIMITATIONS] = render_limitations(limitations)
    return fields


# =============================================================================
# Structural Checks
# =============================================================================

def validate_rendered_html(html: str, expected_count: int) -> list[str]:
    """
    Check a rendered finding pages fragment before it is handed on.

    Returns:
        List of problems; empty when the fragment is acceptable
    """
    errors: list[str] = []
    if SENTINEL not in html:
        errors.append(f"missing {SENTINEL}")
    for heading in SECTION_HEADINGS:
        count = html.count(heading)
        if count < expected_count:
            errors.append(
                f"missing heading count for {heading}: got {count}, expected >= {expected_count}"
            )
    if re.search(r"\bundefined\b|\bNone\b", html):
        errors.append("contains forbidden token: undefined/None")
    if re.search(r"\|[-—]{3,}\|", html):
        errors.append("contains markdown table separator leakage")
    if "###" in html:
        errors.append("contains markdown heading leakage")
    if re.search(r"<h2", html, re.IGNORECASE):
        errors.append("contains forbidden <h2> in finding block html")
    return errors
