"""Extraction of the embedded ``week`` document from rendered portal pages.

The portal renders the schedule client-side from an inline script of the form::

    <script>
      let week = {"days": [...], ...};
      renderWeek(week);
    </script>

The match is non-greedy: the first ``};`` after the opening brace ends the
literal. Inline scripts are scanned in document order; if none holds the
assignment the page's visible body text is scanned instead.

Everything here is pure so it can be exercised against saved HTML without a
browser.
"""

import json
import re
from dataclasses import dataclass, field

from bs4 import BeautifulSoup

from src.schedule_proxy.logging import get_logger
from src.schedule_proxy.models import ScheduleDocument

log = get_logger(__name__)

WEEK_PATTERN = re.compile(r"let\s+week\s*=\s*(\{.*?\});", re.DOTALL)


@dataclass
class PageText:
    """Text content of a rendered page relevant to extraction."""

    scripts: list[str] = field(default_factory=list)
    body_text: str = ""


def find_week_literal(text: str) -> str | None:
    """Return the ``{...}`` literal assigned to ``week`` in text, if any."""
    match = WEEK_PATTERN.search(text or "")
    return match.group(1) if match else None


def _locate(page: PageText) -> tuple[str, str] | None:
    for script in page.scripts:
        literal = find_week_literal(script)
        if literal:
            return "script", literal

    literal = find_week_literal(page.body_text)
    if literal:
        return "body", literal
    return None


def extract_schedule(page: PageText) -> ScheduleDocument | None:
    """Run the extraction protocol against a rendered page.

    Returns:
        The parsed ``week`` document, or None if no literal was found or the
        literal is not valid JSON. A parse failure is logged, not raised.
    """
    located = _locate(page)
    if located is None:
        log.debug("week_literal_not_found", scripts=len(page.scripts))
        return None

    source, literal = located
    try:
        document = json.loads(literal)
    except (ValueError, RecursionError) as e:
        log.warning(
            "schedule_json_parse_failed",
            source=source,
            error=str(e),
            length=len(literal),
        )
        return None

    log.debug("week_literal_found", source=source, length=len(literal))
    return document


def page_text_from_html(html: str) -> PageText:
    """Build PageText from static HTML (saved pages, fixtures).

    Script elements with a ``src`` attribute carry no inline text and are
    skipped. Body text excludes script and style content, approximating the
    browser's ``innerText``.
    """
    soup = BeautifulSoup(html, "html.parser")
    scripts = [
        script.string or ""
        for script in soup.find_all("script")
        if not script.get("src")
    ]

    body = soup.body or soup
    for element in body.find_all(["script", "style", "noscript"]):
        element.decompose()
    body_text = body.get_text("\n")

    return PageText(scripts=scripts, body_text=body_text)
