"""Plan outline extraction and HTML rendering.

Splits a plan into heading sections, collects list items as a flat list of
steps, and renders the document to HTML with an ``id`` on every heading so
the outline can link to it.

Known limitation: duplicate headings get duplicate ids. Anchor navigation
for the second and later copies is undefined.
"""

import re

from markdown_it import MarkdownIt

from .core import ParsedPlan, PlanSection

_HEADING_RE = re.compile(r"^(#{1,6})\s+(.+)$")
_STEP_RE = re.compile(r"^(\d+\.|[-*])\s")
_STEP_MARKER_RE = re.compile(r"^(\d+\.|-|\*)\s*")
_SLUG_RE = re.compile(r"[^a-z0-9]+")


def slugify(title: str) -> str:
    """Return the anchor id for a heading title.

    >>> slugify("Step 1: Build!")
    'step-1-build'
    """
    return _SLUG_RE.sub("-", title.lower()).strip("-")


def _render_heading_open(self, tokens, idx, options, env):
    # The inline token after heading_open holds the heading's source text
    tokens[idx].attrSet("id", slugify(tokens[idx + 1].content))
    return self.renderToken(tokens, idx, options, env)


def _make_renderer() -> MarkdownIt:
    md = MarkdownIt("commonmark").enable("table")
    md.add_render_rule("heading_open", _render_heading_open)
    return md


_md = _make_renderer()


def extract_sections(markdown: str) -> tuple[list[PlanSection], list[str]]:
    """Split markdown into heading sections and collect list-item steps.

    Lines before the first heading are discarded. Each section's content is
    every line up to the next heading of any level.
    """
    sections: list[PlanSection] = []
    steps: list[str] = []

    current: PlanSection | None = None
    body: list[str] = []

    for line in markdown.split("\n"):
        match = _HEADING_RE.match(line)
        if match:
            if current is not None:
                current.content = "\n".join(body)
                sections.append(current)

            title = match.group(2).rstrip("\r")
            current = PlanSection(
                level=len(match.group(1)),
                title=title,
                content="",
                id=slugify(title),
            )
            body = []
        elif current is not None:
            body.append(line)

            if _STEP_RE.match(line):
                step = _STEP_MARKER_RE.sub("", line, count=1).strip()
                if step:
                    steps.append(step)

    if current is not None:
        current.content = "\n".join(body)
        sections.append(current)

    return sections, steps


def render_html(markdown: str) -> str:
    """Render markdown to HTML with slug ids on every heading."""
    if not markdown:
        return ""
    return _md.render(markdown)


def parse_plan(markdown: str) -> ParsedPlan:
    """Parse a plan into rendered HTML, its sections and its steps."""
    sections, steps = extract_sections(markdown)
    return ParsedPlan(html=render_html(markdown), sections=sections, steps=steps)

