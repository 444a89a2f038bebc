#!/usr/bin/env python3
"""
Report renderers for the Linux System Status Reporter.
"""

import json
from typing import List, Optional

from rich.console import Console
from rich.text import Text

from ..aggregator import Report
from ..probes.base import Section

HEADING_STYLE = "bold #7D56F4"
INDENT = "  "


def section_lines(section: Section) -> List[str]:
    """Plain text lines of a section: blank separator, heading, indented facts."""
    return ["", section.title] + [f"{INDENT}{line}" for line in section.lines]


def render_text(report: Report) -> str:
    """Render a report as plain text."""
    lines = []
    for section in report.sections:
        lines.extend(section_lines(section))
    return "\n".join(lines) + "\n"


def render_json(report: Report) -> str:
    """Render a report as JSON."""
    data = {
        "sections": [{"title": section.title, "lines": list(section.lines)} for section in report.sections],
        "failures": [
            {"probe": failure.probe, "kind": failure.kind, "message": failure.message}
            for failure in report.failures
        ],
    }
    return json.dumps(data, indent=2)


class SectionPrinter:
    """
    Prints sections to the terminal as they are produced.

    Colored output goes through rich. Plain output, used with --no-color or
    when stdout is not a terminal, is render_text applied one section at a
    time, so the streamed text equals render_text of the whole report.
    """

    def __init__(self, console: Optional[Console] = None, color: bool = True):
        self.console = console or Console(highlight=False)
        self.color = color and self.console.is_terminal

    def __call__(self, section: Section):
        self.print_section(section)

    def print_section(self, section: Section):
        if not self.color:
            self.console.file.write(render_text(Report([section])))
            self.console.file.flush()
            return

        self.console.print()
        self.console.print(Text(section.title, style=HEADING_STYLE))
        for line in section.lines:
            self.console.print(Text(f"{INDENT}{line}"), soft_wrap=True)
