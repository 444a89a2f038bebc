#!/usr/bin/env python3
"""
Runs the status probes in order and assembles their sections into a report.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from .probes.base import StatusProbe, Section, ProbeFailure

logger = logging.getLogger("sysstatus")

PENDING = "pending"
RUNNING = "running"
DONE = "done"
ABORTED = "aborted"


@dataclass
class Report:
    """Sections in probe order, plus the failures isolated along the way."""

    sections: List[Section] = field(default_factory=list)
    failures: List[ProbeFailure] = field(default_factory=list)


class ReportAborted(Exception):
    """Raised when a probe fails and failures are fatal."""

    def __init__(self, failure: ProbeFailure):
        super().__init__(str(failure))
        self.failure = failure


class StatusAggregator:
    """Runs probes strictly in order and collects their sections."""

    def __init__(self, probes: List[StatusProbe], keep_going: bool = False,
                 on_section: Optional[Callable[[Section], None]] = None):
        self.probes = probes
        self.keep_going = keep_going
        self.on_section = on_section
        self.state = PENDING

    def generate(self) -> Report:
        """
        Run every probe and build the report.

        Raises:
            ReportAborted: a probe failed and keep_going is off; later probes
                are not run
        """
        report = Report()
        self.state = RUNNING

        for probe in self.probes:
            logger.info(f"Running probe: {probe.name}")
            result = probe.run()

            if isinstance(result, ProbeFailure):
                if not self.keep_going:
                    self.state = ABORTED
                    raise ReportAborted(result)
                logger.warning(f"Probe {probe.name} failed: {result.message}")
                report.failures.append(result)
                result = Section(probe.title, [f"Error: {result.message}"])

            report.sections.append(result)
            if self.on_section is not None:
                self.on_section(result)

        self.state = DONE
        return report
