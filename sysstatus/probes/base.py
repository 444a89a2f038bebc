#!/usr/bin/env python3
"""
Base module for all status probes.

A probe reads one OS subsystem and turns what it finds into a titled Section.
Reads happen in gather(), formatting in build_section(); run() ties the two
together and turns probe errors into a ProbeFailure.
"""

import os
import subprocess
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from ..config import UNKNOWN

logger = logging.getLogger("sysstatus.probes")

SOURCE_UNAVAILABLE = "SourceUnavailable"
MALFORMED_DATA = "MalformedData"


@dataclass
class Section:
    """A titled, ordered group of report lines."""

    title: str
    lines: List[str] = field(default_factory=list)

    def add(self, label: str, value: Any):
        self.lines.append(f"{label}: {value}")


@dataclass
class ProbeFailure:
    """Result of a probe whose required source could not be read."""

    probe: str
    kind: str
    message: str

    def __str__(self):
        return f"{self.probe}: {self.message}"


ProbeResult = Union[Section, ProbeFailure]


class ProbeError(Exception):
    """Base class for errors that make a whole probe fail."""

    kind = SOURCE_UNAVAILABLE


class SourceUnavailable(ProbeError):
    """An OS service, file or command the probe depends on is missing."""

    kind = SOURCE_UNAVAILABLE


class MalformedData(ProbeError):
    """An OS source answered with data in an unexpected shape."""

    kind = MALFORMED_DATA


class StatusProbe:
    """Base class for all status probes."""

    def __init__(self, name: str, title: str):
        self.name = name
        self.title = title
        self.timeout: Optional[float] = None

    def gather(self) -> Dict[str, Any]:
        """Read everything the probe needs from the system."""
        raise NotImplementedError("Subclasses must implement this method")

    def build_section(self, facts: Dict[str, Any]) -> Section:
        """Format gathered facts into a section."""
        raise NotImplementedError("Subclasses must implement this method")

    def run(self) -> ProbeResult:
        """Run the probe and return its section or a failure."""
        try:
            facts = self.gather()
        except ProbeError as e:
            logger.debug(f"Probe {self.name} failed: {e}")
            return ProbeFailure(self.name, e.kind, str(e))
        return self.build_section(facts)

    def unknown(self, fact: str) -> str:
        """Record an unresolved fact and return the placeholder."""
        logger.debug(f"{self.name}: {fact} unavailable")
        return UNKNOWN

    def run_command(self, command: List[str]) -> Optional[str]:
        """
        Run a command and return its standard output.

        Args:
            command: Command to run as a list of strings

        Returns:
            Output as string, or None when the command is missing, fails or
            times out
        """
        try:
            result = subprocess.run(
                command,
                capture_output=True,
                text=True,
                check=False,
                timeout=self.timeout
            )
        except FileNotFoundError:
            logger.debug(f"Command not found: {command[0]}")
            return None
        except subprocess.TimeoutExpired:
            logger.debug(f"Command timed out after {self.timeout} seconds: {' '.join(command)}")
            return None

        if result.returncode != 0:
            logger.debug(f"Command {' '.join(command)} exited with {result.returncode}: {result.stderr.strip()}")
            return None
        return result.stdout

    def read_file(self, file_path: str) -> Optional[str]:
        """Read a file, returning None when it is missing or unreadable."""
        try:
            with open(file_path, 'r') as f:
                return f.read()
        except FileNotFoundError:
            logger.debug(f"File not found: {file_path}")
        except PermissionError:
            logger.debug(f"Permission denied: {file_path}")
        except OSError as e:
            logger.debug(f"Failed to read file {file_path}: {e}")
        return None

    def read_value(self, file_path: str) -> Optional[str]:
        """Read a single-value sysfs attribute."""
        content = self.read_file(file_path)
        if content is None:
            return None
        content = content.strip()
        return content or None

    def list_dir(self, path: str) -> List[str]:
        """List a directory; raises OSError when it cannot be read."""
        return sorted(os.listdir(path))

    def resolve_link(self, path: str) -> Optional[str]:
        """Return the basename a symlink resolves to."""
        if not os.path.exists(path):
            return None
        return os.path.basename(os.path.realpath(path))


def numbered_titles(prefix: str, count: int) -> List[str]:
    """Titles for a list of items, suffixed with the index only when there are several."""
    if count > 1:
        return [f"{prefix}{i}" for i in range(count)]
    return [prefix] * count


def format_bytes(num_bytes: Optional[int]) -> str:
    """Format a byte count using binary units."""
    if num_bytes is None:
        return UNKNOWN
    value = float(num_bytes)
    for unit in ("B", "KiB", "MiB", "GiB", "TiB"):
        if abs(value) < 1024 or unit == "TiB":
            break
        value /= 1024
    if unit == "B":
        return f"{int(value)} B"
    return f"{value:.1f} {unit}"


def format_duration(seconds: float) -> str:
    """Format a duration in seconds as days, hours, minutes and seconds."""
    days, remainder = divmod(int(seconds), 86400)
    hours, remainder = divmod(remainder, 3600)
    minutes, secs = divmod(remainder, 60)
    if days:
        return f"{days}d {hours}h {minutes}m {secs}s"
    return f"{hours}h {minutes}m {secs}s"
