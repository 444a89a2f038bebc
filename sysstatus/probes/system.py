#!/usr/bin/env python3
"""
System related status probes: OS release, desktop session and uptime.
"""

import os
import re
import time
import platform
from typing import Any, Dict, Optional

import psutil

from .base import StatusProbe, Section, SourceUnavailable, MalformedData, format_duration
from ..config import OS_RELEASE_PATHS, ATOMIC_VARIANT_PREFIXES, UNKNOWN

# Shell escapes allowed in os-release values
OS_RELEASE_ESCAPE = re.compile(r"\\([\"\\$`])")


def parse_os_release(content: str) -> Dict[str, str]:
    """Parse os-release KEY=VALUE lines; raises MalformedData on other lines."""
    release = {}
    for number, line in enumerate(content.splitlines(), 1):
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            raise MalformedData(f"unexpected line {number} in os-release: {line!r}")
        key, value = line.split("=", 1)
        value = value.strip()
        quote = value[0] if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'" else ""
        if quote:
            value = value[1:-1]
        if quote != "'":
            value = OS_RELEASE_ESCAPE.sub(r"\1", value)
        release[key.strip()] = value
    return release


def is_atomic_variant(variant: str) -> bool:
    return variant.startswith(ATOMIC_VARIANT_PREFIXES)


class OsReleaseProbe(StatusProbe):
    """Probe for the OS release metadata."""

    def __init__(self):
        super().__init__("os_release", "System")

    def gather(self) -> Dict[str, Any]:
        for path in OS_RELEASE_PATHS:
            content = self.read_file(path)
            if content is not None:
                return parse_os_release(content)
        raise SourceUnavailable("release metadata unreadable: " + ", ".join(OS_RELEASE_PATHS))

    def build_section(self, facts: Dict[str, Any]) -> Section:
        section = Section(self.title)
        variant = facts.get("VARIANT", "")
        section.add("Name", facts.get("NAME") or self.unknown("NAME"))
        section.add("Version", facts.get("VERSION") or self.unknown("VERSION"))
        section.add("Variant", variant or self.unknown("VARIANT"))
        section.add("Atomic", is_atomic_variant(variant))
        return section


class DesktopProbe(StatusProbe):
    """Probe for the desktop environment and display protocol. Never fails."""

    def __init__(self):
        super().__init__("desktop", "Desktop")

    def gather(self) -> Dict[str, Any]:
        return {
            "desktop": os.environ.get("XDG_CURRENT_DESKTOP", ""),
            "wayland_display": os.environ.get("WAYLAND_DISPLAY", ""),
            "display": os.environ.get("DISPLAY", ""),
        }

    def build_section(self, facts: Dict[str, Any]) -> Section:
        if facts["wayland_display"]:
            protocol = "Wayland"
        elif facts["display"]:
            protocol = "X11"
        else:
            protocol = "Unknown"

        section = Section(self.title)
        section.add("Name", facts["desktop"] or "Unknown")
        section.add("Protocol", protocol)
        return section


class UptimeStatusProbe(StatusProbe):
    """Probe for uptime, kernel release and installed package counts."""

    def __init__(self):
        super().__init__("status", "Status")

    def gather(self) -> Dict[str, Any]:
        try:
            boot_time = psutil.boot_time()
        except (OSError, RuntimeError) as e:
            raise SourceUnavailable(f"uptime unavailable: {e}")

        return {
            "uptime": max(time.time() - boot_time, 0),
            "kernel": platform.release(),
            "rpms": self.count_lines(["rpm", "-qa"]),
            "system_flatpaks": self.count_lines(["flatpak", "list", "--system", "--app", "--columns=application"]),
            "user_flatpaks": self.count_lines(["flatpak", "list", "--user", "--app", "--columns=application"]),
        }

    def count_lines(self, command) -> Optional[int]:
        output = self.run_command(command)
        if output is None:
            return None
        return len([line for line in output.splitlines() if line.strip()])

    def build_section(self, facts: Dict[str, Any]) -> Section:
        counts = []
        for key, label in (("rpms", "rpms"),
                           ("system_flatpaks", "system flatpaks"),
                           ("user_flatpaks", "user flatpaks")):
            count = facts[key]
            counts.append(f"{self.unknown(key) if count is None else count} {label}")

        section = Section(self.title)
        section.add("Uptime", format_duration(facts["uptime"]))
        section.add("Kernel", facts["kernel"] or UNKNOWN)
        section.add("Packages", ", ".join(counts))
        return section
