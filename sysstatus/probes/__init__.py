#!/usr/bin/env python3
"""
Probe initialization - imports all status probes and provides a function to get them in report order.
"""

from .base import StatusProbe, Section, ProbeFailure, ProbeError, SourceUnavailable, MalformedData

from .system import OsReleaseProbe, DesktopProbe, UptimeStatusProbe
from .hardware import HardwareProbe
from .storage import DiskProbe
from .network import NetworkProbe


def get_all_probes():
    """Return a list of all probe instances in report order."""
    return [
        OsReleaseProbe(),
        HardwareProbe(),
        DiskProbe(),
        DesktopProbe(),
        UptimeStatusProbe(),
        NetworkProbe()
    ]
