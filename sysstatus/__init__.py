#!/usr/bin/env python3
"""
Linux System Status Reporter

Queries the OS release metadata, hardware, disks, desktop session, uptime and
network state of the local machine and prints them as a sectioned report.
"""

__version__ = "1.0.0"
