#!/usr/bin/env python3
"""
UI module initialization for the Linux System Status Reporter.
"""

from .report import SectionPrinter, render_text, render_json
