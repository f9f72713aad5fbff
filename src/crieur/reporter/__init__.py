"""
Logging for Crieur components.
"""

from crieur.reporter.system_reporter import SystemReporter

__all__ = ["SystemReporter"]
