"""
Cloud service log parsing pipeline.

Turns raw log lines from cloud services into validated structured events
tagged with their log type, event time and security indicators.
"""

__version__ = "0.1.0"
