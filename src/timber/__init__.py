"""
Timber: telemetry capture and emission for service code.

Provides a write-once telemetry manager that fans completed events out to
pluggable sinks, plus a small TTL cache for short-lived staging data.
"""

__version__ = "0.1.0"
