"""
Telemetry for imagination-tools.

Contains logging and per-operation metrics utilities.
"""

from .logger import setup_logging, JSONFormatter, CorrelationFilter, MetricsLogger

__all__ = [
    "setup_logging",
    "JSONFormatter",
    "CorrelationFilter",
    "MetricsLogger"
]
