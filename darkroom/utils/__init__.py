"""
darkroom utilities module.

Provides logging helpers shared by the library and the CLI.
"""

from .logging import StructuredLogger, RenderStats, setup_console_logging

__all__ = [
    'StructuredLogger',
    'RenderStats',
    'setup_console_logging'
]
