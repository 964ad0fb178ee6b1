"""
Sessions, the base-image cache and the session table
"""

from .cache import BaseImageCache
from .session import ProcessingSession
from .registry import SessionTable

__all__ = ['BaseImageCache', 'ProcessingSession', 'SessionTable']
