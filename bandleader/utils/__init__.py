"""
Utility functions for the wrapper: message delivery and module discovery.
"""

from .message_utils import safe_send, safe_send_dm

__all__ = [
    'safe_send',
    'safe_send_dm',
]
