"""
Utility modules for the VEC upload service.
"""

from app.utils.messages import MESSAGES, get_message

__all__ = ["MESSAGES", "get_message"]
