"""
Adapters layer - Local storage and the confirmation message service.
"""

from .admin_auth import AdminPassword
from .booking_store import BookingStore
from .message_generator import OpenAIMessenger, TemplateMessenger
from .storage import FileStorage, InMemoryStorage

__all__ = [
    "AdminPassword",
    "BookingStore",
    "FileStorage",
    "InMemoryStorage",
    "OpenAIMessenger",
    "TemplateMessenger",
]
