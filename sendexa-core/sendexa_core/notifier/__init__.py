"""
SMS Notifiers
=============
Delivery of verification codes to phones.
"""

from .base import Notifier, SendResult, MessageStatus
from .sendexa import SendexaNotifier

__all__ = [
    "Notifier",
    "SendResult",
    "MessageStatus",
    "SendexaNotifier",
]
