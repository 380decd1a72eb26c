"""
Notifier Base
=============
Contract for delivering verification codes over SMS.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Dict, Any
from enum import Enum
import structlog

logger = structlog.get_logger(__name__)


class MessageStatus(str, Enum):
    PENDING = "pending"
    SENT = "sent"
    DELIVERED = "delivered"
    FAILED = "failed"
    REJECTED = "rejected"


@dataclass
class SendResult:
    """Result of a message send operation."""
    success: bool
    provider_message_id: Optional[str] = None
    status: MessageStatus = MessageStatus.PENDING
    error_code: Optional[str] = None
    error_message: Optional[str] = None
    raw_response: Optional[Dict[str, Any]] = None


class Notifier(ABC):
    """
    Abstract base class for SMS notifiers.

    Delivery is best-effort: ``send`` reports failures through
    ``SendResult`` and is never retried by the caller.
    """

    name: str = "base"

    def __init__(self):
        self._is_initialized = False

    async def initialize(self) -> None:
        """Initialize the notifier (e.g., create HTTP clients)."""
        self._is_initialized = True
        logger.info("Notifier initialized", notifier=self.name)

    async def close(self) -> None:
        """Clean up resources (e.g., close HTTP clients)."""
        self._is_initialized = False
        logger.info("Notifier closed", notifier=self.name)

    @abstractmethod
    async def send(
        self,
        to_phone_number: str,
        sender_label: str,
        message_body: str,
    ) -> SendResult:
        """
        Send an SMS message.

        Args:
            to_phone_number: Recipient phone number (E.164 format)
            sender_label: Registered sender ID shown as "From"
            message_body: Message content

        Returns:
            SendResult with provider response
        """

    async def health_check(self) -> bool:
        return self._is_initialized
