"""Per-conversation state carried between two customer messages."""

from dataclasses import dataclass
from typing import Optional

from ..domain.models import PendingCancellation


@dataclass
class ConversationContext:
    """
    State of one WhatsApp conversation.

    The caller owns the context and passes it to every operation that needs
    to remember something between messages, such as the numbered list of
    bookings offered for cancellation.
    """
    conversation_id: str
    pending_cancellation: Optional[PendingCancellation] = None

    def clear_pending(self) -> None:
        self.pending_cancellation = None
