"""Transition event publishing.

The transition engine publishes a :class:`TransitionEvent` after every
committed status change. Handlers (the notification dispatcher, by default)
are called in registration order; a failing handler is logged and skipped so
that delivery problems never reach the caller of a transition.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional
from uuid import UUID

import structlog

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class TransitionEvent:
    """A committed application status change."""
    application_id: UUID
    from_status: str
    to_status: str
    occurred_at: datetime
    actor_id: Optional[UUID] = None
    actor_type: str = "USER"
    metadata: Dict[str, Any] = field(default_factory=dict)
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            "application_id": str(self.application_id),
            "from_status": self.from_status,
            "to_status": self.to_status,
            "occurred_at": self.occurred_at.isoformat(),
            "actor_id": str(self.actor_id) if self.actor_id else None,
            "actor_type": self.actor_type,
            "metadata": self.metadata,
        }


TransitionHandler = Callable[[TransitionEvent], Any]


class TransitionEventPublisher:
    """Fans transition events out to registered handlers."""
    
    def __init__(self, handlers: Optional[List[TransitionHandler]] = None):
        self._handlers: List[TransitionHandler] = list(handlers or [])
    
    def subscribe(self, handler: TransitionHandler) -> None:
        self._handlers.append(handler)
    
    def publish(self, event: TransitionEvent) -> int:
        """Deliver an event to every handler.
        
        Returns:
            Number of handlers that accepted the event
        """
        delivered = 0
        for handler in self._handlers:
            try:
                handler(event)
                delivered += 1
            except Exception as e:
                logger.error(
                    "Transition event handler failed",
                    handler=getattr(handler, "__qualname__", repr(handler)),
                    application_id=str(event.application_id),
                    to_status=event.to_status,
                    error=str(e)
                )
        
        logger.debug(
            "Transition event published",
            application_id=str(event.application_id),
            from_status=event.from_status,
            to_status=event.to_status,
            delivered=delivered
        )
        return delivered
