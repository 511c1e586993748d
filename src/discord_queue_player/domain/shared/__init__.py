"""
Shared Domain Kernel

Contains types, exceptions and the event bus shared across all bounded contexts.
"""

from discord_queue_player.domain.shared.events import DomainEvent, EventBus
from discord_queue_player.domain.shared.exceptions import (
    DomainError,
    QueueNotFoundError,
    ValidationError,
)

__all__ = [
    "DomainError",
    "DomainEvent",
    "EventBus",
    "QueueNotFoundError",
    "ValidationError",
]
