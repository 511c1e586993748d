# ruff: noqa: N999
"""
Domain Layer

Contains pure business logic organized by bounded contexts:
- shared/: Cross-cutting types, exceptions, messages and the event bus
- music/: Track, guild queue, filters and progress logic
"""

from discord_queue_player.domain.shared.exceptions import DomainError

__all__ = [
    "DomainError",
]
