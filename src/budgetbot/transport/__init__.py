"""Chat transports for budgetbot."""

from budgetbot.transport.base import Button, Keyboard, Transport, TransportError

__all__ = ["Button", "Keyboard", "Transport", "TransportError"]
