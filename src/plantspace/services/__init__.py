# src/plantspace/services/__init__.py
"""Business logic services for the PlantSpace application."""

from .relay import RelayConnection, RelayHub, conversation_key

__all__ = [
    "RelayConnection",
    "RelayHub",
    "conversation_key",
]
