"""State managers for handling application-wide mutable state.

All state lives on the single asyncio event loop, so managers need no locks.
All state managers inherit from StateManager ABC.
"""

from abc import ABC, abstractmethod


class StateManager(ABC):
    """Base class for all state managers.

    State managers own mutable application state and any background tasks
    attached to it. All subclasses must implement lifecycle methods.
    """

    @abstractmethod
    async def initialize(self) -> None:
        """Initialize the state manager (called during app startup)."""
        pass

    @abstractmethod
    async def cleanup(self) -> None:
        """Cleanup resources (called during app shutdown)."""
        pass
