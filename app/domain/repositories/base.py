"""
Base Repository Interface.
Defines the standard contract for data access operations.
"""

from typing import TypeVar, Any, Protocol

T = TypeVar("T")


class BaseRepository(Protocol[T]):
    """Interface for generic write and bookkeeping operations."""

    def create(self, obj_in: Any) -> T:
        """Create a new entity."""
        ...

    def update(self, db_obj: T, obj_in: Any) -> T:
        """Update an existing entity."""
        ...

    def count(self) -> int:
        """Count all entities."""
        ...

    def delete_all(self) -> int:
        """Delete every entity, returning how many rows were removed."""
        ...
