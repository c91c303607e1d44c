"""Generic repository interfaces (Dependency Inversion Principle).

Service-layer code depends on these abstractions, never on Django ORM
directly.  Repositories hand out immutable DTOs, not model instances, so
nothing outside the repository can mutate persisted state by accident.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Generic, Hashable, Optional, TypeVar

T = TypeVar("T")
K = TypeVar("K", bound=Hashable)


class IReadRepository(ABC, Generic[K, T]):
    """Read-only repository contract.

    ``K`` is the identifier type, ``T`` the DTO returned for a record.
    """

    @abstractmethod
    def get_by_id(self, id: K) -> Optional[T]:
        """Retrieve a record by its identifier, or ``None``."""
