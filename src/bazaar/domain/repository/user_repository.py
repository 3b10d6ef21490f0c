"""Abstract repositories for users and courier profiles."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, TypeVar

from bazaar.domain.model.courier import Courier
from bazaar.domain.model.user import User

T = TypeVar("T")


class UserRepository(ABC):

    @abstractmethod
    def next_id(self) -> str:
        """Generate a new unique user ID."""

    @abstractmethod
    def get_by_id(self, user_id: str) -> User | None:
        """Return a user by ID, or None."""

    @abstractmethod
    def get_by_email(self, email: str) -> User | None:
        """Return a user by email (case-insensitive), or None."""

    @abstractmethod
    def save(self, user: User) -> None:
        """Persist a user."""


class CourierRepository(ABC):

    @abstractmethod
    def get_by_user_id(self, user_id: str) -> Courier | None:
        """Return the courier profile of a delivery user, or None."""

    @abstractmethod
    def save(self, courier: Courier) -> None:
        """Persist a courier profile."""

    @abstractmethod
    def update(self, user_id: str, mutate: Callable[[Courier], T]) -> T:
        """Atomically load, mutate and persist one courier profile."""
