"""JSON-file-backed implementations of UserRepository and CourierRepository."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, TypeVar

from bazaar.domain.exceptions import EntityNotFoundError
from bazaar.domain.model.courier import Courier
from bazaar.domain.model.user import Role, User
from bazaar.domain.repository.user_repository import CourierRepository, UserRepository
from bazaar.infrastructure.persistence.codecs import money_from_raw, money_to_raw
from bazaar.infrastructure.persistence.json_document_store import JsonDocumentStore

T = TypeVar("T")


class JsonUserRepository(UserRepository):

    def __init__(self, file_path: Path) -> None:
        self._store = JsonDocumentStore(file_path)

    def next_id(self) -> str:
        return self._store.next_id()

    def get_by_id(self, user_id: str) -> User | None:
        raw = self._store.get(user_id)
        return self._to_domain(raw) if raw is not None else None

    def get_by_email(self, email: str) -> User | None:
        wanted = email.strip().lower()
        raw = self._store.find(lambda doc: doc["email"].lower() == wanted)
        return self._to_domain(raw) if raw is not None else None

    def save(self, user: User) -> None:
        self._store.upsert(
            {"id": user.id, "name": user.name, "email": user.email, "role": user.role.value}
        )

    @staticmethod
    def _to_domain(raw: dict) -> User:
        return User(
            id=raw["id"],
            name=raw["name"],
            email=raw["email"],
            role=Role(raw.get("role", "user")),
        )


class JsonCourierRepository(CourierRepository):

    def __init__(self, file_path: Path) -> None:
        self._store = JsonDocumentStore(file_path, key="user_id")

    def get_by_user_id(self, user_id: str) -> Courier | None:
        raw = self._store.get(user_id)
        return self._to_domain(raw) if raw is not None else None

    def save(self, courier: Courier) -> None:
        self._store.upsert(self._to_raw(courier))

    def update(self, user_id: str, mutate: Callable[[Courier], T]) -> T:
        with self._store.transaction() as docs:
            for i, raw in enumerate(docs):
                if raw["user_id"] == user_id:
                    courier = self._to_domain(raw)
                    result = mutate(courier)
                    docs[i] = self._to_raw(courier)
                    return result
            raise EntityNotFoundError(f"Courier {user_id} not found")

    @staticmethod
    def _to_raw(courier: Courier) -> dict:
        return {
            "user_id": courier.user_id,
            "name": courier.name,
            "total_deliveries": courier.total_deliveries,
            "earnings": money_to_raw(courier.earnings),
            "currency": courier.earnings.currency,
        }

    @staticmethod
    def _to_domain(raw: dict) -> Courier:
        return Courier(
            user_id=raw["user_id"],
            name=raw["name"],
            total_deliveries=raw.get("total_deliveries", 0),
            earnings=money_from_raw(raw.get("earnings"), raw.get("currency", "EGP")),
        )
