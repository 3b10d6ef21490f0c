"""Marketplace user, as far as checkout needs to know it."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Role(Enum):
    USER = "user"
    SELLER = "seller"
    DELIVERY = "delivery"
    ADMIN = "admin"


@dataclass
class User:
    id: str
    name: str
    email: str
    role: Role = Role.USER
