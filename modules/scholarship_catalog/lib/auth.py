from __future__ import annotations

from abc import ABC, abstractmethod

from .models import User


class AuthProvider(ABC):
    """Answers "who is signed in?"; sessions and sign-in flows live elsewhere."""

    @abstractmethod
    def current_user(self) -> User | None:
        raise NotImplementedError


class StaticAuth(AuthProvider):
    """Fixed answer, e.g. the user resolved by the page before the browser opened."""

    def __init__(self, user: User | str | None = None) -> None:
        if isinstance(user, str):
            user = User(id=user) if user.strip() else None
        self._user = user

    def current_user(self) -> User | None:
        return self._user

    def sign_in(self, user: User | str) -> None:
        self._user = User(id=user) if isinstance(user, str) else user

    def sign_out(self) -> None:
        self._user = None
