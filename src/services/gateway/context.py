# src/services/gateway/context.py
"""
Контекст запроса в gateway.

CallerContext создаётся только шагом аутентификации и явно передаётся
обработчикам, которым нужна идентичность вызывающего.

RequestTrace - состояние запроса, живёт только в пределах одного запроса:

    Received -> Authenticating -> Authenticated | Rejected
    Received | Authenticated -> Forwarding -> Relayed | Failed
    Authenticating -> Failed (auth-сервис недоступен)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from src.common.logger import log_debug
from src.shared.models.auth_dto import IdentityClaims


class RequestState(str, Enum):
    RECEIVED = "received"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"
    REJECTED = "rejected"
    FORWARDING = "forwarding"
    RELAYED = "relayed"
    FAILED = "failed"


_TRANSITIONS: dict[RequestState, frozenset[RequestState]] = {
    RequestState.RECEIVED: frozenset({RequestState.AUTHENTICATING, RequestState.FORWARDING}),
    RequestState.AUTHENTICATING: frozenset({
        RequestState.AUTHENTICATED,
        RequestState.REJECTED,
        RequestState.FAILED,
    }),
    RequestState.AUTHENTICATED: frozenset({RequestState.FORWARDING}),
    RequestState.FORWARDING: frozenset({RequestState.RELAYED, RequestState.FAILED}),
    RequestState.REJECTED: frozenset(),
    RequestState.RELAYED: frozenset(),
    RequestState.FAILED: frozenset(),
}

TERMINAL_STATES = frozenset({RequestState.REJECTED, RequestState.RELAYED, RequestState.FAILED})


class InvalidTransitionError(RuntimeError):
    pass


class RequestTrace:
    """Текущее состояние запроса с журналом переходов (DEBUG)."""

    def __init__(self, route: str) -> None:
        self.route = route
        self.state = RequestState.RECEIVED
        self.history: list[RequestState] = [RequestState.RECEIVED]

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    async def advance(self, state: RequestState) -> None:
        if state not in _TRANSITIONS[self.state]:
            raise InvalidTransitionError(f"{self.route}: {self.state.value} -> {state.value}")
        await log_debug(f"{self.route}: {self.state.value} -> {state.value}")
        self.state = state
        self.history.append(state)


@dataclass(frozen=True)
class CallerContext:
    """Проверенная идентичность и исходный заголовок Authorization."""
    identity: IdentityClaims
    authorization: str

    @property
    def user_id(self) -> int:
        return self.identity.id
