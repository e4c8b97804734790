"""State management for a page-view conversation."""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Set

from childcare_qa.messages import Message, Role
from childcare_qa.request_builder import FormState


@dataclass(frozen=True)
class PendingTurn:
    """Ticket returned by append_pending; resolved exactly once."""

    ticket: int
    user_message: Message


class SessionStore:
    """Append-only ordered log of messages.

    A round trip is two explicit steps: append_pending() adds the user
    message right away, resolve() adds the assistant message when the reply
    arrives. Overlapping turns resolve in arrival order.
    """

    def __init__(self) -> None:
        self._messages: List[Message] = []
        self._tickets = itertools.count(1)
        self._open: Set[int] = set()

    def append_pending(self, user_message: Message) -> PendingTurn:
        if user_message.role is not Role.USER:
            raise ValueError("append_pending expects a user message")
        self._messages.append(user_message)
        turn = PendingTurn(ticket=next(self._tickets), user_message=user_message)
        self._open.add(turn.ticket)
        return turn

    def resolve(self, turn: PendingTurn, assistant_message: Message) -> None:
        if turn.ticket not in self._open:
            raise ValueError(f"Turn {turn.ticket} is unknown or already resolved")
        self._open.discard(turn.ticket)
        self._messages.append(assistant_message)

    @property
    def messages(self) -> tuple:
        """Snapshot of the log; callers cannot edit it in place."""
        return tuple(self._messages)

    @property
    def pending(self) -> int:
        return len(self._open)

    @property
    def latest(self) -> Optional[Message]:
        return self._messages[-1] if self._messages else None

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(tuple(self._messages))


@dataclass
class ChatSession:
    """Explicit UI state for one page view: form, loading flag and message log."""

    # Session identification
    session_id: str = ""

    form: FormState = field(default_factory=FormState)

    # Advisory only: disables the send button, does not serialize requests
    loading: bool = False

    store: SessionStore = field(default_factory=SessionStore)

    @property
    def messages(self) -> tuple:
        return self.store.messages
