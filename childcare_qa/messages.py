"""Typed conversation messages and the structured payloads they carry."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Tuple, Union


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class Outcome(str, Enum):
    """How a message came to be."""

    USER = "user"
    ANSWER = "answer"
    RAW = "raw"
    ERROR = "error"
    NETWORK = "network"


@dataclass(frozen=True)
class Citation:
    title: Optional[str] = None
    url: Optional[str] = None


@dataclass(frozen=True)
class Provider:
    """A licensed childcare provider as returned by the backend."""

    name: str
    address: Optional[str] = None
    city: Optional[str] = None
    zip: Optional[str] = None
    license_type: Optional[str] = None
    license_status: Optional[str] = None
    qris_rating: Optional[str] = None
    source_url: Optional[str] = None
    last_seen: Optional[str] = None  # ISO-8601


@dataclass(frozen=True)
class PricePair:
    median: Optional[float] = None
    p75: Optional[float] = None


@dataclass(frozen=True)
class CostAnswer:
    age_group: str  # infant, toddler, preschool, school-age, mixed, or other
    setting: str  # center, family, or other
    weekly: PricePair = field(default_factory=PricePair)
    monthly: PricePair = field(default_factory=PricePair)


@dataclass(frozen=True)
class CostQueryEcho:
    age_group: str = ""
    setting: str = ""
    metric: str = ""  # median | p75
    units: str = ""  # weekly | monthly


@dataclass(frozen=True)
class CostData:
    state: str = ""
    county_fips: str = ""
    county: str = ""
    queries: Tuple[CostQueryEcho, ...] = ()
    answers: Tuple[CostAnswer, ...] = ()
    notes: Tuple[str, ...] = ()
    citations: Tuple[str, ...] = ()
    clarifying_questions: Tuple[str, ...] = ()  # eligibility prompts sent alongside prices


@dataclass(frozen=True)
class ClarifyingQuestions:
    questions: Tuple[str, ...] = ()


@dataclass(frozen=True)
class GenericData:
    """Any other structured payload; kept for display of the raw data only."""

    keys: Tuple[str, ...] = ()


DataPayload = Union[CostData, ClarifyingQuestions, GenericData, None]


@dataclass(frozen=True)
class Message:
    """One turn in the conversation. Never mutated after creation."""

    role: Role
    content: str
    citations: Tuple[Citation, ...] = ()
    providers: Optional[Tuple[Provider, ...]] = None
    data: Any = None  # backend `data` as received
    payload: DataPayload = None
    outcome: Outcome = Outcome.ANSWER

    @classmethod
    def from_user(cls, content: str) -> "Message":
        return cls(role=Role.USER, content=content, outcome=Outcome.USER)

    @property
    def clarifying_questions(self) -> Tuple[str, ...]:
        if isinstance(self.payload, ClarifyingQuestions):
            return self.payload.questions
        if isinstance(self.payload, CostData):
            return self.payload.clarifying_questions
        return ()

    @property
    def cost(self) -> Optional[CostData]:
        return self.payload if isinstance(self.payload, CostData) else None
