from __future__ import annotations
from dataclasses import asdict
from typing import Any, List, Optional, Tuple
from pydantic import AliasChoices, BaseModel, Field

from childcare_qa.messages import Message
from childcare_qa.projections import (
    project_citations,
    project_clarifying_questions,
    project_cost,
    project_providers,
)
from childcare_qa.render import render_message


class SendRequest(BaseModel):
    """Chat form state as submitted by the page."""

    query: str = Field("", description="Free-text question (may be empty for COST)")
    region: str = Field("PA", validation_alias=AliasChoices("region", "state"))
    intent: str = "LOOKUP_RULE"
    county: str = ""
    county_fips: str = Field("", validation_alias=AliasChoices("county_fips", "countyFips"))
    age: str = ""
    setting: str = ""
    metric: str = "median"
    units: str = "weekly"


class MessageView(BaseModel):
    role: str
    content: str
    outcome: str
    citations: List[str] = Field(default_factory=list)
    providers: List[dict] = Field(default_factory=list)
    clarifying_questions: List[str] = Field(default_factory=list)
    cost: Optional[dict] = None
    data: Any = None
    text: str = ""

    @classmethod
    def from_message(cls, m: Message) -> "MessageView":
        cost = project_cost(m.cost) if m.cost is not None else None
        return cls(
            role=m.role.value,
            content=m.content,
            outcome=m.outcome.value,
            citations=project_citations(m.citations),
            providers=[asdict(r) for r in project_providers(m.providers)],
            clarifying_questions=project_clarifying_questions(m.clarifying_questions),
            cost=asdict(cost) if cost is not None else None,
            data=m.data,
            text=render_message(m),
        )


class SessionView(BaseModel):
    session_id: str
    loading: bool = False
    placeholder: str = ""
    messages: List[MessageView] = Field(default_factory=list)


class CostEstimateRequest(BaseModel):
    state: str = "PA"
    county: str = ""
    age_group: str = "infant"
    setting: str = "center"
    metric: str = "median"
    units: str = "monthly"


class CostEstimateView(BaseModel):
    message: str
    primary_value: Optional[float] = None
    rows: List[Tuple[str, str, str, str]] = Field(default_factory=list)
    text: str = ""


class ErrorEnvelope(BaseModel):
    code: str
    message: str
    details: Optional[dict] = None
