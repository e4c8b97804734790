"""
Outbound request construction for the /chat endpoint.

The builder is a pure function of the explicit UI form state:
    build_chat_request(form) -> ChatRequest      (or raises ValidationRefusal)
    ChatRequest.to_payload() -> dict             (wire keys, unset fields omitted)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from childcare_qa.config import DEFAULT_COST_QUERY
from childcare_qa.intents import Intent, intent_value, is_cost


class ValidationRefusal(ValueError):
    """Raised when the form cannot produce a request; nothing is sent."""

    pass


@dataclass
class CostFields:
    """Cost estimator form fields. Empty string means "no preference"."""

    county: str = ""
    county_fips: str = ""
    age: str = ""  # '', infant, toddler, preschool
    setting: str = ""  # '', center, family
    metric: str = "median"
    units: str = "weekly"


@dataclass
class FormState:
    """Everything the user has typed or selected in the chat header/footer."""

    query: str = ""
    region: str = "PA"
    intent: Union[Intent, str] = Intent.LOOKUP_RULE
    cost: CostFields = field(default_factory=CostFields)


class ChatRequest(BaseModel):
    """Body of POST /chat. Field aliases are the backend's wire keys."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    query: str
    region: str = Field(..., serialization_alias="state")
    intent: str
    county: Optional[str] = None
    county_fips: Optional[str] = Field(None, serialization_alias="countyFips")
    age: Optional[str] = None
    setting: Optional[str] = None
    metric: Optional[Literal["median", "p75"]] = None
    units: Optional[Literal["weekly", "monthly"]] = None

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


def normalize_region(value: Optional[str]) -> str:
    """Uppercase two-letter region code. No allow-list; the backend may reject."""
    region = (value or "").strip().upper()[:2]
    if len(region) != 2:
        raise ValidationRefusal(f"Region must be a 2-letter code, got {value!r}")
    return region


def resolve_query(free_text: Optional[str], intent: Union[Intent, str, None]) -> str:
    q = (free_text or "").strip()
    if not q and is_cost(intent):
        return DEFAULT_COST_QUERY
    return q


def can_submit(free_text: Optional[str], intent: Union[Intent, str, None], loading: bool = False) -> bool:
    """Send-button rule: disabled while loading or when a non-cost query is empty."""
    if loading:
        return False
    return bool((free_text or "").strip()) or is_cost(intent)


def _sparse(value: Optional[str]) -> Optional[str]:
    # Falsy form values are omitted from the payload, never sent as ""
    if value is None:
        return None
    text = str(value)
    return text if text.strip() else None


def build_chat_request(form: FormState) -> ChatRequest:
    """Map the current form state to a single /chat request.

    For COST, county and county FIPS are both forwarded as given; the backend
    applies "FIPS wins" when both are present.
    """
    q = resolve_query(form.query, form.intent)
    if not q:
        raise ValidationRefusal("Please enter a question.")

    fields: Dict[str, Any] = {
        "query": q,
        "region": normalize_region(form.region),
        "intent": intent_value(form.intent),
    }
    if is_cost(form.intent):
        c = form.cost or CostFields()
        fields.update(
            county=_sparse(c.county),
            county_fips=_sparse(c.county_fips),
            age=_sparse(c.age),
            setting=_sparse(c.setting),
            metric=_sparse(c.metric),
            units=_sparse(c.units),
        )
    try:
        return ChatRequest(**fields)
    except ValueError as e:
        # pydantic.ValidationError subclasses ValueError
        raise ValidationRefusal(str(e)) from e
