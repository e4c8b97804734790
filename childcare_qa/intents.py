"""
Intent and region vocabulary shared by the request builder and the page host.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Union


class Intent(str, Enum):
    LOOKUP_RULE = "LOOKUP_RULE"
    LOOKUP_PROVIDER = "LOOKUP_PROVIDER"
    CHECK_ELIGIBILITY = "CHECK_ELIGIBILITY"
    COST = "COST"
    DOCUMENTATION = "DOCUMENTATION"


INTENT_LABELS: Dict[Intent, str] = {
    Intent.LOOKUP_RULE: "Lookup rule",
    Intent.LOOKUP_PROVIDER: "Find providers",
    Intent.CHECK_ELIGIBILITY: "Eligibility",
    Intent.COST: "Cost",
    Intent.DOCUMENTATION: "Docs",
}

# Regions offered in the header selector (the backend may accept others)
REGIONS: Dict[str, str] = {
    "PA": "Pennsylvania",
    "MA": "Massachusetts",
    "WV": "West Virginia",
}

_COST_PLACEHOLDER = "Optional: add notes (e.g., 'center toddler in Allegheny') then click Send"
_DEFAULT_PLACEHOLDER = "Ask a question about ratios, eligibility, etc."


def parse_intent(value: Union[str, Intent, None]) -> Union[Intent, str]:
    """Return the Intent member for value, or the raw string when unknown."""
    if isinstance(value, Intent):
        return value
    text = (value or "").strip().upper()
    try:
        return Intent(text)
    except ValueError:
        return text


def is_cost(value: Union[str, Intent, None]) -> bool:
    return parse_intent(value) is Intent.COST


def intent_value(value: Union[str, Intent, None]) -> str:
    intent = parse_intent(value)
    return intent.value if isinstance(intent, Intent) else intent


def input_placeholder(intent: Union[str, Intent, None]) -> str:
    return _COST_PLACEHOLDER if is_cost(intent) else _DEFAULT_PLACEHOLDER
