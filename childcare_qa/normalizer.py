"""
Response normalization.

The backend reply is untyped JSON. This module is the only place that
interprets its shape; everything downstream works on `Message` values.

Classification priority (first match wins):
    Answer  - `answer` non-empty or `data` truthy (`data` kept as sent)
    Raw     - `raw` truthy
    Error   - anything else
Transport failures never reach `normalize_response`; they become a Network
message through `network_error_message`.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Dict, List, Optional, Tuple

from childcare_qa.intents import is_cost
from childcare_qa.messages import (
    Citation,
    ClarifyingQuestions,
    CostAnswer,
    CostData,
    CostQueryEcho,
    DataPayload,
    GenericData,
    Message,
    Outcome,
    PricePair,
    Provider,
    Role,
)

logger = logging.getLogger(__name__)

GENERIC_ANSWER = "Here you go:"
UNKNOWN_ERROR = "Unknown error"
ERROR_PREFIX = "Sorry—something went wrong."


# ---------------- defensive field readers ----------------


def as_mapping(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def opt_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return None


def _str(value: Any) -> str:
    return opt_str(value) or ""


def as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    return None


def _str_list(value: Any) -> Tuple[str, ...]:
    if not isinstance(value, list):
        return ()
    return tuple(s for s in (opt_str(v) for v in value) if s is not None)


def _text(value: Any) -> str:
    return value if isinstance(value, str) else str(value)


# ---------------- sub-payload parsers ----------------


def parse_citations(value: Any) -> Tuple[Citation, ...]:
    out: List[Citation] = []
    for item in value if isinstance(value, list) else []:
        if isinstance(item, dict):
            out.append(Citation(title=opt_str(item.get("title")), url=opt_str(item.get("url"))))
        elif isinstance(item, str) and item:
            out.append(Citation(title=item))
    return tuple(out)


def parse_provider(item: Dict[str, Any]) -> Provider:
    return Provider(
        name=_str(item.get("name")),
        address=opt_str(item.get("address")),
        city=opt_str(item.get("city")),
        zip=opt_str(item.get("zip")),
        license_type=opt_str(item.get("license_type")),
        license_status=opt_str(item.get("license_status")),
        qris_rating=opt_str(item.get("qris_rating")),
        source_url=opt_str(item.get("source_url")),
        last_seen=opt_str(item.get("last_seen")),
    )


def parse_providers(value: Any) -> Optional[Tuple[Provider, ...]]:
    """Providers are attached only when the backend sent a list."""
    if not isinstance(value, list):
        return None
    return tuple(parse_provider(p) for p in value if isinstance(p, dict))


def _prices(value: Any) -> PricePair:
    m = as_mapping(value)
    return PricePair(median=as_number(m.get("median")), p75=as_number(m.get("p75")))


def parse_cost_data(data: Dict[str, Any]) -> CostData:
    answers = tuple(
        CostAnswer(
            age_group=_str(a.get("age_group")),
            setting=_str(a.get("setting")),
            weekly=_prices(a.get("weekly")),
            monthly=_prices(a.get("monthly")),
        )
        for a in data.get("answers") or []
        if isinstance(a, dict)
    )
    queries = tuple(
        CostQueryEcho(
            age_group=_str(q.get("age_group")),
            setting=_str(q.get("setting")),
            metric=_str(q.get("metric")),
            units=_str(q.get("units")),
        )
        for q in (data.get("queries") if isinstance(data.get("queries"), list) else [])
        if isinstance(q, dict)
    )
    return CostData(
        state=_str(data.get("state")),
        county_fips=_str(data.get("county_fips")),
        county=_str(data.get("county")),
        queries=queries,
        answers=answers,
        notes=_str_list(data.get("notes")),
        citations=_str_list(data.get("citations")),
        clarifying_questions=_str_list(data.get("clarifying_questions")),
    )


def classify_data(data: Any) -> DataPayload:
    """Turn the opaque `data` value into the closed payload union."""
    if not isinstance(data, dict):
        return None
    if isinstance(data.get("answers"), list):
        return parse_cost_data(data)
    if isinstance(data.get("clarifying_questions"), list):
        return ClarifyingQuestions(questions=_str_list(data["clarifying_questions"]))
    if data:
        return GenericData(keys=tuple(str(k) for k in data))
    return None


# ---------------- public API ----------------


def _answer_content(obj: Dict[str, Any]) -> str:
    answer = obj.get("answer")
    if answer:
        return _text(answer)
    if is_cost(opt_str(obj.get("intent"))):
        d = as_mapping(obj.get("data"))
        county = opt_str(d.get("county")) or "unknown county"
        state = opt_str(d.get("state")) or "unknown state"
        return f"Estimated childcare prices for {county}, {state}"
    return GENERIC_ANSWER


def normalize_response(obj: Any) -> Message:
    """Map a decoded backend reply to exactly one assistant Message."""
    if not isinstance(obj, dict):
        logger.warning("Backend reply is not an object (%s); treating as empty", type(obj).__name__)
        obj = {}

    if obj.get("answer") or obj.get("data"):
        data = obj.get("data")
        data = None if data is None else copy.deepcopy(data)
        return Message(
            role=Role.ASSISTANT,
            content=_answer_content(obj),
            citations=parse_citations(obj.get("citations")),
            providers=parse_providers(obj.get("providers")),
            data=data,
            payload=classify_data(data),
            outcome=Outcome.ANSWER,
        )

    if obj.get("raw"):
        return Message(role=Role.ASSISTANT, content=_text(obj["raw"]), outcome=Outcome.RAW)

    error = obj.get("error")
    detail = UNKNOWN_ERROR if error is None else _text(error)
    return Message(
        role=Role.ASSISTANT,
        content=f"{ERROR_PREFIX}\n\n{detail}",
        outcome=Outcome.ERROR,
    )


def network_error_message(exc: BaseException) -> Message:
    """Assistant message for a failed round trip (unreachable, timeout, bad JSON)."""
    detail = str(exc) or type(exc).__name__
    return Message(role=Role.ASSISTANT, content=f"Network error: {detail}", outcome=Outcome.NETWORK)
