"""
Direct cost estimate against POST /api/cost.

This is the standalone estimator form: a single structured question
(state, optional county, age group, setting, metric, units) answered with a
primary value and the matching county rows.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, field_validator

from childcare_qa.client import ChildcareAPIClient
from childcare_qa.config import EMPTY_CELL
from childcare_qa.formatting import format_cell
from childcare_qa.normalizer import as_mapping, as_number, opt_str
from childcare_qa.request_builder import ValidationRefusal

logger = logging.getLogger(__name__)

STATE_AVERAGE_LABEL = "State Avg"
REQUEST_FAILED = "Request failed"


class CostEstimateError(Exception):
    """The estimate could not be produced; message is shown inline under the form."""

    pass


class CostEstimateForm(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    state: str = "PA"
    county: str = ""  # free text, fuzzy-matched by the backend
    age_group: Literal["infant", "toddler", "preschool", "school-age", "mixed"] = "infant"
    setting: Literal["center", "family"] = "center"
    metric: Literal["median", "p75"] = "median"
    units: Literal["monthly", "weekly"] = "monthly"

    @field_validator("state")
    @classmethod
    def _two_letter_state(cls, v: str) -> str:
        return (v or "").strip().upper()[:2]

    def to_payload(self) -> Dict[str, Any]:
        payload = self.model_dump()
        county = self.county.strip()
        if county:
            payload["county"] = county
        else:
            payload.pop("county")
        return payload


@dataclass(frozen=True)
class CostEstimateRow:
    county: Optional[str]
    median: Optional[float]
    p75: Optional[float]
    units: str


@dataclass(frozen=True)
class CostEstimate:
    message: str
    primary_value: Optional[float]
    rows: Tuple[CostEstimateRow, ...]

    @property
    def has_answer(self) -> bool:
        return self.primary_value is not None

    @property
    def shows_rows(self) -> bool:
        # a single row is already the primary answer
        return len(self.rows) > 1


def parse_estimate(body: Any) -> CostEstimate:
    body = as_mapping(body)
    result = as_mapping(body.get("result"))
    rows = []
    for r in result.get("rows") if isinstance(result.get("rows"), list) else []:
        if not isinstance(r, dict):
            continue
        values = as_mapping(r.get("metric_values"))
        rows.append(
            CostEstimateRow(
                county=opt_str(r.get("county")),
                median=as_number(values.get("median")),
                p75=as_number(values.get("p75")),
                units=opt_str(r.get("units")) or "",
            )
        )
    return CostEstimate(
        message=opt_str(body.get("message")) or "",
        primary_value=as_number(result.get("primary_value")),
        rows=tuple(rows),
    )


def project_estimate_rows(estimate: CostEstimate) -> List[Tuple[str, str, str, str]]:
    """(county, median, p75, units) cells; rows without a county are the state average."""
    if not estimate.shows_rows:
        return []
    return [
        (r.county or STATE_AVERAGE_LABEL, format_cell(r.median), format_cell(r.p75), r.units or EMPTY_CELL)
        for r in estimate.rows
    ]


def estimate_cost(form: CostEstimateForm, client: Optional[ChildcareAPIClient] = None) -> CostEstimate:
    """Run the estimate. Transport failures propagate as TransportFailure."""
    if len(form.state) != 2:
        raise ValidationRefusal("State must be a 2-letter code")
    client = client or ChildcareAPIClient()
    status, body = client.cost(form.to_payload())
    b = as_mapping(body)
    if not (200 <= status < 300) or b.get("ok") is False:
        error = opt_str(b.get("error")) or REQUEST_FAILED
        logger.info("cost estimate failed (status %s): %s", status, error)
        raise CostEstimateError(error)
    return parse_estimate(b)
