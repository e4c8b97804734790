"""
Projections from a normalized Message to display-ready rows.

All functions here are pure and tolerate partially filled payloads:
    project_providers(providers)          -> [ProviderRow]   (input order)
    project_cost(cost)                    -> CostTable       (grouped by setting)
    project_clarifying_questions(questions) -> [str]         (numbered, input order)
    project_citations(citations)          -> [str]
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from childcare_qa.config import AGE_GROUP_FALLBACK_RANK, AGE_GROUP_ORDER, COST_DATASET_LABEL, EMPTY_CELL
from childcare_qa.formatting import format_address, format_cell, format_date
from childcare_qa.messages import Citation, CostAnswer, CostData, Provider

CLARIFYING_HEADER = "To check eligibility, please answer:"


# ---------------- providers ----------------


@dataclass(frozen=True)
class ProviderRow:
    name: str
    display_address: str
    license_type: str
    qris_rating: str
    license_status: str
    display_date: str
    source_url: Optional[str]


PROVIDER_COLUMNS = ("Name", "Address", "Type", "QRIS", "Status", "Last Seen", "Source")


def project_provider(p: Provider) -> ProviderRow:
    return ProviderRow(
        name=p.name or EMPTY_CELL,
        display_address=format_address(p.address, p.city, p.zip),
        license_type=format_cell(p.license_type),
        qris_rating=format_cell(p.qris_rating),
        license_status=format_cell(p.license_status),
        display_date=format_date(p.last_seen),
        source_url=p.source_url or None,
    )


def project_providers(providers: Optional[Iterable[Provider]]) -> List[ProviderRow]:
    """One row per provider, same order, duplicates kept."""
    return [project_provider(p) for p in providers or ()]


# ---------------- cost ----------------


@dataclass(frozen=True)
class CostRow:
    age_group: str
    weekly_median: str
    weekly_p75: str
    monthly_median: str
    monthly_p75: str


@dataclass(frozen=True)
class CostGroup:
    setting: str
    title: str
    rows: Tuple[CostRow, ...]


@dataclass(frozen=True)
class CostTable:
    header: str
    groups: Tuple[CostGroup, ...]
    notes: Tuple[str, ...]
    citations: Tuple[str, ...]


COST_COLUMNS = ("Age Group", "Weekly Median", "Weekly P75", "Monthly Median", "Monthly P75")


def age_rank(age_group: str) -> int:
    return AGE_GROUP_ORDER.get(age_group, AGE_GROUP_FALLBACK_RANK)


def group_by_setting(answers: Sequence[CostAnswer]) -> Dict[str, List[CostAnswer]]:
    """Dict keyed by setting; key order is first occurrence in `answers`."""
    groups: Dict[str, List[CostAnswer]] = {}
    for a in answers:
        groups.setdefault(a.setting, []).append(a)
    return groups


def _cost_row(a: CostAnswer) -> CostRow:
    return CostRow(
        age_group=a.age_group,
        weekly_median=format_cell(a.weekly.median),
        weekly_p75=format_cell(a.weekly.p75),
        monthly_median=format_cell(a.monthly.median),
        monthly_p75=format_cell(a.monthly.p75),
    )


def project_cost(cost: CostData) -> CostTable:
    groups = []
    for setting, answers in group_by_setting(cost.answers).items():
        # sorted() is stable, so equal ranks keep backend order
        ordered = sorted(answers, key=lambda a: age_rank(a.age_group))
        groups.append(
            CostGroup(
                setting=setting,
                title=f"{setting.capitalize()} prices ({COST_DATASET_LABEL})",
                rows=tuple(_cost_row(a) for a in ordered),
            )
        )
    header = f"County: {cost.county} ({cost.county_fips}) • State: {cost.state}"
    return CostTable(
        header=header,
        groups=tuple(groups),
        notes=tuple(n for n in cost.notes if n),
        citations=tuple(c for c in cost.citations if c),
    )


# ---------------- clarifying questions / citations ----------------


def project_clarifying_questions(questions: Optional[Sequence[str]]) -> List[str]:
    """Numbered questions in backend order; empty when there are none."""
    return [f"{i}. {q}" for i, q in enumerate(questions or (), 1)]


def format_citation(c: Citation) -> str:
    parts = [p for p in (c.title, c.url) if p]
    return " – ".join(parts)


def project_citations(citations: Iterable[Citation]) -> List[str]:
    return [s for s in (format_citation(c) for c in citations or ()) if s]
