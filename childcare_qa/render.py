"""Plain-text rendering of messages and their projections."""

from __future__ import annotations

from typing import List, Sequence

from childcare_qa.config import EMPTY_CELL
from childcare_qa.cost_estimator import CostEstimate, project_estimate_rows
from childcare_qa.messages import Message
from childcare_qa.projections import (
    CLARIFYING_HEADER,
    COST_COLUMNS,
    PROVIDER_COLUMNS,
    CostTable,
    ProviderRow,
    project_citations,
    project_clarifying_questions,
    project_cost,
    project_providers,
)


def _table(header: Sequence[str], rows: Sequence[Sequence[str]]) -> List[str]:
    widths = [len(h) for h in header]
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(cell))

    def line(cells: Sequence[str]) -> str:
        return " | ".join(c.ljust(w) for c, w in zip(cells, widths)).rstrip()

    out = [line(header), "-+-".join("-" * w for w in widths)]
    out.extend(line(r) for r in rows)
    return out


def render_providers(rows: Sequence[ProviderRow]) -> List[str]:
    if not rows:
        return []
    cells = [
        (
            r.name,
            r.display_address,
            r.license_type,
            r.qris_rating,
            r.license_status,
            r.display_date,
            r.source_url or EMPTY_CELL,
        )
        for r in rows
    ]
    return _table(PROVIDER_COLUMNS, cells)


def render_cost(table: CostTable) -> List[str]:
    lines = [table.header]
    for g in table.groups:
        lines.append("")
        lines.append(g.title)
        lines.extend(
            _table(
                COST_COLUMNS,
                [
                    (r.age_group.capitalize(), r.weekly_median, r.weekly_p75, r.monthly_median, r.monthly_p75)
                    for r in g.rows
                ],
            )
        )
    if table.notes:
        lines.append("")
        lines.extend(f"• {n}" for n in table.notes)
    if table.citations:
        lines.append("")
        lines.append("Sources")
        lines.extend(f"- {c}" for c in table.citations)
    return lines


def render_message(message: Message) -> str:
    """Role line, content, then whichever projections the message carries."""
    lines: List[str] = [message.role.value, message.content]

    providers = project_providers(message.providers)
    if providers:
        lines.append("")
        lines.extend(render_providers(providers))

    questions = project_clarifying_questions(message.clarifying_questions)
    if questions:
        lines.append("")
        lines.append(CLARIFYING_HEADER)
        lines.extend(questions)

    if message.cost is not None:
        lines.append("")
        lines.extend(render_cost(project_cost(message.cost)))

    citations = project_citations(message.citations)
    if citations:
        lines.append("")
        lines.append("Citations")
        lines.extend(f"- {c}" for c in citations)

    return "\n".join(lines)


def render_transcript(messages: Sequence[Message]) -> str:
    return "\n\n".join(render_message(m) for m in messages)


def render_estimate(estimate: CostEstimate) -> str:
    lines: List[str] = []
    if estimate.has_answer:
        lines.append("Answer")
        lines.append(estimate.message)
    rows = project_estimate_rows(estimate)
    if rows:
        if lines:
            lines.append("")
        lines.append("Matching rows")
        lines.extend(_table(("County", "Median", "P75", "Units"), rows))
    return "\n".join(lines)
