"""Budget and overreach statistics per caller.

A call with ``cost == 0`` was covered by the caller's budget allotment; any
positive cost is overreach. The comparison runs in SQL against the
``NUMERIC`` column, so it is an exact decimal test.
"""

from decimal import Decimal
from typing import List

from sqlalchemy import Numeric, case, func, literal, type_coerce
from sqlalchemy.orm import Session

from callspend.models import CallRecord
from callspend.schemas import SpendingSummary

ZERO = Decimal("0.00")


def _overreach_cost():
    return type_coerce(
        func.coalesce(
            func.sum(case((CallRecord.cost > 0, CallRecord.cost), else_=literal(0))),
            0,
        ),
        Numeric(12, 2),
    ).label("overreach_cost")


def _budget_covered_calls():
    return func.sum(case((CallRecord.cost == 0, 1), else_=0)).label("budget_covered_calls")


def _budget_minutes():
    return func.sum(case((CallRecord.cost == 0, CallRecord.duration), else_=0)).label(
        "budget_minutes"
    )


def _as_cost(value) -> Decimal:
    if value is None:
        return ZERO
    return Decimal(value).quantize(ZERO)


def aggregate_all(db: Session) -> List[SpendingSummary]:
    overreach = _overreach_cost()
    rows = (
        db.query(
            CallRecord.caller,
            overreach,
            _budget_covered_calls(),
            func.count(CallRecord.id).label("total_calls"),
        )
        .group_by(CallRecord.caller)
        .order_by(overreach.desc(), CallRecord.caller.asc())
        .all()
    )
    return [
        SpendingSummary(
            caller=row.caller,
            overreach_cost=_as_cost(row.overreach_cost),
            budget_covered_calls=row.budget_covered_calls or 0,
            total_calls=row.total_calls,
        )
        for row in rows
    ]


def aggregate_by_upload(db: Session, upload_id: int, by_service: bool = False) -> List[SpendingSummary]:
    overreach = _overreach_cost()
    columns = [CallRecord.caller]
    if by_service:
        columns.append(CallRecord.service)
    rows = (
        db.query(
            *columns,
            overreach,
            _budget_covered_calls(),
            func.count(CallRecord.id).label("total_calls"),
            _budget_minutes(),
        )
        .filter(CallRecord.upload_id == upload_id)
        .group_by(*columns)
        .order_by(overreach.desc(), *[column.asc() for column in columns])
        .all()
    )
    return [
        SpendingSummary(
            caller=row.caller,
            service=row.service if by_service else None,
            overreach_cost=_as_cost(row.overreach_cost),
            budget_covered_calls=row.budget_covered_calls or 0,
            total_calls=row.total_calls,
            budget_minutes=row.budget_minutes or 0,
        )
        for row in rows
    ]
