from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, tzinfo
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List, Optional, Tuple

from finance_tracker.models.category import Category
from finance_tracker.models.expense import ExpenseRecord
from finance_tracker.utils.dates import (
    days_in_month,
    local_day,
    shift_month,
    start_of_month,
    start_of_week,
)

ZERO = Decimal("0")
HUNDRED = Decimal("100")
WEEKDAY_LABELS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
MONTH_LABELS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]
SERIES_PERIODS = ("week", "month", "year")


def parse_amount(raw: Any) -> Optional[Decimal]:
    """Parse an amount as an exact decimal, or None when it is not a finite number."""
    try:
        amount = Decimal(str(raw).strip())
    except (InvalidOperation, ValueError):
        return None
    return amount if amount.is_finite() else None


def calculate_change(current: Any, previous: Any) -> Optional[float]:
    """
    Percentage change from ``previous`` to ``current``.

    A zero previous window gives 0 when the current one is also zero and
    None (indeterminate) otherwise. Never returns NaN or infinity.
    """
    if previous == 0:
        return 0.0 if current == 0 else None
    delta = float((Decimal(current) - Decimal(previous)) / Decimal(previous) * HUNDRED)
    return delta if math.isfinite(delta) else None


@dataclass(frozen=True)
class SummaryWindows:
    """Start-of-day boundaries anchoring every summary window."""

    today: date
    start_of_month: date
    start_of_previous_month: date
    start_of_current_week: date
    start_of_previous_week: date
    start_of_last_30_days: date
    start_of_previous_30_days: date

    @classmethod
    def anchored_at(cls, reference: datetime) -> "SummaryWindows":
        today = local_day(reference, reference.tzinfo)
        month_start = start_of_month(today)
        week_start = start_of_week(today)
        last_30_start = today - timedelta(days=29)
        return cls(
            today=today,
            start_of_month=month_start,
            start_of_previous_month=shift_month(month_start, -1),
            start_of_current_week=week_start,
            start_of_previous_week=week_start - timedelta(days=7),
            start_of_last_30_days=last_30_start,
            start_of_previous_30_days=last_30_start - timedelta(days=30),
        )


@dataclass
class SummaryResult:
    total: Decimal = ZERO
    monthly: Decimal = ZERO
    previous_month: Decimal = ZERO
    monthly_change: Optional[float] = 0.0
    weekly: Decimal = ZERO
    previous_week: Decimal = ZERO
    weekly_change: Optional[float] = 0.0
    last_30_days: Decimal = ZERO
    previous_30_days: Decimal = ZERO
    last_30_days_change: Optional[float] = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": float(self.total),
            "monthly": float(self.monthly),
            "previousMonth": float(self.previous_month),
            "monthlyChange": self.monthly_change,
            "weekly": float(self.weekly),
            "previousWeek": float(self.previous_week),
            "weeklyChange": self.weekly_change,
            "last30Days": float(self.last_30_days),
            "previous30Days": float(self.previous_30_days),
            "last30DaysChange": self.last_30_days_change,
        }


@dataclass
class CategoryBreakdownEntry:
    category: Category
    amount: Decimal
    percentage: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category.model_dump(),
            "amount": float(self.amount),
            "percentage": self.percentage,
        }


@dataclass
class SeriesPoint:
    date: date
    label: str
    amount: Decimal = ZERO

    def to_dict(self) -> Dict[str, Any]:
        return {"date": self.date.isoformat(), "label": self.label, "amount": float(self.amount)}


@dataclass
class SpendingSeries:
    period: str
    points: List[SeriesPoint] = field(default_factory=list)

    @property
    def total(self) -> Decimal:
        return sum((point.amount for point in self.points), ZERO)

    @property
    def average(self) -> Decimal:
        if not self.points or not any(point.amount > 0 for point in self.points):
            return ZERO
        return self.total / len(self.points)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "period": self.period,
            "points": [point.to_dict() for point in self.points],
            "total": float(self.total),
            "average": round(float(self.average), 2),
        }


class ExpenseAnalyzer:
    """
    Pure aggregation over a snapshot of expense records.

    Every operation takes the full snapshot and recomputes from scratch; the
    reference instant is always passed in, never read from the clock, so the
    same inputs always give the same output.
    """

    def __init__(self, include_uncategorized_in_total: bool = True) -> None:
        self._include_uncategorized = include_uncategorized_in_total

    @staticmethod
    def _parsed(records: Iterable[ExpenseRecord]) -> Iterable[Tuple[ExpenseRecord, Decimal]]:
        # Unparsable amounts are legacy data: skipped, not an error.
        for record in records:
            amount = parse_amount(record.amount)
            if amount is not None:
                yield record, amount

    def compute_summary(self, records: Iterable[ExpenseRecord], reference: datetime) -> SummaryResult:
        windows = SummaryWindows.anchored_at(reference)
        tz = reference.tzinfo
        result = SummaryResult()

        for record, amount in self._parsed(records):
            day = local_day(record.date, tz)
            result.total += amount

            if day >= windows.start_of_month:
                result.monthly += amount
            elif windows.start_of_previous_month <= day < windows.start_of_month:
                result.previous_month += amount

            if day >= windows.start_of_current_week:
                result.weekly += amount
            elif windows.start_of_previous_week <= day < windows.start_of_current_week:
                result.previous_week += amount

            if day >= windows.start_of_last_30_days:
                result.last_30_days += amount
            elif windows.start_of_previous_30_days <= day < windows.start_of_last_30_days:
                result.previous_30_days += amount

        result.monthly_change = calculate_change(result.monthly, result.previous_month)
        result.weekly_change = calculate_change(result.weekly, result.previous_week)
        result.last_30_days_change = calculate_change(result.last_30_days, result.previous_30_days)
        return result

    def compute_category_breakdown(self, records: Iterable[ExpenseRecord]) -> List[CategoryBreakdownEntry]:
        buckets: Dict[str, CategoryBreakdownEntry] = {}
        grand_total = ZERO

        for record, amount in self._parsed(records):
            category = record.category
            if category is None:
                if self._include_uncategorized:
                    grand_total += amount
                continue

            grand_total += amount
            entry = buckets.get(category.id)
            if entry is None:
                buckets[category.id] = CategoryBreakdownEntry(category=category, amount=amount)
            else:
                entry.amount += amount

        for entry in buckets.values():
            entry.percentage = float(entry.amount / grand_total * HUNDRED) if grand_total > 0 else 0.0

        # sorted() is stable, so equal amounts keep encounter order
        return sorted(buckets.values(), key=lambda entry: entry.amount, reverse=True)

    def monthly_trend(
        self,
        records: Iterable[ExpenseRecord],
        reference: datetime,
        months: int = 6,
    ) -> List[Dict[str, Any]]:
        """Totals for the ``months`` calendar months ending with the reference month."""
        tz = reference.tzinfo
        current = start_of_month(local_day(reference, tz))
        starts = [shift_month(current, offset) for offset in range(-(months - 1), 1)]
        totals: Dict[date, Decimal] = {start: ZERO for start in starts}

        for record, amount in self._parsed(records):
            key = start_of_month(local_day(record.date, tz))
            if key in totals:
                totals[key] += amount

        return [
            {
                "month": start.strftime("%Y-%m"),
                "label": MONTH_LABELS[start.month - 1],
                "amount": round(float(totals[start]), 2),
            }
            for start in starts
        ]

    def weekday_spending(
        self,
        records: Iterable[ExpenseRecord],
        tz: Optional[tzinfo] = None,
    ) -> List[Dict[str, Any]]:
        totals = [ZERO] * 7
        for record, amount in self._parsed(records):
            totals[local_day(record.date, tz).weekday()] += amount
        return [
            {"day": label, "amount": round(float(total), 2)}
            for label, total in zip(WEEKDAY_LABELS, totals)
        ]

    def spending_series(
        self,
        records: Iterable[ExpenseRecord],
        reference: datetime,
        period: str = "month",
    ) -> SpendingSeries:
        """Daily points for a week or month, monthly points for a year."""
        if period not in SERIES_PERIODS:
            raise ValueError(f"Unknown series period: {period}")

        tz = reference.tzinfo
        today = local_day(reference, tz)

        if period == "year":
            points = [
                SeriesPoint(date=date(today.year, index + 1, 1), label=label)
                for index, label in enumerate(MONTH_LABELS)
            ]
            bucket_of = start_of_month
        else:
            if period == "week":
                first, count = start_of_week(today), 7
            else:
                first, count = start_of_month(today), days_in_month(today)
            points = []
            for offset in range(count):
                day = first + timedelta(days=offset)
                label = WEEKDAY_LABELS[day.weekday()] if period == "week" else f"{MONTH_LABELS[day.month - 1]} {day.day}"
                points.append(SeriesPoint(date=day, label=label))
            bucket_of = None

        by_key = {point.date: point for point in points}
        for record, amount in self._parsed(records):
            day = local_day(record.date, tz)
            point = by_key.get(bucket_of(day) if bucket_of else day)
            if point is not None:
                point.amount += amount
        return SpendingSeries(period=period, points=points)

    def overview(self, records: Iterable[ExpenseRecord], reference: datetime) -> Dict[str, Any]:
        tz = reference.tzinfo
        today = local_day(reference, tz)
        month_start = start_of_month(today)

        count = 0
        total = ZERO
        monthly = ZERO
        highest: Optional[Tuple[ExpenseRecord, Decimal]] = None

        for record, amount in self._parsed(records):
            count += 1
            total += amount
            if local_day(record.date, tz) >= month_start:
                monthly += amount
            if highest is None or amount > highest[1]:
                highest = (record, amount)

        days_elapsed = max(1, (today - month_start).days + 1)
        highest_expense = None
        if highest is not None:
            record, amount = highest
            highest_expense = {
                "amount": float(amount),
                "description": record.description.strip() or None,
                "category": record.category.name if record.category else None,
                "date": record.date.isoformat(),
            }

        return {
            "transactionCount": count,
            "total": float(total),
            "averageTransaction": round(float(total / count), 2) if count else 0.0,
            "highestExpense": highest_expense,
            "averagePerDayThisMonth": round(float(monthly / days_elapsed), 2) if monthly > 0 else 0.0,
        }
