"""
utils.py
Dates, CSV exports, revenue summaries.
"""

from __future__ import annotations

from dataclasses import asdict
from datetime import date, datetime, timedelta
from typing import Iterable

import pandas as pd

from models import Payment, PaymentState, Student

PERIODS = ("week", "month", "year")
WEEKDAY_LABELS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]


def parse_iso(d: str) -> date:
    return date.fromisoformat(d)


def as_date(value: datetime | date) -> date:
    # datetime is a subclass of date, check it first
    if isinstance(value, datetime):
        return value.date()
    return value


def students_to_frame(students: Iterable[Student]) -> pd.DataFrame:
    rows = []
    for s in students:
        rows.append(
            {
                "id": s.id,
                "name": s.name,
                "email": s.email,
                "phone": s.phone,
                "plan": s.plan.name,
                "plan_price": float(s.plan.price),
                "payment_status": s.payment_status.value,
                "due_date": s.due_date.isoformat(),
                "points": s.points,
                "level": s.level.value,
                "fight_style": s.fight_style,
                "weight": s.weight,
                "category": s.category,
                "trainer_id": s.trainer_id,
            }
        )
    return pd.DataFrame(rows, columns=[
        "id", "name", "email", "phone", "plan", "plan_price", "payment_status", "due_date",
        "points", "level", "fight_style", "weight", "category", "trainer_id",
    ])


def payments_to_frame(payments: Iterable[Payment]) -> pd.DataFrame:
    rows = []
    for p in payments:
        row = asdict(p)
        row["amount"] = float(p.amount)
        row["method"] = p.method.value
        row["status"] = p.status.value
        rows.append(row)
    return pd.DataFrame(rows, columns=[
        "id", "student_id", "amount", "method", "status", "due_date", "plan_id", "paid_date",
    ])


def students_to_csv_bytes(students: Iterable[Student]) -> bytes:
    return students_to_frame(students).to_csv(index=False).encode("utf-8")


def payments_to_csv_bytes(payments: Iterable[Payment]) -> bytes:
    return payments_to_frame(payments).to_csv(index=False).encode("utf-8")


def _paid_frame(payments: Iterable[Payment]) -> pd.DataFrame:
    """
    Paid payments with the date they count for (paid date, else due date).
    """
    rows = [
        {"date": pd.Timestamp(p.paid_date or p.due_date), "amount": float(p.amount)}
        for p in payments
        if p.status is PaymentState.PAID
    ]
    return pd.DataFrame(rows, columns=["date", "amount"])


def revenue_summary_by_month(payments: Iterable[Payment]) -> pd.DataFrame:
    df = _paid_frame(payments)
    if df.empty:
        return pd.DataFrame(columns=["month", "revenue"])
    df["month"] = df["date"].dt.strftime("%Y-%m")
    out = df.groupby("month", as_index=False)["amount"].sum()
    out = out.rename(columns={"amount": "revenue"})
    return out.sort_values("month", ascending=False).reset_index(drop=True)


def revenue_by_period(payments: Iterable[Payment], now: datetime | date, period: str = "month") -> pd.DataFrame:
    """
    Paid revenue for chart display.
    - week: one row per weekday of the last 7 days (ending today)
    - month: one row per month of the current year
    - year: one row per year that has revenue
    """
    if period not in PERIODS:
        raise ValueError(f"period must be one of {PERIODS}, got {period!r}")

    today = as_date(now)
    df = _paid_frame(payments)

    if period == "week":
        days = [today - timedelta(days=i) for i in range(6, -1, -1)]
        totals = {d: 0.0 for d in days}
        for ts, amount in zip(df["date"], df["amount"]):
            d = ts.date()
            if d in totals:
                totals[d] += amount
        return pd.DataFrame(
            {"label": [WEEKDAY_LABELS[d.weekday()] for d in days], "revenue": list(totals.values())}
        )

    if period == "month":
        by_month = {m: 0.0 for m in range(1, 13)}
        current = df[df["date"].dt.year == today.year] if not df.empty else df
        for ts, amount in zip(current["date"], current["amount"]):
            by_month[ts.month] += amount
        return pd.DataFrame(
            {"label": [f"{today.year}-{m:02d}" for m in by_month], "revenue": list(by_month.values())}
        )

    if df.empty:
        return pd.DataFrame(columns=["label", "revenue"])
    df["label"] = df["date"].dt.year.astype(str)
    out = df.groupby("label", as_index=False)["amount"].sum()
    return out.rename(columns={"amount": "revenue"}).sort_values("label").reset_index(drop=True)
