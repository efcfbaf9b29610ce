import io
from datetime import date, datetime

import pandas as pd
import pytest

import utils

pytestmark = pytest.mark.unit


def test_as_date():
    assert utils.as_date(datetime(2024, 1, 22, 23, 59)) == date(2024, 1, 22)
    assert utils.as_date(date(2024, 1, 22)) == date(2024, 1, 22)
    assert utils.parse_iso("2024-01-22") == date(2024, 1, 22)


def test_students_csv(repo):
    df = pd.read_csv(io.BytesIO(utils.students_to_csv_bytes(repo.students)))
    assert list(df["id"]) == ["student1", "student2", "student3", "student4"]
    assert list(df["plan_price"]) == [180.0, 120.0, 250.0, 180.0]
    assert list(df["payment_status"]) == ["active", "active", "overdue", "active"]


def test_payments_csv(repo):
    df = pd.read_csv(io.BytesIO(utils.payments_to_csv_bytes(repo.payments)))
    assert len(df) == 4
    assert list(df["status"]) == ["paid", "paid", "pending", "paid"]
    assert df["paid_date"].isna().sum() == 1


def test_empty_exports_keep_headers():
    assert utils.students_to_csv_bytes([]).decode().startswith("id,name,email")
    assert utils.payments_to_csv_bytes([]).decode().startswith("id,student_id,amount")


def test_revenue_summary_by_month(repo):
    df = utils.revenue_summary_by_month(repo.payments)
    assert df.to_dict("records") == [{"month": "2024-01", "revenue": 480.0}]


def test_revenue_summary_without_payments():
    df = utils.revenue_summary_by_month([])
    assert df.empty
    assert list(df.columns) == ["month", "revenue"]


def test_revenue_by_month_of_current_year(repo, now):
    df = utils.revenue_by_period(repo.payments, now, "month")
    assert len(df) == 12
    assert df.iloc[0].to_dict() == {"label": "2024-01", "revenue": 480.0}
    assert df["revenue"].sum() == 480.0


def test_revenue_by_week(repo, now):
    # last 7 days before 2024-01-22: Jan 16..22, only the Jan 18 payment
    df = utils.revenue_by_period(repo.payments, now, "week")
    assert len(df) == 7
    assert df["label"].iloc[-1] == "Mon"
    assert df["revenue"].sum() == 120.0


def test_revenue_by_year(repo, now):
    df = utils.revenue_by_period(repo.payments, now, "year")
    assert df.to_dict("records") == [{"label": "2024", "revenue": 480.0}]
    assert utils.revenue_by_period([], now, "year").empty


def test_revenue_by_unknown_period(repo, now):
    with pytest.raises(ValueError):
        utils.revenue_by_period(repo.payments, now, "decade")


def test_today_iso_helper_is_gone():
    assert not hasattr(utils, "today_iso")
