from datetime import datetime

from finance_tracker.models.expense import ExpenseInDB

at = {"at": "2025-06-10T12:00:00"}


def add(client, headers, category_id, amount, date):
    response = client.post(
        "/api/expenses",
        json={"amount": amount, "categoryId": category_id, "date": date},
        headers=headers,
    )
    assert response.status_code == 201


def test_summary_empty(client, auth_headers):
    response = client.get("/api/analytics/summary", params=at, headers=auth_headers)
    assert response.status_code == 200
    summary = response.json()
    assert summary["total"] == 0
    assert summary["monthlyChange"] == 0
    assert summary["weeklyChange"] == 0
    assert summary["last30DaysChange"] == 0


def test_summary_month_over_month(client, auth_headers, food_id):
    add(client, auth_headers, food_id, "100.00", "2025-06-05T12:00:00")
    add(client, auth_headers, food_id, "50.00", "2025-05-20T12:00:00")

    summary = client.get("/api/analytics/summary", params=at, headers=auth_headers).json()
    assert summary["total"] == 150
    assert summary["monthly"] == 100
    assert summary["previousMonth"] == 50
    assert summary["monthlyChange"] == 100
    assert summary["last30DaysChange"] is None


def test_summary_skips_legacy_rows(client, auth_headers, storage, food_id):
    storage.put_raw_expense(
        ExpenseInDB(amount="twelve", category_id=food_id, date=datetime(2025, 6, 9, 12, 0))
    )
    add(client, auth_headers, food_id, "8", "2025-06-09T12:00:00")

    summary = client.get("/api/analytics/summary", params=at, headers=auth_headers).json()
    assert summary["total"] == 8
    assert summary["weekly"] == 8


def test_category_breakdown(client, auth_headers, storage, food_id):
    transport_id = storage.get_category_by_name("Transport").id
    add(client, auth_headers, food_id, "30", "2025-06-01T12:00:00")
    add(client, auth_headers, transport_id, "70", "2025-06-02T12:00:00")

    breakdown = client.get("/api/analytics/categories", headers=auth_headers).json()
    assert [entry["category"]["name"] for entry in breakdown] == ["Transport", "Food & Dining"]
    assert breakdown[0]["percentage"] == 70
    assert breakdown[1]["amount"] == 30


def test_breakdown_counts_orphaned_expenses_in_total(client, auth_headers, storage, food_id):
    storage.put_raw_expense(
        ExpenseInDB(amount="50", category_id="deleted", date=datetime(2025, 6, 1, 12, 0))
    )
    add(client, auth_headers, food_id, "50", "2025-06-01T12:00:00")

    breakdown = client.get("/api/analytics/categories", headers=auth_headers).json()
    assert len(breakdown) == 1
    assert breakdown[0]["percentage"] == 50


def test_trend_weekdays_series_overview(client, auth_headers, food_id):
    add(client, auth_headers, food_id, "40", "2025-06-09T12:00:00")
    add(client, auth_headers, food_id, "60", "2025-04-15T12:00:00")

    trend = client.get("/api/analytics/trend", params={**at, "months": 3}, headers=auth_headers).json()
    assert [point["month"] for point in trend] == ["2025-04", "2025-05", "2025-06"]
    assert [point["amount"] for point in trend] == [60, 0, 40]

    weekdays = client.get("/api/analytics/weekdays", params=at, headers=auth_headers).json()
    assert weekdays[0] == {"day": "Mon", "amount": 40}
    assert weekdays[1] == {"day": "Tue", "amount": 60}

    series = client.get("/api/analytics/series", params={**at, "range": "week"}, headers=auth_headers).json()
    assert series["period"] == "week"
    assert len(series["points"]) == 7
    assert series["total"] == 40

    overview = client.get("/api/analytics/overview", params=at, headers=auth_headers).json()
    assert overview["transactionCount"] == 2
    assert overview["averageTransaction"] == 50
    assert overview["highestExpense"]["amount"] == 60


def test_series_rejects_unknown_range(client, auth_headers):
    response = client.get("/api/analytics/series", params={"range": "decade"}, headers=auth_headers)
    assert response.status_code == 400


def test_reference_offset_sets_the_calendar(client, auth_headers, food_id):
    # 1 June 01:00 at +02:00 is still 31 May in UTC
    add(client, auth_headers, food_id, "10", "2025-06-01T01:00:00+02:00")

    summary = client.get(
        "/api/analytics/summary",
        params={"at": "2025-06-15T12:00:00+02:00"},
        headers=auth_headers,
    ).json()
    assert summary["monthly"] == 10
    assert summary["previousMonth"] == 0

    summary = client.get(
        "/api/analytics/summary",
        params={"at": "2025-06-15T12:00:00+00:00"},
        headers=auth_headers,
    ).json()
    assert summary["monthly"] == 0
    assert summary["previousMonth"] == 10
