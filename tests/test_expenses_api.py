def create(client, headers, category_id, amount="12.50", date="2025-06-05T12:00:00", description="Lunch"):
    return client.post(
        "/api/expenses",
        json={"amount": amount, "description": description, "categoryId": category_id, "date": date},
        headers=headers,
    )


def test_create_and_get_expense(client, auth_headers, food_id):
    response = create(client, auth_headers, food_id)
    assert response.status_code == 201
    expense = response.json()
    assert expense["amount"] == "12.50"
    assert expense["categoryId"] == food_id
    assert expense["category"]["name"] == "Food & Dining"
    assert "createdAt" in expense and "updatedAt" in expense

    response = client.get(f"/api/expenses/{expense['id']}", headers=auth_headers)
    assert response.status_code == 200
    assert response.json()["description"] == "Lunch"


def test_amount_is_normalized(client, auth_headers, food_id):
    assert create(client, auth_headers, food_id, amount=7).json()["amount"] == "7.00"
    assert create(client, auth_headers, food_id, amount="3.456").json()["amount"] == "3.46"


def test_create_rejects_bad_amounts(client, auth_headers, food_id):
    assert create(client, auth_headers, food_id, amount="abc").status_code == 422
    assert create(client, auth_headers, food_id, amount="-5").status_code == 422
    assert create(client, auth_headers, food_id, amount="NaN").status_code == 422
    assert create(client, auth_headers, food_id, amount="1e30").status_code == 422


def test_create_rejects_unknown_category(client, auth_headers):
    response = create(client, auth_headers, "no-such-category")
    assert response.status_code == 400


def test_list_is_newest_first(client, auth_headers, food_id):
    create(client, auth_headers, food_id, date="2025-06-01T10:00:00", description="first")
    create(client, auth_headers, food_id, date="2025-06-03T10:00:00", description="third")
    create(client, auth_headers, food_id, date="2025-06-02T10:00:00", description="second")

    response = client.get("/api/expenses", headers=auth_headers)
    assert [e["description"] for e in response.json()] == ["third", "second", "first"]


def test_list_filters(client, auth_headers, storage, food_id):
    transport_id = storage.get_category_by_name("Transport").id
    create(client, auth_headers, food_id, date="2025-06-01T10:00:00", description="early")
    create(client, auth_headers, transport_id, date="2025-06-10T10:00:00", description="bus")
    create(client, auth_headers, food_id, date="2025-06-20T10:00:00", description="late")

    response = client.get(
        "/api/expenses",
        params={"startDate": "2025-06-05T00:00:00", "endDate": "2025-06-30T00:00:00"},
        headers=auth_headers,
    )
    assert [e["description"] for e in response.json()] == ["late", "bus"]

    response = client.get("/api/expenses", params={"categoryId": transport_id}, headers=auth_headers)
    assert [e["description"] for e in response.json()] == ["bus"]


def test_patch_expense(client, auth_headers, storage, food_id):
    expense = create(client, auth_headers, food_id).json()
    transport_id = storage.get_category_by_name("Transport").id

    response = client.patch(
        f"/api/expenses/{expense['id']}",
        json={"amount": "20", "categoryId": transport_id},
        headers=auth_headers,
    )
    assert response.status_code == 200
    updated = response.json()
    assert updated["amount"] == "20.00"
    assert updated["category"]["name"] == "Transport"
    assert updated["description"] == "Lunch"


def test_patch_errors(client, auth_headers, food_id):
    expense = create(client, auth_headers, food_id).json()
    assert client.patch(f"/api/expenses/{expense['id']}", json={}, headers=auth_headers).status_code == 400
    response = client.patch(f"/api/expenses/{expense['id']}", json={"categoryId": "nope"}, headers=auth_headers)
    assert response.status_code == 400
    response = client.patch("/api/expenses/missing", json={"amount": "1"}, headers=auth_headers)
    assert response.status_code == 404


def test_delete_expense(client, auth_headers, food_id):
    expense = create(client, auth_headers, food_id).json()
    assert client.delete(f"/api/expenses/{expense['id']}", headers=auth_headers).status_code == 204
    assert client.get(f"/api/expenses/{expense['id']}", headers=auth_headers).status_code == 404
    assert client.delete(f"/api/expenses/{expense['id']}", headers=auth_headers).status_code == 404
