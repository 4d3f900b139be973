"""
Tests for Goals and Analytics API endpoints
"""
from decimal import Decimal


def test_goal_contribution_is_clamped(client, owner_headers):
    goal = client.post(
        "/api/v1/goals/",
        json={"title": "Bike", "target_amount": "100", "current_amount": "80"},
        headers=owner_headers,
    ).json()
    assert goal["progress"] == 80.0

    response = client.post(f"/api/v1/goals/{goal['id']}/contributions", json={"amount": "50"}, headers=owner_headers)

    data = response.json()
    assert response.status_code == 200
    assert Decimal(data["current_amount"]) == Decimal("100")
    assert data["is_achieved"] is True
    assert data["achievement_date"] is not None


def test_goal_target_below_current_is_422(client, owner_headers):
    goal = client.post(
        "/api/v1/goals/",
        json={"title": "Bike", "target_amount": "100", "current_amount": "80"},
        headers=owner_headers,
    ).json()

    response = client.patch(f"/api/v1/goals/{goal['id']}", json={"target_amount": "70"}, headers=owner_headers)

    assert response.status_code == 422


def test_monthly_analytics_is_dense(client, owner_headers):
    response = client.get("/api/v1/analytics/monthly?months=4", headers=owner_headers)

    data = response.json()
    assert response.status_code == 200
    assert len(data["monthly"]) == 4
    assert len(data["savings"]) == 4
    assert all(Decimal(str(b["income"])) == 0 for b in data["monthly"])


def test_overview(client, owner_headers, food_category, salary_category):
    client.post("/api/v1/transactions/", json={"kind": "income", "amount": "1000", "category_id": salary_category.id},
                headers=owner_headers)
    client.post("/api/v1/transactions/", json={"kind": "expense", "amount": "40", "category_id": food_category.id},
                headers=owner_headers)
    client.post("/api/v1/goals/", json={"title": "Trip", "target_amount": "500"}, headers=owner_headers)

    data = client.get("/api/v1/analytics/overview", headers=owner_headers).json()

    assert Decimal(str(data["net"])) == Decimal("960")
    assert len(data["recent_transactions"]) == 2
    assert data["goals"][0]["title"] == "Trip"
    assert data["charts"]["categories"][0]["label"] == "Food"
    assert data["charts"]["categories"][0]["percentage"] == 100.0
    assert len(data["charts"]["weekly"]) == 7


def test_category_breakdown_language(client, owner_headers, food_category):
    client.post("/api/v1/transactions/", json={"kind": "expense", "amount": "5", "category_id": food_category.id},
                headers=owner_headers)

    data = client.get("/api/v1/analytics/categories?language=fr", headers=owner_headers).json()

    assert data[0]["label"] == "Alimentation"


def test_health(client):
    assert client.get("/health").text == "ok"
