from decimal import Decimal

from wealth_manager.crud import crud_account
from wealth_manager.services.errors import StoreUnavailableError


def create_account(client, name="Brokerage", type="fund", balance="0"):
    response = client.post("/accounts/", json={"name": name, "type": type, "balance": balance})
    assert response.status_code == 201
    return response.json()


def create_fund(client, code="110011", nav="12.5"):
    response = client.post("/funds/", json={"code": code, "name": "Mid Cap Mixed", "nav": nav})
    assert response.status_code == 201
    return response.json()


def post_trade(client, fund, account, type, shares, amount, on, fee="0"):
    return client.post("/funds/transactions/", json={
        "type": type, "fund_id": fund["id"], "account_id": account["id"], "transaction_date": on,
        "shares": shares, "amount": amount, "fee": fee,
    })


def test_root(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.json() == "Server is running."


def test_fund_trading_flow(client):
    account = create_account(client)
    fund = create_fund(client)

    assert post_trade(client, fund, account, "buy", "100", "1000", "2024-01-05", fee="10").status_code == 201
    assert post_trade(client, fund, account, "sell", "40", "500", "2024-03-05").status_code == 201

    holdings = client.get("/funds/holdings/").json()
    assert len(holdings) == 1
    assert Decimal(holdings[0]["shares"]) == Decimal("60")
    assert Decimal(holdings[0]["cost_basis"]) == Decimal("606")

    history = client.get(f"/funds/holdings/{holdings[0]['id']}/history").json()
    assert Decimal(history[-1]["realized_gain_to_date"]) == Decimal("96")

    returns = client.get("/funds/returns").json()
    assert Decimal(returns["summary"]["total_value"]) == Decimal("750")
    assert Decimal(returns["holdings"][0]["return_rate"]) == Decimal("0.2376")


def test_selling_more_than_held_is_a_bad_request(client):
    account = create_account(client)
    fund = create_fund(client)
    post_trade(client, fund, account, "buy", "100", "1000", "2024-01-05")

    response = post_trade(client, fund, account, "sell", "150", "2000", "2024-03-05")

    assert response.status_code == 400
    assert "only" in response.json()["detail"]
    assert len(client.get("/funds/transactions/").json()) == 1


def test_deleting_a_needed_buy_is_a_bad_request(client):
    account = create_account(client)
    fund = create_fund(client)
    purchase = post_trade(client, fund, account, "buy", "100", "1000", "2024-01-05").json()
    post_trade(client, fund, account, "sell", "80", "900", "2024-03-05")

    response = client.delete(f"/funds/transactions/{purchase['id']}")

    assert response.status_code == 400
    assert client.delete("/funds/transactions/999").status_code == 404


def test_trade_needs_shares_or_nav(client):
    account = create_account(client)
    fund = create_fund(client)

    response = client.post("/funds/transactions/", json={
        "type": "buy", "fund_id": fund["id"], "account_id": account["id"],
        "transaction_date": "2024-01-05", "amount": "1000",
    })

    assert response.status_code == 422


def test_missing_resources_are_not_found(client):
    assert client.get("/accounts/999").status_code == 404
    assert client.get("/funds/999").status_code == 404
    assert client.get("/goals/999/progress").status_code == 404
    assert client.post("/investment-plans/999/advance").status_code == 404


def test_balances_include_total(client):
    create_account(client, name="Checking", type="bank", balance="5000")
    create_account(client, name="Pension", type="pension", balance="1200.50")

    balances = client.get("/accounts/balances").json()

    assert Decimal(balances["bank"]) == Decimal("5000")
    assert Decimal(balances["total"]) == Decimal("6200.50")


def test_goal_contributions(client):
    goal = client.post("/goals/", json={"name": "Emergency Fund", "target_amount": "6000"}).json()

    response = client.post(f"/goals/{goal['id']}/contributions", json={"amount": "1500"})
    assert response.status_code == 200
    assert Decimal(response.json()["current_amount"]) == Decimal("1500")

    progress = client.get(f"/goals/{goal['id']}/progress").json()
    assert Decimal(progress["progress_percentage"]) == Decimal("25")
    assert progress["monthly_required"] is None

    assert client.post(f"/goals/{goal['id']}/contributions", json={"amount": "0"}).status_code == 422


def test_budget_status_endpoint(client):
    client.post("/budgets/", json={"amount": "100"})
    client.post("/cashflow/transactions/", json={
        "type": "expense", "amount": "130", "transaction_date": "2024-05-02",
    })

    statuses = client.get("/budgets/status", params={"year": 2024, "month": 5}).json()

    assert len(statuses) == 1
    assert statuses[0]["is_over_budget"] is True
    assert Decimal(statuses[0]["remaining_amount"]) == Decimal("-30")


def test_investment_plan_lifecycle(client):
    fund = create_fund(client)
    plan = client.post("/investment-plans/", json={
        "fund_id": fund["id"], "amount": "500", "frequency": "weekly", "next_date": "2024-01-08",
    })
    assert plan.status_code == 201
    plan = plan.json()
    assert plan["day_of_week"] == 1

    advanced = client.post(f"/investment-plans/{plan['id']}/advance").json()
    assert advanced["next_date"] == "2024-01-15"

    paused = client.put(f"/investment-plans/{plan['id']}/active", json={"is_active": False}).json()
    assert paused["is_active"] is False
    assert paused["next_date"] == "2024-01-15"


def test_monthly_plan_requires_an_anchor(client):
    fund = create_fund(client)

    response = client.post("/investment-plans/", json={
        "fund_id": fund["id"], "amount": "500", "frequency": "monthly",
    })

    assert response.status_code == 422


def test_snapshots(client):
    create_account(client, name="Checking", type="bank", balance="5000")

    created = client.post("/dashboard/snapshots")
    assert created.status_code == 201
    assert Decimal(created.json()["net_worth"]) == Decimal("5000")

    latest = client.get("/dashboard/snapshots/latest").json()
    assert latest["id"] == created.json()["id"]
    assert len(client.get("/dashboard/snapshots", params={"months": 1}).json()) == 1


def test_dashboard(client):
    create_account(client, name="Checking", type="bank", balance="5000")

    summary = client.get("/dashboard/").json()

    assert Decimal(summary["net_worth"]["net_worth"]) == Decimal("5000")
    assert summary["unread_reminders"] == 0
    assert Decimal(client.get("/dashboard/allocation").json()["percentages"]["bank"]) == Decimal("100")


def test_reminders_read_all(client):
    for title in ("Renew policy", "Review budget"):
        client.post("/reminders/", json={"title": title, "remind_at": "2024-05-03T08:00:00"})

    response = client.post("/reminders/read-all")

    assert response.json() == {"updated": 2}
    assert client.get("/reminders/", params={"unread_only": True}).json() == []


def test_store_outage_is_service_unavailable(client, monkeypatch):
    def unavailable(*args, **kwargs):
        raise StoreUnavailableError("database is locked")

    monkeypatch.setattr(crud_account, "read_db_accounts", unavailable)

    response = client.get("/accounts/")

    assert response.status_code == 503
    assert response.json() == {"detail": "database is locked"}
