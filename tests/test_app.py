from backend import app as app_module
import pytest


APPLIANCES = [
    {"name": "LED TV", "category": "Entertainment", "wattage": 80, "hours_per_day": 5, "is_on": True},
    {"name": "Ceiling Fan", "category": "Cooling", "wattage": 75, "hoursPerDay": 8, "isOn": True},
    {"name": "Desktop", "category": "Electronics", "wattage": 200, "hours_per_day": 5, "is_on": False},
]


class FakeSNS:
    topic_arn = "arn:aws:sns:us-east-1:123456789012:HomeEnergyAlerts"

    def __init__(self):
        self.alerts = []

    def send_limit_alert(self, period, units, limit):
        self.alerts.append((period, units, limit))
        return True

    def subscribe_email(self, email):
        return "pending confirmation"


@pytest.fixture
def client():
    app_module.app.config["TESTING"] = True
    with app_module.app.test_client() as c:
        yield c


@pytest.fixture
def fake_sns(monkeypatch):
    sns = FakeSNS()
    monkeypatch.setattr(app_module, "USE_SNS", True)
    monkeypatch.setattr(app_module, "sns_service", sns)
    return sns


def test_home(client):
    res = client.get("/")
    assert res.status_code == 200
    assert res.get_json()["service"] == "home-energy-estimator"


def test_presets_and_default_slabs(client):
    presets = client.get("/presets").get_json()["presets"]
    assert presets[0]["name"] == "LED Bulb"
    slabs = client.get("/slabs/default").get_json()["slabs"]
    assert slabs[-1] == {"id": "4", "from": 401, "to": None, "rate": 9.0}


def test_usage(client):
    res = client.post("/usage", json={"appliances": APPLIANCES, "month": "Oct"})
    assert res.status_code == 200
    body = res.get_json()
    assert body["daily_units"] == pytest.approx(1.0)
    assert body["monthly_units"] == pytest.approx(30.0)
    assert body["month"] == "Oct"
    assert len(body["breakdown"]) == 3


def test_usage_vacation_mode(client):
    res = client.post("/usage", json={"appliances": APPLIANCES, "month": "Oct", "vacation_mode": True})
    assert res.get_json()["daily_units"] == pytest.approx(0.2)


def test_estimate_from_units(client):
    res = client.post("/estimate", json={"daily_units": 250 / 30})
    body = res.get_json()
    assert res.status_code == 200
    assert body["monthly_cost"] == 1170.0
    assert body["currency"] == "INR"


def test_estimate_from_appliances_with_custom_slabs(client):
    slabs = [{"from": 0, "to": None, "rate": 2}]
    res = client.post("/estimate", json={"appliances": APPLIANCES, "month": "Oct", "slabs": slabs})
    body = res.get_json()
    assert body["monthly_cost"] == 80.0
    assert body["daily_cost"] == 2.67


def test_summary(client):
    res = client.post("/summary", json={
        "appliances": APPLIANCES,
        "month": "Oct",
        "daily_limit": 0.5,
        "dismissed": ["monthly"],
    })
    body = res.get_json()
    assert res.status_code == 200
    assert body["breaches"] == {"daily": True, "monthly": False}
    assert body["active_count"] == 2
    assert body["monthly_cost"] == 110.0


def test_summary_validation_errors(client):
    assert client.post("/summary", json={"month": "Oct"}).status_code == 400
    bad = [{"name": "X", "category": "", "wattage": -1, "hours_per_day": 1}]
    res = client.post("/summary", json={"appliances": bad})
    assert res.status_code == 400
    assert "wattage" in res.get_json()["error"]
    assert client.post("/summary", json={"appliances": APPLIANCES, "month": "Foo"}).status_code == 400
    assert client.post("/summary", json={"appliances": APPLIANCES, "dismissed": ["weekly"]}).status_code == 400
    assert client.post("/usage", data="not json", content_type="text/plain").status_code == 400


def test_multiplier_must_be_in_range(client):
    res = client.post("/usage", json={"appliances": APPLIANCES, "multiplier": 1.5})
    assert res.status_code == 400


def test_validate_slabs_endpoint(client):
    res = client.post("/slabs/validate", json={"slabs": [{"from": 0, "to": 100, "rate": 3}]})
    body = res.get_json()
    assert body["valid"] is False
    assert body["problems"]


def test_history_summary(client):
    history = [{"month": "Sep 2024", "units": 200, "cost": 820}, {"month": "Oct 2024", "units": 250, "cost": 1170}]
    body = client.post("/history/summary", json={"history": history}).get_json()
    assert body["avg_units"] == 225
    assert body["unit_change_pct"] == pytest.approx(25)


def test_sns_disabled(client, monkeypatch):
    monkeypatch.setattr(app_module, "USE_SNS", False)
    monkeypatch.setattr(app_module, "sns_service", None)
    res = client.post("/sns/alert/limits", json={"appliances": APPLIANCES})
    assert res.status_code == 400
    assert client.get("/sns/status").get_json()["sns_enabled"] is False


def test_sns_limit_alerts(client, fake_sns):
    res = client.post("/sns/alert/limits", json={
        "appliances": APPLIANCES, "month": "Oct", "daily_limit": 0.5, "monthly_limit": 10,
    })
    body = res.get_json()
    assert body["alerts_sent"] == 2
    assert [a[0] for a in fake_sns.alerts] == ["daily", "monthly"]


def test_sns_limit_alert_respects_dismissed(client, fake_sns):
    res = client.post("/sns/alert/limits", json={
        "appliances": APPLIANCES, "month": "Oct", "daily_limit": 0.5, "monthly_limit": 10,
        "dismissed": ["daily", "monthly"],
    })
    assert res.get_json()["alerts_sent"] == 0
    assert fake_sns.alerts == []


def test_sns_subscribe(client, fake_sns):
    assert client.post("/sns/subscribe", json={}).status_code == 400
    res = client.post("/sns/subscribe", json={"email": "user@example.com"})
    assert res.status_code == 200
    assert res.get_json()["subscription_arn"] == "pending confirmation"


@pytest.mark.parametrize("path, body", [
    ("/estimate", '{"daily_units": 1, "slabs": [{"from": NaN, "to": null, "rate": 3}]}'),
    ("/estimate", '{"daily_units": 1, "slabs": [{"from": 1e400, "to": null, "rate": 3}]}'),
    ("/estimate", '{"daily_units": Infinity}'),
    ("/summary", '{"appliances": [{"name": "X", "wattage": Infinity, "hours_per_day": 1}]}'),
])
def test_non_finite_numbers_return_400(client, path, body):
    res = client.post(path, data=body, content_type="application/json")
    assert res.status_code == 400
    assert "finite" in res.get_json()["error"]


def test_bad_dismissed_string_returns_400(client, fake_sns):
    res = client.post("/sns/alert/limits", json={
        "appliances": APPLIANCES, "daily_limit": 0.5, "dismissed": "daily",
    })
    assert res.status_code == 400
    assert fake_sns.alerts == []
