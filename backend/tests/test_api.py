import pytest

from splitease import create_app
from splitease.config import Config


@pytest.fixture()
def app():
    app = create_app()
    app.config["TESTING"] = True
    return app


@pytest.fixture()
def client(app):
    return app.test_client()


MEMBERS = [
    {"id": "a", "username": "Asha"},
    {"id": "b", "username": "Bilal"},
    {"id": "c", "username": "Chen"},
]


def _split_body(**overrides):
    body = {
        "description": "Dinner",
        "amount": "100.00",
        "paidById": "a",
        "splittingType": "Equal",
        "members": MEMBERS,
        "participants": [{"memberId": m["id"]} for m in MEMBERS],
    }
    body.update(overrides)
    return body


def test_health(client):
    r = client.get("/api/health")
    assert r.status_code == 200
    assert r.get_json() == {"status": "ok"}


def test_equal_split(client):
    r = client.post("/api/splits", json=_split_body(groupId="g1"))
    assert r.status_code == 200
    assert r.get_json() == {
        "total": "100.00",
        "shares": [
            {"userId": "a", "share": "33.34"},
            {"userId": "b", "share": "33.33"},
            {"userId": "c", "share": "33.33"},
        ],
        "payload": {
            "description": "Dinner",
            "amount": 100.0,
            "paidById": "a",
            "groupId": "g1",
            "splittingType": "Equal",
        },
    }


def test_ratio_split(client):
    body = _split_body(
        amount="300",
        splittingType="Ratio",
        participants=[
            {"memberId": "a", "ratio": 1},
            {"memberId": "b", "ratio": 2},
            {"memberId": "c", "included": False},
        ],
    )
    r = client.post("/api/splits", json=body)
    assert r.status_code == 200
    data = r.get_json()
    assert data["shares"] == [{"userId": "a", "share": "100.00"}, {"userId": "b", "share": "200.00"}]
    assert data["payload"]["ratios"] == [{"userId": "a", "ratio": 1}, {"userId": "b", "ratio": 2}]


def test_custom_split_mismatch(client):
    body = _split_body(
        amount="50.00",
        splittingType="Custom",
        participants=[
            {"memberId": "a", "customShare": "20.00"},
            {"memberId": "b", "customShare": "20.00"},
        ],
    )
    r = client.post("/api/splits", json=body)
    assert r.status_code == 422
    error = r.get_json()["error"]
    assert error["code"] == "reconciliation_mismatch"
    assert "40.00" in error["message"]


def test_no_participants(client):
    body = _split_body(amount="75.00", participants=[{"memberId": m["id"], "included": False} for m in MEMBERS])
    r = client.post("/api/splits", json=body)
    assert r.status_code == 422
    assert r.get_json()["error"]["code"] == "no_participants"


def test_invalid_amount(client):
    r = client.post("/api/splits", json=_split_body(amount="12.345"))
    assert r.status_code == 422
    assert r.get_json()["error"]["code"] == "invalid_amount"


def test_unknown_member(client):
    body = _split_body(participants=[{"memberId": "a"}, {"memberId": "zed"}])
    r = client.post("/api/splits", json=body)
    assert r.status_code == 422
    assert r.get_json()["error"]["code"] == "unknown_member"


def test_missing_field(client):
    body = _split_body()
    del body["paidById"]
    r = client.post("/api/splits", json=body)
    assert r.status_code == 400
    assert "paidById" in r.get_json()["error"]["message"]


def test_bad_split_method(client):
    r = client.post("/api/splits", json=_split_body(splittingType="Percent"))
    assert r.status_code == 400
    assert r.get_json()["error"]["code"] == "bad_request"


def test_non_json_body(client):
    r = client.post("/api/splits", data="not json", content_type="text/plain")
    assert r.status_code == 400


def test_payer_exclusion_follows_config():
    class StrictConfig(Config):
        ALLOW_PAYER_EXCLUDED = False

    client = create_app(StrictConfig).test_client()
    body = _split_body(participants=[{"memberId": "b"}, {"memberId": "c"}])
    r = client.post("/api/splits", json=body)
    assert r.status_code == 422
    assert r.get_json()["error"]["code"] == "payer_not_included"


def test_remaining(client):
    body = {
        "amount": "50.00",
        "participants": [
            {"memberId": "a", "customShare": "20.00"},
            {"memberId": "b"},
            {"memberId": "c", "included": False, "customShare": "5"},
        ],
    }
    r = client.post("/api/splits/remaining", json=body)
    assert r.status_code == 200
    assert r.get_json() == {"remaining": "30.00"}


def test_balances_with_group_and_viewer(client):
    body = {
        "entries": [
            {"from": "b", "to": "a", "amount": "15.00", "kind": "Expense"},
            {"from": "c", "to": "a", "amount": 30, "kind": "Expense"},
            {"from": "c", "to": "a", "amount": "30.00", "kind": "Settlement"},
        ],
        "groupMembers": ["a", "b", "c"],
        "viewerId": "b",
    }
    r = client.post("/api/balances", json=body)
    assert r.status_code == 200
    data = r.get_json()
    assert data["balances"] == [
        {"memberA": "a", "memberB": "b", "netAmount": "15.00"},
        {"memberA": "a", "memberB": "c", "netAmount": "0.00"},
    ]
    assert data["summary"] == {
        "perMember": [
            {"memberId": "a", "netAmount": "15.00"},
            {"memberId": "b", "netAmount": "-15.00"},
            {"memberId": "c", "netAmount": "0.00"},
        ],
        "overallNet": "-15.00",
    }
    assert data["viewer"] == {
        "netAmount": "-15.00",
        "summaryText": "You owe ₹15.00",
        "counterparties": [{"userId": "a", "amount": "-15.00", "text": "you owe ₹15.00"}],
    }


def test_balances_rejects_bad_entry(client):
    body = {"entries": [{"from": "a", "to": "a", "amount": "1.00", "kind": "Expense"}]}
    r = client.post("/api/balances", json=body)
    assert r.status_code == 400

    body = {"entries": [{"from": "a", "to": "b", "amount": "1.00", "kind": "Gift"}]}
    r = client.post("/api/balances", json=body)
    assert r.status_code == 400


def test_propose_settlement_then_already_settled(client):
    entries = [{"from": "a", "to": "b", "amount": "40.00", "kind": "Expense"}]
    r = client.post("/api/settlements/propose", json={"entries": entries, "payerId": "a", "payeeId": "b"})
    assert r.status_code == 200
    assert r.get_json() == {"amount": "40.00"}

    entries.append({"from": "a", "to": "b", "amount": "40.00", "kind": "Settlement"})
    r = client.post("/api/settlements/propose", json={"entries": entries, "payerId": "a", "payeeId": "b"})
    assert r.status_code == 409
    assert r.get_json()["error"]["code"] == "already_settled"


def test_propose_settlement_same_member(client):
    r = client.post("/api/settlements/propose", json={"entries": [], "payerId": "a", "payeeId": "a"})
    assert r.status_code == 400


def test_huge_amount_is_invalid_amount(client):
    r = client.post("/api/splits", json=_split_body(amount=1e30))
    assert r.status_code == 422
    assert r.get_json()["error"]["code"] == "invalid_amount"


def test_numeric_amount_with_too_many_decimals_is_not_rounded(client):
    r = client.post("/api/splits", json=_split_body(amount=10.005))
    assert r.status_code == 422
    assert r.get_json()["error"]["code"] == "invalid_amount"


def test_numeric_amounts_are_accepted(client):
    r = client.post("/api/splits", json=_split_body(amount=10.5, participants=[{"memberId": "a"}, {"memberId": "b"}]))
    assert r.status_code == 200
    data = r.get_json()
    assert data["total"] == "10.50"
    assert [s["share"] for s in data["shares"]] == ["5.25", "5.25"]


def test_huge_custom_share_and_ledger_amount(client):
    body = _split_body(
        splittingType="Custom",
        participants=[{"memberId": "a", "customShare": 1e30}],
    )
    r = client.post("/api/splits", json=body)
    assert r.status_code == 422
    assert r.get_json()["error"]["code"] == "invalid_amount"

    entries = [{"from": "a", "to": "b", "amount": 1e30, "kind": "Expense"}]
    r = client.post("/api/balances", json={"entries": entries})
    assert r.status_code == 422
