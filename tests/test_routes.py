from totp_backend import create_app
from totp_core import otp_core
from totp_core.otp_core import totp

RFC_SECRET_B32 = "GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ"

T = 1_700_000_010_000


def test_enrolment_page_without_pending_enrolment(client):
    response = client.get("/otp")
    assert response.status_code == 404
    assert response.get_json() == {"error": "No enrolment in progress"}


def test_enrolment_page(db_path):
    app = create_app(
        db_path=db_path,
        pending_enrolment={
            "issuer": "MyDemoApp",
            "account": "alice@example.com",
            "uri": "otpauth://totp/MyDemoApp:alice%40example.com?secret=ABC&issuer=MyDemoApp",
            "qr_data_uri": "data:image/png;base64,AAAA",
        },
    )
    client = app.test_client()
    for path in ("/", "/otp"):
        response = client.get(path)
        assert response.status_code == 200
        body = response.get_data(as_text=True)
        assert "<h2>MyDemoApp - QRCode</h2>" in body
        assert "Account: alice@example.com" in body
        assert 'src="data:image/png;base64,AAAA"' in body


def test_issuer_defaults_from_environment(monkeypatch, db_path):
    monkeypatch.setenv("TOTP_ISSUER", "EnvIssuer")
    assert create_app(db_path=db_path).config["TOTP_ISSUER"] == "EnvIssuer"


def test_list_accounts(client, stored):
    response = client.get("/api/accounts")
    assert response.status_code == 200
    assert response.get_json() == [{"account": "alice@example.com", "issuer": "MyDemoApp"}]


def test_get_totp(client, stored, monkeypatch):
    monkeypatch.setattr("totp_backend.routes.current_time_ms", lambda: T + 5000)
    response = client.get("/api/totp/alice@example.com")
    assert response.status_code == 200
    assert response.get_json() == {"code": totp(RFC_SECRET_B32, T), "remaining": 25}


def test_get_totp_unknown_account(client):
    response = client.get("/api/totp/nobody")
    assert response.status_code == 404
    assert response.get_json() == {"error": "Account nobody not found"}


def test_get_uri(client, stored):
    response = client.get("/api/uri/alice@example.com")
    assert response.get_json() == {
        "uri": f"otpauth://totp/MyDemoApp:alice%40example.com?secret={RFC_SECRET_B32}&issuer=MyDemoApp"
    }


def test_verify_valid_code(client, stored, monkeypatch):
    monkeypatch.setattr(otp_core, "current_time_ms", lambda: T)
    code = totp(RFC_SECRET_B32, T - 30000)
    response = client.post("/api/verify/alice@example.com", json={"code": code})
    assert response.status_code == 200
    assert response.get_json() == {"valid": True}

    response = client.post("/api/verify/alice@example.com", json={"code": code, "window": 0})
    assert response.get_json() == {"valid": False}


def test_verify_rejects_numeric_code(client, stored):
    response = client.post("/api/verify/alice@example.com", json={"code": 123456})
    assert response.status_code == 400
    assert response.get_json() == {"error": "Code is required"}


def test_verify_requires_body(client, stored):
    response = client.post("/api/verify/alice@example.com", data="not json")
    assert response.status_code == 400


def test_verify_unknown_account(client):
    response = client.post("/api/verify/nobody", json={"code": "123456"})
    assert response.status_code == 404


def test_verify_bad_window_is_configuration_error(client, stored):
    response = client.post("/api/verify/alice@example.com", json={"code": "123456", "window": -2})
    assert response.status_code == 400
    assert response.get_json()["field"] == "window"


def test_cors_headers(client, stored):
    response = client.get("/api/accounts", headers={"Origin": "http://example.com"})
    assert response.headers["Access-Control-Allow-Origin"] == "*"


def test_verify_rejects_non_object_body(client, stored):
    response = client.post("/api/verify/alice@example.com", json=["123456"])
    assert response.status_code == 400
    assert response.get_json() == {"error": "Code is required"}


def test_verify_window_is_capped(client, stored, monkeypatch):
    monkeypatch.setattr(otp_core, "current_time_ms", lambda: T)
    response = client.post("/api/verify/alice@example.com", json={"code": "123456", "window": 1_000_000})
    assert response.status_code == 400
    assert response.get_json()["field"] == "window"

    code = totp(RFC_SECRET_B32, T - otp_core.MAX_WINDOW * 30000)
    response = client.post(
        "/api/verify/alice@example.com", json={"code": code, "window": otp_core.MAX_WINDOW}
    )
    assert response.get_json() == {"valid": True}
