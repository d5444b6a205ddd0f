from datetime import timedelta

from app.core.auth import create_access_token, display_name, normalize_email


def test_missing_token_is_unauthorized(client):
    response = client.get("/api/watchlists")
    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized"}


def test_wrong_scheme_is_unauthorized(client):
    response = client.get("/api/watchlists", headers={"Authorization": "Basic abc"})
    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized"}


def test_garbage_token_is_invalid(client):
    response = client.get("/api/watchlists", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401
    assert response.json() == {"error": "Invalid token"}


def test_expired_token_is_invalid(client):
    token = create_access_token({"email": "a@x.com"}, expires_delta=timedelta(minutes=-5))
    response = client.get("/api/watchlists", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
    assert response.json() == {"error": "Invalid token"}


def test_token_without_email_is_invalid(client):
    token = create_access_token({"sub": "user-1"})
    response = client.get("/api/watchlists", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


def test_email_is_normalized_once(client, auth_headers):
    client.post("/api/watchlists", json={"name": "Horror"}, headers=auth_headers("  A@X.com "))
    response = client.get("/api/watchlists", headers=auth_headers("a@x.com"))
    names = [w["name"] for w in response.json()]
    assert "Horror" in names
    assert all(w["userEmail"] == "a@x.com" for w in response.json())


def test_helpers():
    assert normalize_email("  Foo@Bar.COM ") == "foo@bar.com"
    assert normalize_email(None) == ""
    assert display_name("jane.doe@example.com") == "jane.doe"
