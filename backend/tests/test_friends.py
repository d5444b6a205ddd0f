import pytest
from sqlalchemy.exc import IntegrityError

from conftest import movie_payload

from app.core.exceptions import FriendRequestException
from app.repositories.friendship_repository import FriendshipRepository
from app.services.friendship_service import FriendshipService


def send(client, auth_headers, sender, target):
    return client.post("/api/friends", json={"friendEmail": target}, headers=auth_headers(sender))


def test_request_accept_scenario(client, auth_headers):
    response = send(client, auth_headers, "a@x.com", "b@x.com")
    assert response.status_code == 200
    friendship = response.json()["friendship"]
    assert friendship["status"] == "pending"
    assert friendship["userEmail"] == "a@x.com"
    assert friendship["friendEmail"] == "b@x.com"
    assert friendship["direction"] == "outgoing"

    response = client.patch(
        f"/api/friends/{friendship['id']}", json={"status": "accepted"}, headers=auth_headers("b@x.com")
    )
    assert response.status_code == 200
    assert response.json()["message"] == "Friend request accepted"

    response = client.get("/api/friends?status=accepted", headers=auth_headers("a@x.com"))
    rows = response.json()
    assert len(rows) == 1
    assert rows[0]["direction"] == "outgoing"
    assert rows[0]["friend"] == {"id": "b@x.com", "email": "b@x.com", "display_name": "b"}

    response = client.get("/api/friends", headers=auth_headers("b@x.com"))
    assert response.json()[0]["direction"] == "incoming"
    assert response.json()[0]["friend"]["email"] == "a@x.com"


def test_target_email_is_normalized(client, auth_headers):
    response = send(client, auth_headers, "a@x.com", "B@X.COM")
    assert response.json()["friendship"]["friendEmail"] == "b@x.com"


def test_reverse_pending_request_is_auto_accepted(client, auth_headers):
    send(client, auth_headers, "a@x.com", "b@x.com")
    response = send(client, auth_headers, "b@x.com", "a@x.com")
    assert response.status_code == 200
    assert response.json()["friendship"]["status"] == "accepted"
    assert response.json()["message"] == "Friend request accepted"

    rows = client.get("/api/friends?status=all", headers=auth_headers("a@x.com")).json()
    assert len(rows) == 1


def test_duplicate_request_is_rejected(client, auth_headers):
    send(client, auth_headers, "a@x.com", "b@x.com")
    response = send(client, auth_headers, "a@x.com", "b@x.com")
    assert response.status_code == 400
    assert response.json() == {"error": "Friend request already sent"}


def test_request_to_existing_friend_is_rejected(client, auth_headers):
    send(client, auth_headers, "a@x.com", "b@x.com")
    send(client, auth_headers, "b@x.com", "a@x.com")
    response = send(client, auth_headers, "a@x.com", "b@x.com")
    assert response.status_code == 400
    assert response.json() == {"error": "You are already friends with this user"}


def test_cannot_befriend_yourself(client, auth_headers):
    response = send(client, auth_headers, "a@x.com", "A@x.com")
    assert response.status_code == 400
    assert response.json() == {"error": "You cannot add yourself as a friend"}


def test_missing_or_malformed_email(client, auth_headers):
    response = client.post("/api/friends", json={}, headers=auth_headers("a@x.com"))
    assert response.status_code == 400
    assert response.json() == {"error": "Friend email is required"}

    response = send(client, auth_headers, "a@x.com", "not-an-email")
    assert response.status_code == 400


def test_only_recipient_can_respond(client, auth_headers):
    friendship_id = send(client, auth_headers, "a@x.com", "b@x.com").json()["friendship"]["id"]
    response = client.patch(
        f"/api/friends/{friendship_id}", json={"status": "accepted"}, headers=auth_headers("a@x.com")
    )
    assert response.status_code == 403


def test_responding_twice_fails(client, auth_headers):
    friendship_id = send(client, auth_headers, "a@x.com", "b@x.com").json()["friendship"]["id"]
    first = client.patch(
        f"/api/friends/{friendship_id}", json={"status": "rejected"}, headers=auth_headers("b@x.com")
    )
    assert first.status_code == 200
    assert first.json()["friendship"]["status"] == "rejected"

    second = client.patch(
        f"/api/friends/{friendship_id}", json={"status": "accepted"}, headers=auth_headers("b@x.com")
    )
    assert second.status_code == 400
    assert second.json() == {"error": "This friendship is not pending"}


def test_invalid_decision(client, auth_headers):
    friendship_id = send(client, auth_headers, "a@x.com", "b@x.com").json()["friendship"]["id"]
    response = client.patch(
        f"/api/friends/{friendship_id}", json={"status": "maybe"}, headers=auth_headers("b@x.com")
    )
    assert response.status_code == 400


def test_respond_to_missing_friendship(client, auth_headers):
    response = client.patch("/api/friends/999", json={"status": "accepted"}, headers=auth_headers("b@x.com"))
    assert response.status_code == 404
    assert response.json() == {"error": "Friendship not found"}


def test_non_numeric_id_is_bad_request(client, auth_headers):
    response = client.delete("/api/friends/abc", headers=auth_headers("a@x.com"))
    assert response.status_code == 400
    assert "error" in response.json()


def test_rejected_request_can_be_sent_again(client, auth_headers):
    friendship_id = send(client, auth_headers, "a@x.com", "b@x.com").json()["friendship"]["id"]
    client.patch(f"/api/friends/{friendship_id}", json={"status": "rejected"}, headers=auth_headers("b@x.com"))

    response = send(client, auth_headers, "b@x.com", "a@x.com")
    assert response.status_code == 200
    friendship = response.json()["friendship"]
    assert friendship["status"] == "pending"
    assert friendship["userEmail"] == "b@x.com"
    assert friendship["friendEmail"] == "a@x.com"


def test_status_filters(client, auth_headers):
    send(client, auth_headers, "a@x.com", "b@x.com")
    send(client, auth_headers, "c@x.com", "a@x.com")

    sent = client.get("/api/friends?status=sent", headers=auth_headers("a@x.com")).json()
    assert [row["friend"]["email"] for row in sent] == ["b@x.com"]

    pending = client.get("/api/friends?status=pending", headers=auth_headers("a@x.com")).json()
    assert [row["friend"]["email"] for row in pending] == ["c@x.com"]

    accepted = client.get("/api/friends", headers=auth_headers("a@x.com")).json()
    assert accepted == []

    everything = client.get("/api/friends?status=all", headers=auth_headers("a@x.com")).json()
    assert len(everything) == 2

    response = client.get("/api/friends?status=weird", headers=auth_headers("a@x.com"))
    assert response.status_code == 400


def test_either_party_can_delete(client, auth_headers):
    friendship_id = send(client, auth_headers, "a@x.com", "b@x.com").json()["friendship"]["id"]

    response = client.delete(f"/api/friends/{friendship_id}", headers=auth_headers("c@x.com"))
    assert response.status_code == 403

    response = client.delete(f"/api/friends/{friendship_id}", headers=auth_headers("b@x.com"))
    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Friendship deleted"}

    response = client.delete(f"/api/friends/{friendship_id}", headers=auth_headers("a@x.com"))
    assert response.status_code == 404


def make_friends(client, auth_headers, first, second):
    send(client, auth_headers, first, second)
    send(client, auth_headers, second, first)


def test_friend_watchlist_requires_accepted_friendship(client, auth_headers):
    send(client, auth_headers, "a@x.com", "b@x.com")
    response = client.get("/api/friends/b@x.com/watchlist", headers=auth_headers("a@x.com"))
    assert response.status_code == 403
    assert response.json() == {"error": "You are not friends with this user"}


def test_friend_watchlist_is_visible_to_friends(client, auth_headers):
    make_friends(client, auth_headers, "a@x.com", "b@x.com")
    client.post("/api/email-watchlist", json=movie_payload(550, "Fight Club"), headers=auth_headers("b@x.com"))
    horror = client.post("/api/watchlists", json={"name": "Horror"}, headers=auth_headers("b@x.com")).json()
    client.post(
        f"/api/watchlists/{horror['id']}/movies", json=movie_payload(694, "The Shining"), headers=auth_headers("b@x.com")
    )

    response = client.get("/api/friends/B@X.com/watchlist", headers=auth_headers("a@x.com"))
    assert response.status_code == 200
    body = response.json()
    assert body["friend"]["email"] == "b@x.com"
    assert [m["movie_id"] for m in body["watchlist"]] == [550]
    lists = {w["name"]: w for w in body["watchlists"]}
    assert [m["movie_id"] for m in lists["Horror"]["movies"]] == [694]


def test_friends_who_watched(client, auth_headers):
    make_friends(client, auth_headers, "a@x.com", "b@x.com")
    client.post("/api/watched", json={**movie_payload(550), "rating": 9}, headers=auth_headers("b@x.com"))
    client.post("/api/watched", json=movie_payload(550), headers=auth_headers("stranger@x.com"))

    response = client.get("/api/watched/550/friends", headers=auth_headers("a@x.com"))
    assert response.status_code == 200
    rows = response.json()
    assert len(rows) == 1
    assert rows[0]["email"] == "b@x.com"
    assert rows[0]["display_name"] == "b"
    assert rows[0]["rating"] == 9

    assert client.get("/api/watched/550/friends", headers=auth_headers("lonely@x.com")).json() == []


def test_reverse_pair_is_rejected_by_database(db_session):
    repository = FriendshipRepository(db_session)
    repository.create({"user_email": "a@x.com", "friend_email": "b@x.com", "status": "pending"})

    with pytest.raises(IntegrityError):
        repository.create({"user_email": "b@x.com", "friend_email": "a@x.com", "status": "pending"})

    assert len(repository.list_involving("a@x.com")) == 1


def test_concurrent_reverse_request_is_reported(db_session, monkeypatch):
    service = FriendshipService(db_session)
    service.send_request("a@x.com", "b@x.com")

    # the other request is not visible yet when b checks for it
    monkeypatch.setattr(FriendshipRepository, "get_between", lambda self, first, second: None)
    with pytest.raises(FriendRequestException):
        service.send_request("b@x.com", "a@x.com")
