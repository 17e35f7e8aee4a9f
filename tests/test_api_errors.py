"""
Endpoints re-check the session on their own, behind the route gate.
"""
from backend.app.models.user import User
from backend.app.utils.jwt import Identity

from conftest import create_job, signup_candidate, signup_hr


def test_endpoint_rejects_bad_cookie_on_gate_public_path(make_client):
    # /auth/* is never gated, so this 401 comes from the endpoint itself.
    r = make_client(cookies={"token": "forged.token.value"}).get("/auth/me")
    assert r.status_code == 401, r.text
    assert r.json()["error"] == "Invalid token"


def test_endpoint_reports_expired_session(make_client, tokens):
    stale = tokens.issue(Identity(user_id="1", name="Old", role="hr"), now=1_000_000)
    r = make_client(cookies={"token": stale}).get("/auth/me")
    assert r.status_code == 401, r.text
    assert r.json()["error"] == "Session expired"


def test_endpoint_rechecks_role_against_stored_account(make_client, db_session):
    c = make_client()
    hr = signup_hr(c)
    job = create_job(c)

    # Demote the account after the token was issued; the token still says "hr".
    user = db_session.get(User, hr["id"])
    user.role = "candidate"
    db_session.commit()

    r = c.put(f"/jobs/{job['id']}", json={"status": "closed"})
    assert r.status_code == 403, r.text
    assert r.json()["error"] == "Unauthorized, not an HR user"


def test_token_for_deleted_user(make_client, db_session):
    c = make_client()
    cand = signup_candidate(c)
    db_session.delete(db_session.get(User, cand["id"]))
    db_session.commit()

    r = c.get("/applications")
    assert r.status_code == 404, r.text
    assert r.json()["error"] == "User not found"


def test_token_with_non_numeric_user_id(make_client, tokens):
    token = tokens.issue(Identity(user_id="abc", name="X", role="candidate"))
    r = make_client(cookies={"token": token}).get("/auth/me")
    assert r.status_code == 401, r.text


def test_unexpected_errors_become_generic_500(make_client, monkeypatch):
    c = make_client(raise_server_exceptions=False)
    signup_candidate(c)

    def boom(self):
        raise RuntimeError("internal detail that must not leak")

    monkeypatch.setattr(User, "to_public", boom)
    r = c.get("/auth/me")
    assert r.status_code == 500
    assert r.json() == {"success": False, "error": "Something went wrong on our end. Please try again later."}


def test_malformed_json_body_is_400(client):
    signup_candidate(client)
    r = client.post("/applications", content=b"{not json", headers={"content-type": "application/json"})
    assert r.status_code == 400, r.text
    assert r.json()["success"] is False


def test_unknown_id_type_in_path_is_400(client):
    signup_hr(client)
    r = client.get("/jobs/not-a-number")
    assert r.status_code == 400, r.text
