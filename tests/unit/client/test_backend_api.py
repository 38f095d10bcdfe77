import json

import pytest
import requests

from artsyhub.client import BackendApi, BackendError, SessionExpired, SessionStore
from tests.support.stubs import FakeResponse, FakeSession

BASE = "http://localhost:3000/api"


@pytest.mark.unit
def test_login_persists_session_and_later_calls_send_bearer(tmp_path):
    store = SessionStore(str(tmp_path / "session.json"))
    http = FakeSession([
        FakeResponse(200, {"user": {"id": "1", "email": "a@b.c"}, "token": "tok"}),
        FakeResponse(200, {"favorites": []}),
    ])
    api = BackendApi(BASE, store, http=http)

    user = api.login("a@b.c", "pw")
    favorites = api.list_favorites()

    assert user == {"id": "1", "email": "a@b.c"}
    assert favorites == []
    assert "Authorization" not in http.calls[0]["headers"]
    assert http.calls[1]["headers"]["Authorization"] == "Bearer tok"
    assert json.loads((tmp_path / "session.json").read_text()) == {
        "token": "tok", "user": {"id": "1", "email": "a@b.c"}
    }
    assert SessionStore(str(tmp_path / "session.json")).token == "tok"


@pytest.mark.unit
def test_401_clears_session_silently(tmp_path):
    store = SessionStore(str(tmp_path / "session.json"))
    store.save("expired", {"id": "1"})
    api = BackendApi(BASE, store, http=FakeSession([FakeResponse(401, {"error": "Unauthorized"})]))

    with pytest.raises(SessionExpired) as excinfo:
        api.me()

    assert excinfo.value.status_code == 401
    assert store.load() is None
    assert not (tmp_path / "session.json").exists()


@pytest.mark.unit
@pytest.mark.parametrize("response, message", [
    (FakeResponse(409, {"error": "Artist already in favorites"}), "Artist already in favorites"),
    (FakeResponse(404, {"message": "Favorite not found for this user."}), "Favorite not found for this user."),
    (FakeResponse(400, {"password": "Username or password is incorrect."}), "Username or password is incorrect."),
])
def test_error_bodies_become_backend_errors(response, message):
    api = BackendApi(BASE, http=FakeSession([response]))
    with pytest.raises(BackendError) as excinfo:
        api.remove_favorite("a1")
    assert excinfo.value.status_code == response.status_code
    assert excinfo.value.message == message


@pytest.mark.unit
def test_transport_error_has_no_status():
    api = BackendApi(BASE, http=FakeSession([requests.ConnectionError("offline")]))
    with pytest.raises(BackendError) as excinfo:
        api.list_favorites()
    assert excinfo.value.status_code is None


@pytest.mark.unit
def test_path_segments_are_quoted():
    http = FakeSession([FakeResponse(200, {"artists": []})])
    BackendApi(BASE, http=http).search_artists("van gogh/x")
    assert http.calls[0]["url"] == f"{BASE}/search/van%20gogh%2Fx"


@pytest.mark.unit
def test_logout_clears_session_even_when_call_fails():
    store = SessionStore()
    store.save("tok")
    api = BackendApi(BASE, store, http=FakeSession([FakeResponse(500, {"error": "down"})]))

    with pytest.raises(BackendError):
        api.logout()
    assert store.token is None


@pytest.mark.unit
def test_unreadable_session_file_means_logged_out(tmp_path):
    path = tmp_path / "session.json"
    path.write_text("[]", encoding="utf-8")
    assert SessionStore(str(path)).load() is None


@pytest.mark.unit
@pytest.mark.parametrize("response", [
    FakeResponse(201),
    FakeResponse(201, {"message": "ok"}),
])
def test_add_favorite_without_favorite_body_is_a_backend_error(response):
    api = BackendApi(BASE, http=FakeSession([response]))

    with pytest.raises(BackendError, match="Backend returned no favorite"):
        api.add_favorite({"artistId": "davinci", "artistName": "Leonardo da Vinci"})
