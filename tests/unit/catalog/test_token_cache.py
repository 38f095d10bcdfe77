import json
import threading

import pytest
from prometheus_client import REGISTRY

from artsyhub.domain.catalog.token_cache import (
    ArtsyTokenCache,
    Credential,
    JsonFileTokenStore,
    MemoryTokenStore,
    XappTokenFetcher,
)
from artsyhub.errors import UpstreamError
from tests.support.stubs import CountingFetcher, FakeClock, FakeResponse, FakeSession


@pytest.mark.unit
def test_same_credential_until_expiry_then_exactly_one_refresh():
    clock = FakeClock()
    fetcher = CountingFetcher(clock, ttl=600)
    cache = ArtsyTokenCache(fetcher, MemoryTokenStore(), clock=clock)

    first = cache.get_token()
    clock.advance(599)
    assert cache.get_token() is first
    assert fetcher.calls == 1

    clock.advance(1)
    second = cache.get_token()
    assert second.token == "token-2"
    assert cache.get_token() is second
    assert fetcher.calls == 2
    assert cache.refresh_count == 2


class GatedFetcher(CountingFetcher):
    """Blocks inside the fetch until the test opens the gate."""

    def __init__(self, clock):
        super().__init__(clock)
        self.entered = threading.Event()
        self.gate = threading.Event()

    def __call__(self):
        self.entered.set()
        self.gate.wait(timeout=5)
        return super().__call__()


@pytest.mark.unit
def test_concurrent_callers_share_one_refresh():
    clock = FakeClock()
    fetcher = GatedFetcher(clock)
    cache = ArtsyTokenCache(fetcher, MemoryTokenStore(), clock=clock)
    results = []
    results_lock = threading.Lock()

    def worker():
        credential = cache.get_token()
        with results_lock:
            results.append(credential)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    assert fetcher.entered.wait(timeout=5)
    fetcher.gate.set()
    for thread in threads:
        thread.join(timeout=5)

    assert fetcher.calls == 1
    assert len(results) == 8
    assert all(credential is results[0] for credential in results)


class LockCheckingStore(MemoryTokenStore):
    """Records whether another thread could take the cache lock during save."""

    def __init__(self):
        super().__init__()
        self.cache = None
        self.lock_free_during_save = []

    def save(self, credential):
        outcome = []

        def try_lock():
            acquired = self.cache._lock.acquire(blocking=False)
            if acquired:
                self.cache._lock.release()
            outcome.append(acquired)

        other = threading.Thread(target=try_lock)
        other.start()
        other.join(timeout=5)
        self.lock_free_during_save.extend(outcome)
        super().save(credential)


@pytest.mark.unit
def test_refreshed_credential_is_saved_while_holding_the_lock():
    clock = FakeClock()
    store = LockCheckingStore()
    cache = ArtsyTokenCache(CountingFetcher(clock), store, clock=clock)
    store.cache = cache

    cache.get_token()

    assert store.lock_free_during_save == [False]
    assert store.load().token == "token-1"


@pytest.mark.unit
def test_refreshes_are_counted_by_outcome():
    def sample(outcome):
        return REGISTRY.get_sample_value("artsyhub_token_refreshes_total", {"outcome": outcome}) or 0.0

    clock = FakeClock()
    fetcher = CountingFetcher(clock, fail=True)
    cache = ArtsyTokenCache(fetcher, MemoryTokenStore(), clock=clock)
    successes, failures = sample("success"), sample("failure")

    with pytest.raises(UpstreamError):
        cache.get_token()
    fetcher.fail = False
    cache.get_token()

    assert sample("failure") == failures + 1
    assert sample("success") == successes + 1


@pytest.mark.unit
def test_valid_persisted_credential_is_reused_without_fetch():
    clock = FakeClock()
    saved = Credential(token="saved", expires_at=int(clock() + 100))
    fetcher = CountingFetcher(clock)
    cache = ArtsyTokenCache(fetcher, MemoryTokenStore(saved), clock=clock)

    assert cache.get_token().token == "saved"
    assert fetcher.calls == 0


@pytest.mark.unit
def test_expired_persisted_credential_is_ignored():
    clock = FakeClock()
    stale = Credential(token="stale", expires_at=int(clock()))
    fetcher = CountingFetcher(clock)
    cache = ArtsyTokenCache(fetcher, MemoryTokenStore(stale), clock=clock)

    assert cache.get_token().token == "token-1"
    assert fetcher.calls == 1


@pytest.mark.unit
def test_disk_round_trip_survives_restart(tmp_path):
    clock = FakeClock()
    path = tmp_path / "artsy_token.json"
    fetcher = CountingFetcher(clock)

    ArtsyTokenCache(fetcher, JsonFileTokenStore(str(path)), clock=clock).get_token()
    on_disk = json.loads(path.read_text(encoding="utf-8"))
    assert on_disk == {"token": "token-1", "expiration": int(clock() + 3600)}

    restarted = ArtsyTokenCache(fetcher, JsonFileTokenStore(str(path)), clock=clock)
    assert restarted.get_token().token == "token-1"
    assert fetcher.calls == 1


@pytest.mark.unit
def test_corrupt_token_file_is_a_miss(tmp_path):
    path = tmp_path / "artsy_token.json"
    path.write_text("{not json", encoding="utf-8")
    assert JsonFileTokenStore(str(path)).load() is None


@pytest.mark.unit
def test_write_failure_still_returns_credential(tmp_path):
    clock = FakeClock()
    # A directory cannot be opened for writing
    store = JsonFileTokenStore(str(tmp_path))
    cache = ArtsyTokenCache(CountingFetcher(clock), store, clock=clock)

    assert cache.get_token().token == "token-1"


@pytest.mark.unit
def test_fetch_failure_propagates_and_next_call_retries():
    clock = FakeClock()
    fetcher = CountingFetcher(clock, fail=True)
    cache = ArtsyTokenCache(fetcher, MemoryTokenStore(), clock=clock)

    with pytest.raises(UpstreamError, match="Artsy API authentication failed"):
        cache.get_token()

    fetcher.fail = False
    assert cache.get_token().token == "token-2"


@pytest.mark.unit
def test_xapp_fetcher_posts_credentials_and_parses_expiry():
    session = FakeSession([
        FakeResponse(201, {"type": "xapp_token", "token": "abc", "expires_at": "2030-01-01T00:00:00.000Z"})
    ])
    fetcher = XappTokenFetcher("cid", "csecret", "https://api.artsy.net/api/", session=session)

    credential = fetcher()

    assert credential.token == "abc"
    assert credential.expires_at == 1893456000
    call = session.calls[0]
    assert call["method"] == "POST"
    assert call["url"] == "https://api.artsy.net/api/tokens/xapp_token"
    assert call["json"] == {"client_id": "cid", "client_secret": "csecret"}


@pytest.mark.unit
def test_xapp_fetcher_maps_http_error():
    session = FakeSession([FakeResponse(401, {"error": "bad credentials"})])
    fetcher = XappTokenFetcher("cid", "wrong", "https://api.artsy.net/api", session=session)

    with pytest.raises(UpstreamError) as excinfo:
        fetcher()
    assert excinfo.value.upstream_status == 401


@pytest.mark.unit
def test_xapp_fetcher_without_credentials_does_not_call_out():
    session = FakeSession()
    fetcher = XappTokenFetcher(None, None, "https://api.artsy.net/api", session=session)

    with pytest.raises(UpstreamError):
        fetcher()
    assert session.calls == []
