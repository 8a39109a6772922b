from conftest import FakeService, LOCK_BODY
from mutexctl import LeaseHandle, MutexClient, OutcomeKind, inspect, release, renew


def test_renew_handle_refreshes_expiry():
    service = FakeService(refresh=[(200, {"token": "abc", "expiresAt": "2031-06-01T12:00:00Z"})])
    handle = LeaseHandle(name="db", token="abc")
    with MutexClient("http://mutex.test", transport=service.transport) as client:
        outcome = renew(client, handle)

    assert outcome.ok
    assert handle.expires_at.year == 2031
    assert handle.token == "abc"


def test_renew_failure_is_returned_once():
    service = FakeService(refresh=[(404, "no such lock")])
    handle = LeaseHandle(name="db", token="abc")
    with MutexClient("http://mutex.test", transport=service.transport) as client:
        outcome = renew(client, handle)

    assert outcome.kind is OutcomeKind.EXPIRED
    assert handle.expires_at is None
    assert service.actions() == ["refresh"]


def test_release_by_name_and_token():
    service = FakeService(unlock=[(404, "no such lock")])
    with MutexClient("http://mutex.test", transport=service.transport) as client:
        outcome = release(client, "db", "abc")

    assert outcome.kind is OutcomeKind.EXPIRED
    assert service.actions() == ["unlock"]
    assert service.requests[0].url.path == "/v1/mutex/db/unlock/abc"


def test_release_handle():
    service = FakeService(unlock=[(200, "ok")])
    with MutexClient("http://mutex.test", transport=service.transport) as client:
        outcome = release(client, LeaseHandle(name="db", token="abc"))

    assert outcome.ok
    assert service.actions() == ["unlock"]


def test_renew_by_name_and_token():
    service = FakeService(refresh=[(200, LOCK_BODY)])
    with MutexClient("http://mutex.test", transport=service.transport) as client:
        assert renew(client, "db", "abc").ok
    assert service.actions() == ["refresh"]


def test_inspect_single_call():
    service = FakeService(get=[(200, "{}")])
    with MutexClient("http://mutex.test", transport=service.transport) as client:
        assert inspect(client, "db").ok
    assert service.actions() == ["get"]
