import httpx
import pytest

from conftest import FakeService, LOCK_BODY
from mutexctl.autorenew import auto_renew
from mutexctl.cli import main

URL = ["--url", "http://mutex.test"]


def run(capsys, service, *argv):
    code = main(["mutex", *argv, *URL], transport=service.transport)
    return code, capsys.readouterr().out


@pytest.mark.parametrize("argv", [[], ["mutex"], ["mtx", "lock"]])
def test_wrong_arguments(capsys, argv):
    assert main(argv) == 1
    assert capsys.readouterr().out.strip() == "Wrong arguments"


def test_unknown_subcommand_prints_usage_for_all(capsys):
    assert main(["mutex", "frobnicate"]) == 1
    out = capsys.readouterr().out
    for prog in ("mutex lock", "mutex get", "mutex refresh", "mutex unlock", "mutex auto-refresh"):
        assert prog in out


def test_lock_prints_raw_body(capsys):
    service = FakeService(lock=[(200, '{"token":"abc","expiresAt":"2030-01-01T00:00:00Z"}')])
    code, out = run(capsys, service, "lock", "-n", "db")
    assert code == 0
    assert out.strip() == '{"token":"abc","expiresAt":"2030-01-01T00:00:00Z"}'


def test_lock_token_output(capsys):
    service = FakeService(lock=[(200, LOCK_BODY)])
    code, out = run(capsys, service, "l", "--name", "db", "-o", "token")
    assert code == 0
    assert out == "abc\n"


@pytest.mark.parametrize(
    "body", ['{"token": ""}', "garbage", '{"token": "abc", "expiresAt": "garbage"}']
)
def test_lock_token_output_with_undecodable_body_fails(capsys, body):
    service = FakeService(lock=[(200, body)])
    code, out = run(capsys, service, "lock", "-n", "db", "--output", "token")
    assert code == 1
    assert out.strip() == "Could not lock mutex!"


def test_lock_contended_without_timeout(capsys):
    service = FakeService(lock=[(409, "locked"), (200, LOCK_BODY)])
    code, out = run(capsys, service, "lock", "-n", "db", "-t", "0")
    assert code == 1
    assert out.strip() == "Could not lock mutex!"
    assert service.actions() == ["lock"]


def test_get(capsys):
    service = FakeService(get=[(200, '{"locked":false}')])
    code, out = run(capsys, service, "g", "-n", "db")
    assert code == 0
    assert out.strip() == '{"locked":false}'


def test_refresh(capsys):
    service = FakeService(refresh=[(200, LOCK_BODY)])
    code, _ = run(capsys, service, "r", "-n", "db", "-t", "abc")
    assert code == 0
    assert service.requests[0].url.path == "/v1/mutex/db/refresh/abc"


def test_unlock_unknown_token_fails(capsys):
    service = FakeService(unlock=[(404, "not found")])
    code, out = run(capsys, service, "unlock", "-n", "db", "-t", "abc")
    assert code == 1
    assert "404" in out
    assert service.actions() == ["unlock"]


def test_transport_failure(capsys):
    service = FakeService(get=[httpx.ConnectError("connection refused")])
    code, out = run(capsys, service, "get", "-n", "db")
    assert code == 1
    assert out.startswith("The HTTP request failed with error")


def test_invalid_url(capsys):
    code = main(["mutex", "get", "-n", "db", "--url", "ftp://mutex.test"])
    assert code == 1
    assert "http or https" in capsys.readouterr().out


def test_missing_name_is_a_usage_error():
    with pytest.raises(SystemExit) as info:
        main(["mutex", "lock"])
    assert info.value.code == 2


def _fast_auto_renew(settings, lease, on_renew=None, transport=None):
    return auto_renew(settings, lease, interval=0.01, on_renew=on_renew, transport=transport)


def test_auto_refresh_stops_on_rejected_renewal(capsys, monkeypatch):
    monkeypatch.setattr("mutexctl.cli.auto_renew", _fast_auto_renew)
    service = FakeService(refresh=[(200, LOCK_BODY), (410, "expired")], unlock=[(200, "ok")])
    code, out = run(capsys, service, "a", "-n", "db", "-t", "abc")

    assert code == 1
    assert "Could not refresh anymore" in out
    assert "unlock" not in service.actions()
