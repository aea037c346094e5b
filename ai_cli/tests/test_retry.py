import pytest

from ai_cli.domain.exceptions import ApiError, Unauthorized
from ai_cli.providers.retry import call_with_credential_retry

from conftest import FakeCredentials


def test_success_without_refresh():
    creds = FakeCredentials()
    result, key = call_with_credential_retry(lambda k: f"ok:{k}", "key-1", creds, max_retries=1)
    assert result == "ok:key-1"
    assert key == "key-1"
    assert creds.refresh_calls == 0


def test_unauthorized_then_success_uses_retry_result():
    creds = FakeCredentials()
    seen = []

    def op(key):
        seen.append(key)
        if key == "key-1":
            raise Unauthorized("test")
        return f"ok:{key}"

    result, key = call_with_credential_retry(op, "key-1", creds, max_retries=1)
    assert result == "ok:key-2"
    assert key == "key-2"
    assert seen == ["key-1", "key-2"]
    assert creds.store.saved == ["key-2"]


def test_unauthorized_twice_is_bounded():
    creds = FakeCredentials(refreshed=("key-2", "key-3"))
    calls = []

    def op(key):
        calls.append(key)
        raise Unauthorized("test", detail=key)

    with pytest.raises(Unauthorized) as exc:
        call_with_credential_retry(op, "key-1", creds, max_retries=1)
    assert calls == ["key-1", "key-2"]
    assert exc.value.extra["detail"] == "key-2"
    assert creds.refresh_calls == 1


def test_zero_retries_fails_immediately():
    creds = FakeCredentials()

    def op(key):
        raise Unauthorized("test")

    with pytest.raises(Unauthorized):
        call_with_credential_retry(op, "key-1", creds, max_retries=0)
    assert creds.refresh_calls == 0


def test_other_errors_are_not_retried():
    creds = FakeCredentials()
    calls = []

    def op(key):
        calls.append(key)
        raise ApiError(code="API_ERROR", message="boom", http_status=500)

    with pytest.raises(ApiError):
        call_with_credential_retry(op, "key-1", creds, max_retries=1)
    assert calls == ["key-1"]
    assert creds.refresh_calls == 0
