import httpx
import pytest

from spyke_client.errors import ApiError, ErrorType, handle_error


@pytest.mark.parametrize(
    "status,expected,can_retry",
    [
        (None, ErrorType.NETWORK, True),
        (0, ErrorType.NETWORK, True),
        (408, ErrorType.TIMEOUT, True),
        (400, ErrorType.VALIDATION, False),
        (422, ErrorType.VALIDATION, False),
        (401, ErrorType.AUTHENTICATION, False),
        (403, ErrorType.AUTHORIZATION, False),
        (404, ErrorType.NOT_FOUND, False),
        (409, ErrorType.CONFLICT, False),
        (429, ErrorType.RATE_LIMIT, True),
        (500, ErrorType.SERVER, True),
        (503, ErrorType.SERVER, True),
        (418, ErrorType.UNKNOWN, False),
    ],
)
def test_status_taxonomy(status, expected, can_retry):
    info = handle_error({"status": status})
    assert info.type is expected
    assert info.can_retry is can_retry
    assert info.message


def test_keeps_server_message():
    info = handle_error(ApiError(409, "Category already exists"))
    assert info.type is ErrorType.CONFLICT
    assert info.message == "Category already exists"
    assert info.status == 409


def test_timeout_flag_wins():
    assert handle_error(ApiError(0, "Request timeout", timeout=True)).type is ErrorType.TIMEOUT
    assert handle_error({"timeout": True}).type is ErrorType.TIMEOUT


def test_raw_exceptions():
    assert handle_error(httpx.ConnectError("refused")).type is ErrorType.NETWORK
    assert handle_error(httpx.ReadTimeout("slow")).type is ErrorType.TIMEOUT
