import pytest
import requests

from stock_tracker.client.api_client import ApiError, StockApiClient


class FakeResponse:
    def __init__(self, status_code=200, body=None, reason="OK"):
        self.status_code = status_code
        self._body = body
        self.reason = reason

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if self._body is None:
            raise ValueError("no JSON body")
        return self._body


class FakeSession:
    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def make_client(*responses, token="tok"):
    session = FakeSession(*responses)
    return StockApiClient(base_url="http://api.test/api/v1/", token=token, session=session), session


def test_list_stocks_sends_bearer_token():
    client, session = make_client(FakeResponse(body=[{"id": 1}]))
    assert client.list_stocks() == [{"id": 1}]

    method, url, kwargs = session.calls[0]
    assert (method, url) == ("GET", "http://api.test/api/v1/stocks/")
    assert kwargs["headers"]["Authorization"] == "Bearer tok"


def test_update_sales_payload():
    client, session = make_client(FakeResponse(body={"id": 3, "quantitySold": 4}))
    client.update_sales(3, 4)
    method, url, kwargs = session.calls[0]
    assert (method, url) == ("PUT", "http://api.test/api/v1/stocks/update-sales/3")
    assert kwargs["json"] == {"quantitySold": 4}


def test_filter_drops_missing_params():
    client, session = make_client(FakeResponse(body=[]))
    client.filter_stocks(2024, start_week=3, end_week=5)
    assert session.calls[0][2]["params"] == {"year": 2024, "startWeek": 3, "endWeek": 5}


def test_error_detail_is_surfaced():
    client, _ = make_client(FakeResponse(404, {"detail": "Stock not found"}, "Not Found"))
    with pytest.raises(ApiError) as exc_info:
        client.update_sales(9, 1)
    assert exc_info.value.status_code == 404
    assert exc_info.value.message == "Stock not found"


def test_validation_errors_are_joined():
    body = {"detail": [{"msg": "field required"}, {"msg": "too small"}]}
    client, _ = make_client(FakeResponse(422, body, "Unprocessable Entity"))
    with pytest.raises(ApiError) as exc_info:
        client.add_stock({})
    assert exc_info.value.message == "field required; too small"


def test_non_json_error_uses_reason():
    client, _ = make_client(FakeResponse(502, None, "Bad Gateway"))
    with pytest.raises(ApiError) as exc_info:
        client.list_stocks()
    assert exc_info.value.message == "Bad Gateway"


def test_connection_error_has_no_status():
    client, _ = make_client(requests.ConnectionError("refused"))
    with pytest.raises(ApiError) as exc_info:
        client.list_stocks()
    assert exc_info.value.status_code is None


def test_missing_token_fails_without_request():
    client, session = make_client(token=None)
    with pytest.raises(ApiError) as exc_info:
        client.list_stocks()
    assert exc_info.value.is_unauthorized
    assert session.calls == []


def test_login_stores_token_and_uses_form_body():
    client, session = make_client(
        FakeResponse(body={"access_token": "fresh", "token_type": "bearer"}),
        token=None,
    )
    assert client.login("alice", "Secret1234") == "fresh"
    assert client.token == "fresh"
    method, url, kwargs = session.calls[0]
    assert url == "http://api.test/api/v1/auth/login"
    assert kwargs["data"] == {"username": "alice", "password": "Secret1234"}
    assert "Authorization" not in kwargs["headers"]


def test_non_json_success_body_raises_api_error():
    client, _ = make_client(FakeResponse(status_code=200, body=None))
    with pytest.raises(ApiError) as exc:
        client.update_sales(3, 4)
    assert exc.value.status_code == 200
    assert exc.value.message == "Unexpected response from the server"


@pytest.mark.parametrize("body", [["not", "a", "dict"], "plain text", {"detail": None}])
def test_unexpected_error_body_falls_back_to_reason(body):
    client, _ = make_client(FakeResponse(status_code=502, body=body, reason="Bad Gateway"))
    with pytest.raises(ApiError) as exc:
        client.list_stocks()
    assert exc.value.status_code == 502
    assert exc.value.message == "Bad Gateway"
