from __future__ import annotations

from tagship.core.result import Err, Ok
from tagship.tools.http import HttpClient, HttpError, MockHttpClient, RealHttpClient


def test_http_error_str() -> None:
    assert str(HttpError(url="https://x", status=422, message="Validation Failed")) == (
        "HTTP 422: Validation Failed (https://x)"
    )
    assert str(HttpError(url="https://x", status=0, message="timed out")) == "timed out (https://x)"


def test_clients_satisfy_protocol() -> None:
    assert isinstance(MockHttpClient(), HttpClient)
    assert isinstance(RealHttpClient(), HttpClient)


def test_mock_longest_prefix_wins() -> None:
    http = MockHttpClient()
    http.set_response("https://uploads/assets", {"which": "generic"})
    failing = "https://uploads/assets?name=a"
    http.set_response(failing, HttpError(url=failing, status=500, message="x"))

    assert http.post_bytes("https://uploads/assets?name=b", b"") == Ok({"which": "generic"})
    assert isinstance(http.post_bytes("https://uploads/assets?name=a", b""), Err)


def test_mock_unknown_url_is_404() -> None:
    result = MockHttpClient().post_json("https://nowhere", {})

    assert isinstance(result, Err)
    assert result.error.status == 404


def test_mock_records_calls() -> None:
    http = MockHttpClient()
    http.post_json("https://api/releases", {"tag_name": "1.0"}, headers={"Authorization": "x"})
    http.post_bytes("https://uploads/assets", b"abc")

    assert [c.method for c in http.calls] == ["post_json", "post_bytes"]
    assert http.calls[0].payload == {"tag_name": "1.0"}
    assert http.calls[0].headers == {"Authorization": "x"}
    assert http.calls_to("post_bytes")[0].body == b"abc"
