"""
Tests for the ROA style client
"""

import base64
import hashlib
from datetime import datetime, timezone
from unittest.mock import MagicMock
from urllib.parse import urlsplit

import pytest

from aliyun_openapi_sdk import (
    ApiError,
    ClientConfig,
    InvalidHeaderError,
    RoaClient,
)
from aliyun_openapi_sdk.signing import (
    CanonicalRequest,
    Dialect,
    build_canonical_string,
    sign,
    verify,
)

ENDPOINT = "https://ros.aliyuncs.com"
DATE = "Mon, 26 May 2014 12:00:00 GMT"


@pytest.fixture
def mock_session():
    session = MagicMock()
    response = MagicMock()
    response.status_code = 200
    response.json.return_value = {"Regions": [{"RegionId": "cn-hangzhou"}]}
    session.request.return_value = response
    return session


@pytest.fixture
def client(mock_session):
    return RoaClient(
        "testid", "testsecret", ENDPOINT, "2015-09-01",
        session=mock_session,
        nonce_generator=lambda: "nonce-1",
        clock=lambda: datetime(2014, 5, 26, 12, 0, 0, tzinfo=timezone.utc),
    )


def resign(prepared, dialect=Dialect.ROA):
    """Recompute the canonical string from what goes over the wire"""
    return build_canonical_string(dialect, CanonicalRequest(
        method=prepared.method.value,
        path=urlsplit(prepared.url).path,
        query=dict(prepared.params),
        headers=prepared.headers,
    ))


class TestRoaSigning:
    """Test header signing"""

    def test_canonical_string(self, client):
        """Test the canonical string of a bodiless GET"""
        prepared = client.get("/regions").prepare()

        assert prepared.canonical_string == (
            "GET\napplication/json\n\n\n" + DATE + "\n"
            "x-acs-signature-method:HMAC-SHA1\n"
            "x-acs-signature-nonce:nonce-1\n"
            "x-acs-signature-version:1.0\n"
            "x-acs-version:2015-09-01\n"
            "/regions"
        )
        assert prepared.signature == sign("testsecret", prepared.canonical_string)

    def test_headers(self, client):
        """Test the signing headers"""
        prepared = client.get("/regions").prepare()
        headers = prepared.headers

        assert prepared.url == "https://ros.aliyuncs.com/regions"
        assert headers["host"] == "ros.aliyuncs.com"
        assert headers["date"] == DATE
        assert headers["accept"] == "application/json"
        assert headers["x-acs-signature-nonce"] == "nonce-1"
        assert headers["x-acs-version"] == "2015-09-01"
        assert headers["authorization"] == f"acs testid:{prepared.signature}"
        assert "content-md5" not in headers
        assert "content-length" not in headers

    def test_resign_from_wire(self, client):
        """Test a receiver can recompute and verify the signature"""
        prepared = (
            client.get("/stacks")
            .query({"PageSize": "10", "Status": "CREATE_COMPLETE"})
            .header({"X-Acs-Custom": "custom"})
            .prepare()
        )

        canonical = resign(prepared)
        assert canonical == prepared.canonical_string
        assert "x-acs-custom:custom" in canonical
        assert canonical.endswith("/stacks?PageSize=10&Status=CREATE_COMPLETE")
        assert verify("testsecret", canonical, prepared.signature)

    def test_body_headers(self, client):
        """Test a body adds content-length and base64 content-md5"""
        body = '{"StackName": "demo"}'
        prepared = (
            client.post("/stacks")
            .header({"Content-Type": "application/json"})
            .body(body)
            .prepare()
        )

        expected_md5 = base64.b64encode(hashlib.md5(body.encode()).digest()).decode()
        assert prepared.body == body.encode()
        assert prepared.headers["content-length"] == str(len(body))
        assert prepared.headers["content-md5"] == expected_md5
        assert prepared.canonical_string.split("\n")[:5] == [
            "POST", "application/json", expected_md5, "application/json", DATE
        ]

    def test_caller_content_md5_replaced(self, client):
        """Test body digests are always computed, never taken from the caller"""
        prepared = client.get("/regions").header({"Content-MD5": "stale"}).prepare()
        assert "content-md5" not in {name.lower() for name in prepared.headers}

    def test_accept_override(self, client):
        """Test the caller's Accept header is signed"""
        prepared = client.get("/regions").header({"Accept": "application/xml"}).prepare()
        assert prepared.canonical_string.split("\n")[1] == "application/xml"

    def test_target_normalized(self, client):
        """Test paths without a leading slash"""
        assert client.get("regions").prepare().url == "https://ros.aliyuncs.com/regions"

    def test_endpoint_path_prefix(self, mock_session):
        """Test a path prefix on the endpoint is part of the signed resource"""
        client = RoaClient("testid", "testsecret", "http://localhost:8080/gateway/",
                           session=mock_session, nonce_generator=lambda: "n")
        prepared = client.get("/regions").prepare()

        assert prepared.url == "http://localhost:8080/gateway/regions"
        assert prepared.headers["host"] == "localhost:8080"
        assert prepared.canonical_string.endswith("\n/gateway/regions")
        assert "x-acs-version" not in prepared.headers

    def test_request_version_override(self, client):
        """Test a per-request version"""
        prepared = client.get("/regions").version("2019-09-10").prepare()
        assert prepared.headers["x-acs-version"] == "2019-09-10"

    def test_invalid_header_name(self, client):
        """Test header names must be tokens"""
        with pytest.raises(InvalidHeaderError):
            client.get("/regions").header({"bad header": "value"})

    def test_invalid_header_value(self, client):
        """Test header values cannot contain line breaks"""
        with pytest.raises(InvalidHeaderError):
            client.get("/regions").header({"x-acs-custom": "a\r\nInjected: b"})

    @pytest.mark.parametrize("value", ["a\x01b", "a\x1fb", "a\x7fb"])
    def test_control_characters_in_header_value(self, client, value):
        """Test header values cannot contain control characters"""
        with pytest.raises(InvalidHeaderError):
            client.get("/regions").header({"x-acs-meta": value})

    def test_tab_allowed_in_header_value(self, client):
        """Test horizontal tab is valid inside a header value"""
        prepared = client.get("/regions").header({"x-acs-meta": "a\tb"}).prepare()
        assert prepared.headers["x-acs-meta"] == "a\tb"

    def test_non_latin1_header_value(self, client, mock_session):
        """Test values the transport cannot encode fail before signing"""
        builder = client.get("/regions")
        with pytest.raises(InvalidHeaderError, match="latin-1"):
            builder.header({"x-acs-meta": "你好"})

        builder.prepare()
        mock_session.request.assert_not_called()

    def test_latin1_header_value_allowed(self, client):
        """Test latin-1 characters outside ASCII are accepted"""
        prepared = client.get("/regions").header({"x-acs-meta": "café"}).prepare()
        assert prepared.headers["x-acs-meta"] == "café"

    @pytest.mark.parametrize("headers", [[("only-name",)], [("a", "b", "c")], ["x-acs-meta"]])
    def test_malformed_header_pairs(self, client, headers):
        """Test header input that is not a name/value pair"""
        with pytest.raises(InvalidHeaderError, match="name/value pair"):
            client.get("/regions").header(headers)


class TestRoaDispatch:
    """Test sending ROA requests"""

    def test_send(self, client, mock_session):
        """Test the transport receives headers, params and body"""
        regions = client.put("/stacks/1").query({"Force": "true"}).body(b"{}").json()

        assert regions == {"Regions": [{"RegionId": "cn-hangzhou"}]}
        args, kwargs = mock_session.request.call_args
        assert args == ("PUT", "https://ros.aliyuncs.com/stacks/1")
        assert kwargs["params"] == [("Force", "true")]
        assert kwargs["data"] == b"{}"
        assert kwargs["headers"]["authorization"].startswith("acs testid:")

    def test_config_timeout_and_ssl(self, mock_session):
        """Test defaults taken from the client configuration"""
        config = ClientConfig(timeout=3, verify_ssl=False)
        client = RoaClient("testid", "testsecret", ENDPOINT, config=config, session=mock_session)
        client.delete("/stacks/1").send()

        _, kwargs = mock_session.request.call_args
        assert kwargs["timeout"] == 3
        assert kwargs["verify"] is False

    def test_api_error(self, client, mock_session):
        """Test the ROA error envelope"""
        response = MagicMock()
        response.status_code = 400
        response.json.return_value = {
            "Code": "StackNotFound",
            "Message": "The Stack (demo) could not be found.",
            "RequestId": "req-1",
        }
        mock_session.request.return_value = response

        with pytest.raises(ApiError) as exc_info:
            client.get("/stacks/demo").send()

        assert exc_info.value.error_code == "StackNotFound"
        assert exc_info.value.request_id == "req-1"
        assert exc_info.value.http_status == 400
        assert exc_info.value.recommend == ""
