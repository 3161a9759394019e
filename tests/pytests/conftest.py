"""
conftest.py
"""

import asyncio
from datetime import datetime, timezone

import pytest
from multidict import CIMultiDict

FROZEN_TIME = datetime(2010, 2, 25, 10, 0, 0, tzinfo=timezone.utc)
FROZEN_DATE = "Thu, 25 Feb 2010 10:00:00 GMT"


class AsyncContentReader:
    def __init__(self, data, error=None):
        self.data = data or b""
        self.error = error

    async def iter_chunked(self, n):
        for i in range(0, len(self.data), n):
            yield self.data[i:i + n]
        if self.error is not None:
            raise self.error


class MockAiohttpResponse:
    def __init__(self, method="GET", url="", headers=None, status=200, body=None,
                 response_headers=None, content_error=None):
        self.status = status
        self.request_headers = {
            key.lower(): value for key, value in (headers or {}).items()
        }
        self.headers = CIMultiDict(response_headers or {})
        self.body = body
        self.url = url
        self.method = method
        self.released = 0
        self.content_error = content_error

    def mock_verify(self, method, url, headers):
        if self.method:
            assert self.method == method
        if self.url:
            assert self.url == url

        headers = {
            key.lower(): value for key, value in headers.items()
        }

        for k in self.request_headers:
            assert k in headers
            assert self.request_headers[k] == headers[k]

    @property
    def content(self):
        return AsyncContentReader(self.body, self.content_error)

    async def read(self):
        if self.content_error is not None:
            raise self.content_error
        return self.body or b""

    async def text(self):
        if self.body:
            return self.body.decode()
        return ""

    def release(self):
        self.released += 1


class MockCall:
    def __init__(self, method, url, kwargs):
        self.method = method
        self.url = url
        self.kwargs = kwargs

    @property
    def headers(self):
        return CIMultiDict(self.kwargs.get("headers") or {})

    @property
    def data(self):
        return self.kwargs.get("data")


class MockAiohttpClient:
    """
    Records every request. Responses come from routes keyed by method and
    URL (last response repeats) or else from the FIFO of mock requests.
    """

    def __init__(self):
        self.requests = []
        self.routes = {}
        self.calls = []
        self.closed = False

    def add_mock_request(self, request):
        self.requests.append(request)

    def add_route(self, method, url, *responses):
        self.routes[(method, url)] = list(responses)

    def count(self, method=None, url=None):
        return sum(
            1 for call in self.calls
            if (method is None or call.method == method)
            and (url is None or call.url == url)
        )

    async def request(self, method, url, **kwargs):
        data = kwargs.get("data")
        if hasattr(data, "__aiter__"):
            kwargs["data"] = b"".join([chunk async for chunk in data])
        self.calls.append(MockCall(method, url, kwargs))
        await asyncio.sleep(0)

        route = self.routes.get((method, url))
        if route is not None:
            response = route.pop(0) if len(route) > 1 else route[0]
        elif self.requests:
            response = self.requests.pop(0)
        else:
            raise AssertionError(f"unexpected request {method} {url}")

        if isinstance(response, BaseException):
            raise response
        response.mock_verify(method, url, kwargs.get("headers") or {})
        return response

    async def close(self):
        self.closed = True


def fake_response(body=b"data-here\n", **kwargs):
    return MockAiohttpResponse(method=None, status=200, body=body, **kwargs)


def broken_response(body, error):
    """Response whose body stream fails after yielding ``body``."""
    return MockAiohttpResponse(method=None, status=200, body=body,
                               content_error=error)


def error_response(status=400, body=b"<Error/>"):
    return MockAiohttpResponse(
        method=None,
        status=status,
        body=body,
        response_headers={"Content-Type": "application/xml"},
    )


def redirect_response(location, status=307):
    return MockAiohttpResponse(
        method=None,
        status=status,
        response_headers={"Location": location},
    )


@pytest.fixture
def mock_client_session():
    return MockAiohttpClient()


@pytest.fixture
def frozen_time(mocker):
    mocker.patch("s3item_async.time.utcnow", return_value=FROZEN_TIME)
    return FROZEN_TIME
