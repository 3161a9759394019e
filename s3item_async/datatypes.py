# -*- coding: utf-8 -*-
# Asynchronous S3 Item Client for Python
# (C) 2022 L-ING <hlf01@icloud.com>
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Response and result types of S3 operations.
"""

from __future__ import absolute_import, annotations

from datetime import datetime

from multidict import CIMultiDict, CIMultiDictProxy

from . import time


class S3Response:
    """Completed HTTP exchange of a successful operation."""

    def __init__(
        self,
        method: str,
        url: str,
        status: int,
        headers,
        body: bytes | None = None,
        attempts: int = 1,
    ):
        self._method = method
        self._url = url
        self._status = status
        self._headers = CIMultiDictProxy(CIMultiDict(headers or {}))
        self._body = body
        self._attempts = attempts

    def __repr__(self):
        return f"<S3Response {self._method} {self._url} [{self._status}]>"

    @property
    def method(self) -> str:
        """Get HTTP method."""
        return self._method

    @property
    def url(self) -> str:
        """Get final URL after redirects."""
        return self._url

    @property
    def status(self) -> int:
        """Get HTTP status code."""
        return self._status

    @property
    def headers(self) -> CIMultiDictProxy:
        """Get HTTP response headers."""
        return self._headers

    @property
    def body(self) -> bytes | None:
        """Get buffered body; None when the body was streamed."""
        return self._body

    @property
    def attempts(self) -> int:
        """Get number of physical HTTP exchanges made."""
        return self._attempts

    @property
    def etag(self) -> str | None:
        """Get etag without quotes."""
        value = self._headers.get("etag")
        return value.replace('"', "") if value else None

    @property
    def content_length(self) -> int | None:
        """Get content length."""
        value = self._headers.get("content-length")
        return int(value) if value is not None else None

    @property
    def content_type(self) -> str | None:
        """Get content type."""
        return self._headers.get("content-type")

    @property
    def last_modified(self) -> datetime | None:
        """Get last modified time."""
        value = self._headers.get("last-modified")
        return time.from_http_header(value) if value else None

    @property
    def metadata(self) -> dict[str, str]:
        """Get user metadata from x-amz-meta-* headers."""
        return {
            key.lower()[len("x-amz-meta-"):]: value
            for key, value in self._headers.items()
            if key.lower().startswith("x-amz-meta-")
        }

    def text(self, encoding: str = "utf-8") -> str:
        """Get decoded body."""
        return (self._body or b"").decode(encoding)


class Result:
    """
    Terminal outcome of one logical operation: either a response or the
    error which exhausted it.
    """

    __slots__ = ("_response", "_error")

    def __init__(self, response: S3Response | None = None, error: Exception | None = None):
        if (response is None) == (error is None):
            raise ValueError("exactly one of response and error must be given")
        self._response = response
        self._error = error

    def __repr__(self):
        if self.ok:
            return f"Result(response={self._response!r})"
        return f"Result(error={self._error!r})"

    def __bool__(self):
        return self.ok

    @property
    def ok(self) -> bool:
        """Check if operation succeeded."""
        return self._error is None

    @property
    def response(self) -> S3Response | None:
        """Get response of a successful operation."""
        return self._response

    @property
    def error(self) -> Exception | None:
        """Get error of a failed operation."""
        return self._error
