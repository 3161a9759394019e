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

# pylint: disable=too-many-arguments,too-many-instance-attributes

"""
s3item_async.request
~~~~~~~~~~~~~~~~~~~~

One logical S3 operation: executes the HTTP exchange, retries transient
failures on the same target, follows redirects and reports exactly one
terminal outcome.

:copyright: (C) 2022 L-ING <hlf01@icloud.com>
:license: Apache 2.0, see LICENSE for more details.

"""

from __future__ import absolute_import, annotations

import asyncio
import logging
import os
from typing import Any, AsyncGenerator, Callable, Iterable, Mapping, TextIO
from urllib.parse import urljoin, urlsplit, urlunsplit

from aiofile import async_open
from aiohttp import ClientError, ClientResponse, ClientSession, ClientTimeout, TCPConnector
from aiohttp_retry import ExponentialRetry
from multidict import CIMultiDict

from .config import DEFAULT_RETRY_COUNT, DEFAULT_TIMEOUT, SSLOptions
from .datatypes import Result, S3Response
from .error import FatalError, TransientError, ValidationError
from .helpers import headers_to_strings, invoke_callback, to_multidict, url_replace

_LOGGER = logging.getLogger(__name__)

VALID_METHODS = ("GET", "PUT", "DELETE", "HEAD")
_CHUNK_SIZE = 64 * 1024

Callback = Callable[[Any], Any]


class Request:
    """
    One logical S3 operation which may take several physical HTTP exchanges.

    :param str http_method: One of GET, PUT, DELETE and HEAD.
    :param str url: Target URL.
    :param headers: Request headers, already signed when required.
    :param bytes | str | None data: Request body.
    :param str | None file: Path of a file streamed as request body.
    :param SSLOptions | Mapping | None ssl: SSL options for HTTPS.
    :param float timeout: Timeout in seconds of each physical attempt.
    :param int retry_count: Additional attempts allowed after the first one.
    :param on_success: Called once with :class:`S3Response` on success.
    :param on_error: Called once with the last error on failure; when absent
        the failure raises :class:`FatalError`.
    :param on_chunk: Called with every body chunk; the body is not buffered.
    :param on_attempt: Called with the attempt number before every physical
        attempt, so streamed output can be reset after a failed one.
    :param item: Owning item used to re-sign headers after a redirect.
    :param ClientSession | None session: HTTP client session; a temporary one
        is opened per execution when not given.
    :param Iterable[int] fatal_statuses: Statuses failing immediately without
        consuming retries.
    :param ExponentialRetry | None retry_options: Pause policy between retries.
    :param TextIO | None trace_stream: Stream for HTTP call tracing.
    """

    def __init__(
        self,
        http_method: str,
        url: str,
        headers: Mapping[str, Any] | None = None,
        data: bytes | str | None = None,
        file: str | None = None,
        ssl: SSLOptions | Mapping[str, Any] | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        retry_count: int = DEFAULT_RETRY_COUNT,
        on_success: Callback | None = None,
        on_error: Callback | None = None,
        on_chunk: Callback | None = None,
        on_attempt: Callback | None = None,
        item: Any = None,
        session: ClientSession | None = None,
        fatal_statuses: Iterable[int] = (),
        retry_options: ExponentialRetry | None = None,
        trace_stream: TextIO | None = None,
    ):
        method = str(http_method).upper()
        if method not in VALID_METHODS:
            raise ValidationError(
                f"invalid HTTP method {http_method!r}; "
                f"must be one of {', '.join(VALID_METHODS)}"
            )
        if data is not None and file is not None:
            raise ValidationError("data and file must not be given together")
        if retry_count < 0:
            raise ValidationError("retry count must not be negative")
        if timeout <= 0:
            raise ValidationError("timeout must be positive")

        self._http_method = method
        self._url = url
        self._headers = to_multidict(headers)
        self._data = data.encode() if isinstance(data, str) else data
        self._file = file
        if file is not None and "Content-Length" not in self._headers:
            self._headers["Content-Length"] = str(os.path.getsize(file))
        self._ssl = SSLOptions().merge(ssl) if not isinstance(ssl, SSLOptions) else ssl
        self._timeout = timeout
        self._retry_count = retry_count
        self._retries_left = retry_count
        self._on_success = on_success
        self._on_error = on_error
        self._on_chunk = on_chunk
        self._on_attempt = on_attempt
        self._item = item
        self._session = session
        self._fatal_statuses = frozenset(fatal_statuses)
        self._retry_options = retry_options
        self._trace_stream = trace_stream
        self._attempts = 0
        self._response: S3Response | None = None

    def __repr__(self):
        return f"<Request {self._http_method} {self._url}>"

    @property
    def http_method(self) -> str:
        """Get HTTP method."""
        return self._http_method

    @property
    def url(self) -> str:
        """Get current target URL; changes on redirect."""
        return self._url

    @property
    def headers(self) -> CIMultiDict:
        """Get request headers."""
        return self._headers

    @property
    def data(self) -> bytes | None:
        """Get request body."""
        return self._data

    @property
    def file(self) -> str | None:
        """Get path of file streamed as request body."""
        return self._file

    @property
    def ssl(self) -> SSLOptions:
        """Get SSL options."""
        return self._ssl

    @property
    def timeout(self) -> float:
        """Get timeout of one physical attempt."""
        return self._timeout

    @property
    def retry_count(self) -> int:
        """Get configured retry budget."""
        return self._retry_count

    @property
    def retries_left(self) -> int:
        """Get remaining retry budget."""
        return self._retries_left

    @property
    def attempts(self) -> int:
        """Get number of physical HTTP exchanges made so far."""
        return self._attempts

    @property
    def item(self):
        """Get owning item."""
        return self._item

    @property
    def response(self) -> S3Response | None:
        """Get response of successful execution; None before that."""
        return self._response

    async def execute(self) -> Result:
        """
        Execute the operation until it succeeds or its retry budget is
        exhausted.

        :return: :class:`Result` holding the response or the handled error.
        :rtype: Result
        :raise FatalError: If the operation failed and no error callback
            was given.
        """
        if self._session is not None:
            return await self._run(self._session)
        async with ClientSession(connector=TCPConnector(limit=10)) as session:
            return await self._run(session)

    def __await__(self):
        return self.execute().__await__()

    async def _run(self, session: ClientSession) -> Result:
        while True:
            self._attempts += 1
            _LOGGER.debug(
                "%s %s attempt %d (%d retries left)",
                self._http_method,
                self._url,
                self._attempts,
                self._retries_left,
            )
            if self._on_attempt is not None:
                await invoke_callback(self._on_attempt, self._attempts)
            try:
                response = await self._send(session)
            except (ClientError, asyncio.TimeoutError) as exc:
                error = TransientError.fromexception(self._http_method, self._url, exc)
            else:
                status = response.status
                if 200 <= status < 300:
                    try:
                        return await self._succeed(response)
                    except (ClientError, asyncio.TimeoutError) as exc:
                        error = TransientError.fromexception(
                            self._http_method, self._url, exc,
                        )
                elif 300 <= status < 400 and response.headers.get("Location"):
                    location = response.headers["Location"]
                    response.release()
                    self._redirect(location)
                    continue
                else:
                    error = await self._error_from_response(response)
                    if status in self._fatal_statuses:
                        return await self._fail(error)

            if self._retries_left <= 0:
                return await self._fail(error)
            self._retries_left -= 1
            _LOGGER.debug("retrying %s %s: %s", self._http_method, self._url, error)
            await self._pause()

    async def _send(self, session: ClientSession) -> ClientResponse:
        """Submit one physical attempt to the transport."""
        self._trace_request()
        response = await session.request(
            self._http_method,
            self._url,
            data=self._body(),
            headers=CIMultiDict(self._headers),
            ssl=self._ssl.ssl_context() if self._url.startswith("https") else True,
            timeout=ClientTimeout(total=self._timeout),
            allow_redirects=False,
            skip_auto_headers=(
                () if "Content-Type" in self._headers else ("Content-Type",)
            ),
        )
        self._trace_response(response)
        return response

    def _body(self) -> bytes | AsyncGenerator[bytes, None] | None:
        """Get body of one attempt; a file is reopened on every attempt."""
        if self._file is not None:
            return _file_sender(self._file)
        return self._data

    async def _succeed(self, response: ClientResponse) -> Result:
        body = None
        try:
            if self._on_chunk is not None:
                async for chunk in response.content.iter_chunked(_CHUNK_SIZE):
                    await invoke_callback(self._on_chunk, chunk)
            else:
                body = await response.read()
        finally:
            response.release()

        self._response = S3Response(
            self._http_method,
            self._url,
            response.status,
            response.headers,
            body,
            self._attempts,
        )
        _LOGGER.debug(
            "%s %s succeeded with %d after %d attempts",
            self._http_method,
            self._url,
            response.status,
            self._attempts,
        )
        if self._on_success is not None:
            await invoke_callback(self._on_success, self._response)
        return Result(response=self._response)

    async def _error_from_response(self, response: ClientResponse) -> TransientError:
        try:
            body = await response.read()
        except (ClientError, asyncio.TimeoutError):
            body = None
        response.release()
        if self._trace_stream and body:
            self._trace_stream.write(body.decode(errors="replace"))
            self._trace_stream.write("\n")
        return TransientError.fromresponse(
            self._http_method,
            self._url,
            S3Response(
                self._http_method,
                self._url,
                response.status,
                response.headers,
                body,
                self._attempts,
            ),
        )

    def _redirect(self, location: str):
        """Point the request to the redirect target's host and path."""
        target = urlsplit(urljoin(self._url, location))
        self._url = urlunsplit(
            url_replace(
                urlsplit(self._url),
                netloc=target.netloc,
                path=target.path,
                query=target.query,
            )
        )
        if self._item is not None:
            self._headers = self._item.sign_headers(self._http_method, self._headers)
        _LOGGER.debug("%s redirected to %s", self._http_method, self._url)

    async def _pause(self):
        if self._retry_options is None:
            return
        retry = self._retry_count - self._retries_left
        await asyncio.sleep(self._retry_options.get_timeout(retry))

    async def _fail(self, error: TransientError) -> Result:
        _LOGGER.warning(
            "%s %s failed after %d attempts: %s",
            self._http_method,
            self._url,
            self._attempts,
            error,
        )
        if self._on_error is None:
            raise FatalError(
                f"{self._http_method} {self._url} failed after "
                f"{self._attempts} attempts",
                error,
            ) from error
        await invoke_callback(self._on_error, error)
        return Result(error=error)

    def _trace_request(self):
        if not self._trace_stream:
            return
        url = urlsplit(self._url)
        query = ("?" + url.query) if url.query else ""
        self._trace_stream.write("---------START-HTTP---------\n")
        self._trace_stream.write(f"{self._http_method} {url.path}{query} HTTP/1.1\n")
        self._trace_stream.write(f"Host: {url.netloc}\n")
        self._trace_stream.write(headers_to_strings(self._headers, titled_key=True))
        self._trace_stream.write("\n\n")

    def _trace_response(self, response: ClientResponse):
        if not self._trace_stream:
            return
        self._trace_stream.write(f"HTTP/1.1 {response.status}\n")
        self._trace_stream.write(headers_to_strings(response.headers))
        self._trace_stream.write("\n")
        self._trace_stream.write("----------END-HTTP----------\n")


async def _file_sender(file_path: str) -> AsyncGenerator[bytes, None]:
    """Stream file content in chunks."""
    async with async_open(file_path, "rb") as file:
        async for chunk in file.iter_chunked(_CHUNK_SIZE):
            yield chunk
