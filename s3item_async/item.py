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

# pylint: disable=too-many-arguments

"""Handle of one object in an S3 compatible service."""

from __future__ import absolute_import, annotations

from datetime import datetime
from typing import Any, Iterable, Mapping, TextIO

from aiohttp import ClientSession
from multidict import CIMultiDict

from .config import Config, SSLOptions
from .credentials import Credentials
from .datatypes import Result
from .error import FatalError
from .helpers import AMZ_ACL_HEADER, to_multidict, validate_headers
from .location import Location
from .request import Callback, Request
from .signer import presign_v2, sign_v2
from .time import to_unix_timestamp


def _ignore_error(_error):
    """Error handler of probes which inspect the result themselves."""


class Item:
    """
    Object in a bucket of an S3 compatible service.

    :param str bucket: Name of the bucket.
    :param str key: Object key in the bucket.
    :param str | None aws_access_key_id: Access key; anonymous access when
        not given.
    :param str | None aws_secret_access_key: Secret key.
    :param str | None server: Server override; forces path style addressing.
    :param str | None protocol: ``http`` or ``https``.
    :param int | None port: Port override.
    :param str | None permissions: Canned ACL sent as ``x-amz-acl`` with
        uploads; no ACL header is sent when not given.
    :param SSLOptions | Mapping | None ssl: Overrides of the configured SSL
        options, merged key by key.
    :param float | None timeout: Timeout in seconds of one physical attempt.
    :param int | None retry_count: Additional attempts after the first one.
    :param Config | None config: Defaults.
    :param ClientSession | None session: HTTP client session.
    :return: :class:`Item` object
    :rtype: Item

    .. code-block:: python

        item = Item(
            "my-bucket",
            "my-object",
            aws_access_key_id="ACCESS-KEY",
            aws_secret_access_key="SECRET-KEY",
        )

        async def main():
            await item.put(b"hello", headers={"Content-Type": "text/plain"})
            response = await item.get()
            print(response.body)

        asyncio.run(main())
    """

    def __init__(
        self,
        bucket: str,
        key: str,
        aws_access_key_id: str | None = None,
        aws_secret_access_key: str | None = None,
        server: str | None = None,
        protocol: str | None = None,
        port: int | None = None,
        permissions: str | None = None,
        ssl: SSLOptions | Mapping[str, Any] | None = None,
        timeout: float | None = None,
        retry_count: int | None = None,
        config: Config | None = None,
        session: ClientSession | None = None,
    ):
        self._config = config or Config()
        self._location = Location(
            bucket,
            key,
            server=server,
            protocol=protocol or self._config.protocol,
            port=port or self._config.port,
            default_server=self._config.server,
        )
        self._credentials = Credentials.create(
            aws_access_key_id,
            aws_secret_access_key,
        )
        self._permissions = permissions
        self._ssl = self._config.ssl.merge(ssl)
        self._timeout = timeout or self._config.timeout
        self._retry_count = (
            self._config.retry_count if retry_count is None else retry_count
        )
        self._session = session
        self._trace_stream = self._config.trace_stream

    def __repr__(self):
        return f"<Item {self._location.resource} at {self.url!r}>"

    @property
    def bucket(self) -> str:
        """Get bucket name."""
        return self._location.bucket

    @property
    def key(self) -> str:
        """Get object key."""
        return self._location.key

    @property
    def location(self) -> Location:
        """Get resolved location."""
        return self._location

    @property
    def credentials(self) -> Credentials | None:
        """Get credentials; None for anonymous access."""
        return self._credentials

    @property
    def permissions(self) -> str | None:
        """Get canned ACL sent with uploads."""
        return self._permissions

    @property
    def ssl(self) -> SSLOptions:
        """Get SSL options."""
        return self._ssl

    @property
    def url(self) -> str:
        """Get URL of the object."""
        return self._location.url

    def trace_on(self, stream: TextIO):
        """
        Enable http trace.

        :param TextIO stream: Stream for writing HTTP call tracing.
        """
        if not stream:
            raise ValueError("Input stream for trace output is invalid.")
        self._trace_stream = stream

    def trace_off(self):
        """
        Disable HTTP trace.
        """
        self._trace_stream = None

    def set_session(self, session: ClientSession | None):
        """
        Set HTTP client session used by requests of this item.

        :param ClientSession | None session: Custom HTTP client session.
        """
        self._session = session

    def sign_headers(self, method: str, headers=None) -> CIMultiDict:
        """Get headers signed for this object; unchanged when anonymous."""
        if self._credentials is None:
            return to_multidict(headers)
        return sign_v2(method, self._location.resource, headers, self._credentials)

    def expiring_url(self, expires_at: datetime | int | float) -> str:
        """
        Get pre-signed GET URL valid until given time.

        :param datetime | int | float expires_at: Expiry as datetime or Unix
            timestamp.
        :return: URL string; unsigned URL for anonymous access.
        :rtype: str
        """
        if self._credentials is None:
            return self.url
        return presign_v2(
            "GET",
            self.url,
            self._location.resource,
            self._credentials,
            to_unix_timestamp(expires_at),
        )

    def request(
        self,
        method: str,
        headers: Mapping[str, Any] | None = None,
        data: bytes | str | None = None,
        file: str | None = None,
        ssl: SSLOptions | Mapping[str, Any] | None = None,
        timeout: float | None = None,
        retry_count: int | None = None,
        on_success: Callback | None = None,
        on_error: Callback | None = None,
        on_chunk: Callback | None = None,
        on_attempt: Callback | None = None,
        fatal_statuses: Iterable[int] = (),
    ) -> Request:
        """
        Build signed request of this object without executing it.

        :return: :class:`Request` object.
        :rtype: Request
        """
        method = method.upper()
        return Request(
            method,
            self.url,
            headers=self.sign_headers(method, headers),
            data=data,
            file=file,
            ssl=self._ssl.merge(ssl),
            timeout=timeout or self._timeout,
            retry_count=self._retry_count if retry_count is None else retry_count,
            on_success=on_success,
            on_error=on_error,
            on_chunk=on_chunk,
            on_attempt=on_attempt,
            item=self,
            session=self._session,
            fatal_statuses=fatal_statuses,
            retry_options=self._config.retry_options,
            trace_stream=self._trace_stream,
        )

    def put_request(
        self,
        data: bytes | str | None = None,
        file: str | None = None,
        headers: Mapping[str, Any] | None = None,
        **options,
    ) -> Request:
        """
        Build upload request after validating caller headers.

        :raise ValidationError: If a header is outside the allow list.
        """
        validate_headers(headers)
        request_headers: dict[str, Any] = {}
        if self._permissions:
            request_headers[AMZ_ACL_HEADER] = self._permissions
        request_headers.update(headers or {})
        return self.request(
            "PUT",
            headers=request_headers,
            data=data,
            file=file,
            **options,
        )

    async def get(self, on_success: Callback | None = None, **options) -> Result:
        """
        Download the object.

        :param on_success: Called with :class:`S3Response`.
        :param options: ``on_error``, ``on_chunk``, ``on_attempt``, ``ssl``,
            ``timeout`` and ``retry_count``.
        :return: :class:`Result` object.
        :rtype: Result

        .. code-block:: python

            async def main():
                result = await item.get()
                print(result.response.body)

                # Stream the body instead of buffering it; start over when
                # a retry begins.
                chunks = []
                await item.get(
                    on_chunk=chunks.append,
                    on_attempt=lambda _: chunks.clear(),
                )

            asyncio.run(main())
        """
        return await self.request("GET", on_success=on_success, **options).execute()

    async def put(
        self,
        data: bytes | str | None = None,
        file: str | None = None,
        headers: Mapping[str, Any] | None = None,
        on_success: Callback | None = None,
        **options,
    ) -> Result:
        """
        Upload data or a file to the object.

        :param bytes | str | None data: Content to upload.
        :param str | None file: Path of file streamed as content.
        :param Mapping | None headers: ``Cache-Control``, ``Content-Type``,
            ``Expires``, ``x-amz-meta-*`` and other allowed headers.
        :param on_success: Called with :class:`S3Response`.
        :param options: ``on_error``, ``ssl``, ``timeout`` and ``retry_count``.
        :return: :class:`Result` object.
        :rtype: Result
        :raise ValidationError: If a header is outside the allow list.
        """
        return await self.put_request(
            data=data,
            file=file,
            headers=headers,
            on_success=on_success,
            **options,
        ).execute()

    async def head(self, on_success: Callback | None = None, **options) -> Result:
        """
        Load headers of the object.

        :return: :class:`Result` object.
        :rtype: Result
        """
        return await self.request("HEAD", on_success=on_success, **options).execute()

    async def delete(self, on_success: Callback | None = None, **options) -> Result:
        """
        Remove the object.

        :return: :class:`Result` object.
        :rtype: Result
        """
        return await self.request("DELETE", on_success=on_success, **options).execute()

    async def exists(self, **options) -> bool:
        """
        Check if the object exists.

        The answer is the return value; ``on_error`` and ``fatal_statuses``
        options are ignored.

        :return: True on 2xx, False on 404.
        :rtype: bool
        :raise FatalError: On any other failure.
        """
        options.pop("on_error", None)
        options.pop("fatal_statuses", None)
        result = await self.request(
            "HEAD",
            on_error=_ignore_error,
            fatal_statuses=(404,),
            **options,
        ).execute()
        if result.ok:
            return True
        if getattr(result.error, "status_code", None) == 404:
            return False
        raise FatalError(
            f"unable to check existence of {self._location.resource}",
            result.error,
        ) from result.error
