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

"""Attachment storage backed by an S3 bucket."""

from __future__ import absolute_import, annotations

import logging
import mimetypes
import os
import tempfile
from typing import Any, Callable

from aiofile import async_open
from aiohttp import ClientSession, TCPConnector

from .batch import BatchCoordinator, BatchQueue
from .config import Config
from .error import FatalError
from .helpers import check_non_empty_string
from .item import Item
from .location import Location
from .request import Request
from .time import now_timestamp

_LOGGER = logging.getLogger(__name__)


class Storage:
    """
    Stores the styles of one attachment as objects ``<path>`` and
    ``<path>_<style>`` of a bucket and flushes queued writes and deletes
    in batches.

    :param str bucket: Name of the bucket.
    :param str path: Object key of the default style.
    :param str | None access_key_id: Access key.
    :param str | None secret_access_key: Secret key.
    :param str | None server: Server override.
    :param str | None permissions: Canned ACL of uploaded objects; the
        bucket default applies when not given.
    :param Config | None config: Defaults.
    :param ClientSession | None session: HTTP client session.

    .. code-block:: python

        storage = Storage(
            "my-bucket",
            "avatars/42/photo",
            access_key_id="ACCESS-KEY",
            secret_access_key="SECRET-KEY",
        )

        async def main():
            async with storage:
                storage.queued_for_write = {
                    None: "/tmp/photo.jpg",
                    "thumb": "/tmp/photo-thumb.jpg",
                }
                await storage.flush_writes()
                print(storage.expiring_url("thumb", 600))

        asyncio.run(main())
    """

    def __init__(
        self,
        bucket: str,
        path: str,
        access_key_id: str | None = None,
        secret_access_key: str | None = None,
        server: str | None = None,
        permissions: str | None = None,
        config: Config | None = None,
        session: ClientSession | None = None,
    ):
        check_non_empty_string(bucket, "bucket")
        check_non_empty_string(path, "path")
        self._bucket = bucket
        self._path = path
        self._access_key_id = access_key_id
        self._secret_access_key = secret_access_key
        self._server = server
        self._permissions = permissions
        self._config = config or Config()
        self._session = session
        self._owns_session = False
        self._coordinator = BatchCoordinator(self._config.batch_attempts)
        self.queued_for_write: dict[str | None, str] = {}
        self.queued_for_delete: list[str] = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close_session()

    def _ensure_session(self) -> bool:
        """Open a session unless one exists; tell if it was opened here."""
        if self._session is not None:
            return False
        self._session = ClientSession(connector=TCPConnector(limit=10))
        self._owns_session = True
        return True

    async def close_session(self):
        """
        Close the HTTP client session opened by this storage.
        """
        if self._session is not None and self._owns_session:
            await self._session.close()
        if self._owns_session:
            self._session = None
            self._owns_session = False

    @property
    def bucket(self) -> str:
        """Get bucket name."""
        return self._bucket

    def path(self, style: str | None = None) -> str:
        """Get object key of given style."""
        return Location(self._bucket, self._path).for_style(style).key

    def item(self, key: str) -> Item:
        """Get item of given object key."""
        return Item(
            self._bucket,
            key,
            aws_access_key_id=self._access_key_id,
            aws_secret_access_key=self._secret_access_key,
            server=self._server,
            permissions=self._permissions,
            config=self._config,
            session=self._session,
        )

    def url(self, style: str | None = None) -> str:
        """Get URL of given style."""
        return self.item(self.path(style)).url

    def expiring_url(self, style: str | None = None, time: int = 3600) -> str:
        """Get pre-signed URL of given style valid for ``time`` seconds."""
        return self.item(self.path(style)).expiring_url(now_timestamp() + time)

    async def exists(self, style: str | None = None) -> bool:
        """Check if given style is stored."""
        return await self.item(self.path(style)).exists()

    def queue_delete(self, *styles: str | None):
        """Queue objects of given styles for deletion."""
        self.queued_for_delete.extend(self.path(style) for style in styles)

    async def flush_writes(self) -> int:
        """
        Upload every queued style file. The queue is cleared only when all
        uploads succeeded.

        :return: Number of uploaded files.
        :rtype: int
        :raise BatchError: If uploads still fail after the last attempt.
        """

        def build(style, file_path, on_error) -> Request:
            headers = {}
            content_type, _ = mimetypes.guess_type(file_path)
            if content_type:
                headers["Content-Type"] = content_type
            return self.item(self.path(style)).put_request(
                file=file_path,
                headers=headers,
                on_success=lambda _: _LOGGER.debug("upload successful! %s", file_path),
                on_error=on_error,
            )

        done = await self._flush(BatchQueue.from_mapping(self.queued_for_write), build)
        self.queued_for_write = {}
        return done

    async def flush_deletes(self) -> int:
        """
        Delete every queued object key. The queue is cleared only when all
        deletes succeeded.

        :return: Number of deleted objects.
        :rtype: int
        :raise BatchError: If deletes still fail after the last attempt.
        """

        def build(key, _payload, on_error) -> Request:
            return self.item(key).request(
                "DELETE",
                on_success=lambda _: _LOGGER.debug("deleted! %s", key),
                on_error=on_error,
            )

        done = await self._flush(
            BatchQueue.from_identifiers(self.queued_for_delete),
            build,
        )
        self.queued_for_delete = []
        return done

    async def _flush(
        self,
        queue: BatchQueue,
        build: Callable[[Any, Any, Any], Request],
    ) -> int:
        if not queue:
            return 0
        opened = self._ensure_session()
        try:
            return await self._coordinator.flush(queue, build)
        finally:
            if opened:
                await self.close_session()

    async def to_file(self, style: str | None = None) -> str | None:
        """
        Get local file of given style: the queued file if not flushed yet,
        otherwise a temporary file with the downloaded object.

        :return: File path or None if the object could not be downloaded.
        :rtype: str | None
        """
        if style in self.queued_for_write:
            return self.queued_for_write[style]

        key = self.path(style)
        basename, extname = os.path.splitext(os.path.basename(key))
        descriptor, file_path = tempfile.mkstemp(prefix=basename, suffix=extname)
        os.close(descriptor)
        chunks: list[bytes] = []
        try:
            await self.item(key).get(
                on_chunk=chunks.append,
                on_attempt=lambda _attempt: chunks.clear(),
            )
        except FatalError as exc:
            _LOGGER.warning("unable to download %s: %s", key, exc)
            os.remove(file_path)
            return None
        async with async_open(file_path, "wb") as file:
            for chunk in chunks:
                await file.write(chunk)
        return file_path
