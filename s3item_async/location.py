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

"""Object addressing: virtual-hosted and path style URLs."""

from __future__ import absolute_import, annotations

from urllib.parse import SplitResult, urlunsplit

from .config import DEFAULT_PORTS, DEFAULT_PROTOCOL, DEFAULT_SERVER, check_protocol
from .helpers import check_non_empty_string, is_dns_bucket, quote


class Location:
    """
    Resolved address of one object.

    Virtual-hosted style (``<bucket>.<server>/<key>``) is used when the
    bucket name is a DNS label and no server override is given, otherwise
    path style (``<server>/<bucket>/<key>``). The canonical resource used for
    signing is always ``/<bucket>/<key>``.

    :param str bucket: Name of the bucket.
    :param str key: Object key in the bucket.
    :param str | None server: Server override.
    :param str protocol: ``http`` or ``https``.
    :param int | None port: Port; defaults to the protocol's port.
    :param str default_server: Server used when no override is given.
    """

    __slots__ = (
        "_bucket",
        "_key",
        "_server",
        "_protocol",
        "_port",
        "_default_server",
        "_virtual_hosted",
    )

    def __init__(
        self,
        bucket: str,
        key: str,
        server: str | None = None,
        protocol: str = DEFAULT_PROTOCOL,
        port: int | None = None,
        default_server: str = DEFAULT_SERVER,
    ):
        check_non_empty_string(bucket, "bucket")
        check_non_empty_string(key, "key")
        check_protocol(protocol)
        self._bucket = bucket
        self._key = key
        self._server = server
        self._protocol = protocol
        self._port = port or DEFAULT_PORTS[protocol]
        self._default_server = default_server
        self._virtual_hosted = not server and is_dns_bucket(bucket)

    def __repr__(self):
        return f"Location({self.url!r})"

    def __eq__(self, other):
        if not isinstance(other, Location):
            return NotImplemented
        return self.url == other.url and self.resource == other.resource

    def __hash__(self):
        return hash((self.url, self.resource))

    @property
    def bucket(self) -> str:
        """Get bucket name."""
        return self._bucket

    @property
    def key(self) -> str:
        """Get object key."""
        return self._key

    @property
    def protocol(self) -> str:
        """Get protocol."""
        return self._protocol

    @property
    def port(self) -> int:
        """Get port."""
        return self._port

    @property
    def is_virtual_hosted(self) -> bool:
        """Check if bucket is addressed as part of the host name."""
        return self._virtual_hosted

    @property
    def server(self) -> str:
        """Get server the request goes to, without bucket."""
        return self._server or self._default_server

    @property
    def host(self) -> str:
        """Get host name of the request."""
        if self._virtual_hosted:
            return f"{self._bucket}.{self.server}"
        return self.server

    @property
    def path(self) -> str:
        """Get URL path of the request."""
        if self._virtual_hosted:
            return "/" + quote(self._key)
        return self.resource

    @property
    def resource(self) -> str:
        """Get canonical resource used in the string to sign."""
        return "/" + quote(self._bucket) + "/" + quote(self._key)

    @property
    def url(self) -> str:
        """Get full URL including scheme and port."""
        return urlunsplit(
            SplitResult(
                self._protocol,
                f"{self.host}:{self._port}",
                self.path,
                "",
                "",
            )
        )

    def resolve(self) -> str:
        """Resolve into a concrete URL."""
        return self.url

    def for_style(self, style: str | None) -> Location:
        """
        Get location of a stored variant. The default style keeps the key,
        any other style is appended as ``<key>_<style>``.
        """
        if not style:
            return self
        return Location(
            self._bucket,
            f"{self._key}_{style}",
            server=self._server,
            protocol=self._protocol,
            port=self._port,
            default_server=self._default_server,
        )
