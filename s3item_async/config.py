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

"""Client configuration and SSL options."""

from __future__ import absolute_import, annotations

import os
import ssl
from typing import Any, Mapping, TextIO

import certifi
from aiohttp_retry import ExponentialRetry

from .error import ValidationError

DEFAULT_SERVER = "s3.amazonaws.com"
DEFAULT_PROTOCOL = "https"
DEFAULT_PORTS = {"http": 80, "https": 443}
DEFAULT_RETRY_COUNT = 4  # additional attempts after the first one
DEFAULT_TIMEOUT = 10  # seconds per physical attempt
DEFAULT_BATCH_ATTEMPTS = 5


class SSLOptions:
    """
    Peer verification options handed to the transport for HTTPS requests.

    :param bool verify_peer: Flag to verify server certificate or not.
    :param str | None cert_chain_file: Path to CA bundle; defaults to
        ``$SSL_CERT_FILE`` or the certifi bundle when verifying.
    """

    _KEYS = ("verify_peer", "cert_chain_file")

    def __init__(self, verify_peer: bool = False, cert_chain_file: str | None = None):
        self._verify_peer = bool(verify_peer)
        self._cert_chain_file = cert_chain_file
        self._context: ssl.SSLContext | None = None

    def __repr__(self):
        return (
            f"SSLOptions(verify_peer={self._verify_peer!r}, "
            f"cert_chain_file={self._cert_chain_file!r})"
        )

    def __eq__(self, other):
        if not isinstance(other, SSLOptions):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    @property
    def verify_peer(self) -> bool:
        """Get peer verification flag."""
        return self._verify_peer

    @property
    def cert_chain_file(self) -> str | None:
        """Get CA bundle path."""
        return self._cert_chain_file

    def to_dict(self) -> dict[str, Any]:
        """Get options as dictionary."""
        return {
            "verify_peer": self._verify_peer,
            "cert_chain_file": self._cert_chain_file,
        }

    def merge(self, overrides: SSLOptions | Mapping[str, Any] | None) -> SSLOptions:
        """
        Return new options where given overrides win key by key. This object
        is left untouched.
        """
        if overrides is None:
            return self
        if isinstance(overrides, SSLOptions):
            return overrides
        unknown = [key for key in overrides if key not in self._KEYS]
        if unknown:
            raise ValidationError(
                f"unknown SSL options {', '.join(sorted(map(str, unknown)))}"
            )
        values = self.to_dict()
        values.update(overrides)
        return SSLOptions(**values)

    def ssl_context(self) -> ssl.SSLContext:
        """Get SSL context built from these options, created once."""
        if self._context is None:
            context = ssl.create_default_context(
                cafile=self._cert_chain_file
                or os.environ.get("SSL_CERT_FILE")
                or certifi.where()
            )
            if not self._verify_peer:
                context.check_hostname = False
                context.verify_mode = ssl.CERT_NONE
            self._context = context
        return self._context


class Config:
    """
    Defaults shared by items, requests and flushes. Read per request and
    never mutated by them.

    :param str server: Default S3 host.
    :param str protocol: ``http`` or ``https``.
    :param int | None port: Port; defaults to 80 for http and 443 for https.
    :param int retry_count: Additional attempts after the first one.
    :param float timeout: Timeout in seconds of one physical attempt.
    :param SSLOptions | None ssl: Default SSL options.
    :param ExponentialRetry | None retry_options: Pause policy between
        retries; retries are immediate when not given.
    :param int batch_attempts: Passes of one flush before giving up.
    :param TextIO | None trace_stream: Stream for HTTP call tracing.
    """

    def __init__(
        self,
        server: str = DEFAULT_SERVER,
        protocol: str = DEFAULT_PROTOCOL,
        port: int | None = None,
        retry_count: int = DEFAULT_RETRY_COUNT,
        timeout: float = DEFAULT_TIMEOUT,
        ssl: SSLOptions | None = None,  # pylint: disable=redefined-outer-name
        retry_options: ExponentialRetry | None = None,
        batch_attempts: int = DEFAULT_BATCH_ATTEMPTS,
        trace_stream: TextIO | None = None,
    ):
        check_protocol(protocol)
        if retry_count < 0:
            raise ValidationError("retry count must not be negative")
        if batch_attempts < 1:
            raise ValidationError("batch attempts must be at least 1")
        if timeout <= 0:
            raise ValidationError("timeout must be positive")
        self.server = server
        self.protocol = protocol
        self.port = port
        self.retry_count = retry_count
        self.timeout = timeout
        self.ssl = ssl or SSLOptions()
        self.retry_options = retry_options
        self.batch_attempts = batch_attempts
        self.trace_stream = trace_stream


def check_protocol(protocol: str):
    """Check protocol is http or https."""
    if protocol not in DEFAULT_PORTS:
        raise ValidationError(
            f"invalid protocol {protocol!r}; must be one of http, https"
        )
