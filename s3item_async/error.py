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
s3item_async.error
~~~~~~~~~~~~~~~~~~

This module provides custom exception classes for request validation,
transient transport failures and fatal storage errors.

:copyright: (C) 2022 L-ING <hlf01@icloud.com>
:license: Apache 2.0, see LICENSE for more details.

"""


class S3ItemException(Exception):
    """Base s3item exception."""


class ValidationError(S3ItemException, ValueError):
    """
    Raised to indicate invalid constructor arguments, options or headers.
    Never retried and never sent to the wire.
    """


class TransientError(S3ItemException):
    """
    Raised to indicate that one physical attempt failed either with a
    non-2xx/3xx HTTP status or with a transport error.
    """

    def __init__(self, message, status_code=None, response=None, reason=None):
        self._status_code = status_code
        self._response = response
        self._reason = reason
        super().__init__(message)

    def __reduce__(self):
        return type(self), (
            str(self),
            self._status_code,
            self._response,
            self._reason,
        )

    @property
    def status_code(self):
        """Get HTTP status code, None for transport errors."""
        return self._status_code

    @property
    def response(self):
        """Get last HTTP response."""
        return self._response

    @property
    def reason(self):
        """Get underlying transport exception."""
        return self._reason

    @classmethod
    def fromresponse(cls, method, url, response):
        """Create new object from a failed HTTP response."""
        return cls(
            f"{method} {url} failed with HTTP status code {response.status}",
            status_code=response.status,
            response=response,
        )

    @classmethod
    def fromexception(cls, method, url, exc):
        """Create new object from a transport exception."""
        return cls(
            f"{method} {url} failed; {type(exc).__name__}: {exc}",
            reason=exc,
        )


class FatalError(S3ItemException):
    """
    Raised to indicate that an operation could not complete and nobody
    handled its failure.
    """

    def __init__(self, message, error=None):
        self._error = error
        super().__init__(message)

    def __reduce__(self):
        return type(self), (str(self), self._error)

    @property
    def error(self):
        """Get the last error seen before giving up."""
        return self._error

    @property
    def status_code(self):
        """Get HTTP status code of the last error if any."""
        return getattr(self._error, "status_code", None)


class BatchError(FatalError):
    """Raised when a batch flush still fails after its last attempt."""

    def __init__(self, message, error=None, attempts=0):
        self._attempts = attempts
        super().__init__(message, error)

    def __reduce__(self):
        return type(self), (str(self), self._error, self._attempts)

    @property
    def attempts(self):
        """Get number of passes executed."""
        return self._attempts
