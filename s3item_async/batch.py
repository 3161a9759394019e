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
s3item_async.batch
~~~~~~~~~~~~~~~~~~

Concurrent execution of queued operations of one flush. A pass runs every
queued operation and waits for all of them; if any of them failed the whole
queue is run again, including operations which already succeeded.

:copyright: (C) 2022 L-ING <hlf01@icloud.com>
:license: Apache 2.0, see LICENSE for more details.

"""

from __future__ import absolute_import, annotations

import asyncio
import logging
from typing import Any, Callable, Hashable, Iterable, Iterator, Mapping, Tuple

from .config import DEFAULT_BATCH_ATTEMPTS
from .error import BatchError, FatalError, ValidationError
from .request import Request

_LOGGER = logging.getLogger(__name__)

Entry = Tuple[Hashable, Any]
RequestBuilder = Callable[[Hashable, Any, Callable[[Exception], None]], Request]


class BatchQueue:
    """
    Ordered ``(identifier, payload)`` pairs of one flush. Entries are fixed
    at creation and are not removed as operations succeed.
    """

    __slots__ = ("_entries",)

    def __init__(self, entries: Iterable[Entry] = ()):
        self._entries = tuple((identifier, payload) for identifier, payload in entries)

    def __len__(self):
        return len(self._entries)

    def __iter__(self) -> Iterator[Entry]:
        return iter(self._entries)

    def __bool__(self):
        return bool(self._entries)

    def __repr__(self):
        return f"BatchQueue({list(self._entries)!r})"

    @property
    def identifiers(self) -> list[Hashable]:
        """Get identifiers in queue order."""
        return [identifier for identifier, _ in self._entries]

    @classmethod
    def from_mapping(cls, mapping: Mapping[Hashable, Any]) -> BatchQueue:
        """Create queue of writes from identifier to payload mapping."""
        return cls(mapping.items())

    @classmethod
    def from_identifiers(cls, identifiers: Iterable[Hashable]) -> BatchQueue:
        """Create queue of payload-less operations such as deletes."""
        return cls((identifier, None) for identifier in identifiers)


class BatchCoordinator:
    """
    Runs a :class:`BatchQueue` to completion.

    :param int max_attempts: Passes over the whole queue before giving up.
    """

    def __init__(self, max_attempts: int = DEFAULT_BATCH_ATTEMPTS):
        if max_attempts < 1:
            raise ValidationError("max attempts must be at least 1")
        self._max_attempts = max_attempts

    @property
    def max_attempts(self) -> int:
        """Get number of passes before giving up."""
        return self._max_attempts

    async def flush(self, queue: BatchQueue, build_request: RequestBuilder) -> int:
        """
        Run every queued operation concurrently until one pass completes
        all of them.

        :param BatchQueue queue: Queued operations.
        :param build_request: Called as ``build_request(identifier, payload,
            on_error)`` and returning a :class:`Request` which reports its
            failure through ``on_error``.
        :return: Number of completed operations.
        :rtype: int
        :raise BatchError: If the last pass still had failed operations.
        """
        if not queue:
            return 0

        last_error: Exception | None = None
        for attempt in range(1, self._max_attempts + 1):
            done, errors = await self._run_pass(queue, build_request)
            if not errors:
                _LOGGER.debug("finished %d operations in pass %d", done, attempt)
                return done
            last_error = errors[-1][1]
            _LOGGER.debug(
                "pass %d completed %d of %d operations; failed: %s",
                attempt,
                done,
                len(queue),
                ", ".join(str(identifier) for identifier, _ in errors),
            )

        _LOGGER.warning("giving up after %d failed passes", self._max_attempts)
        raise BatchError(
            f"batch of {len(queue)} operations failed after "
            f"{self._max_attempts} attempts",
            last_error,
            self._max_attempts,
        ) from last_error

    async def _run_pass(
        self,
        queue: BatchQueue,
        build_request: RequestBuilder,
    ) -> tuple[int, list[tuple[Hashable, Exception]]]:
        """Run one pass and wait until every operation has finished."""
        requests = [
            build_request(identifier, payload, _error_logger(identifier))
            for identifier, payload in queue
        ]
        results = await asyncio.gather(
            *(request.execute() for request in requests),
            return_exceptions=True,
        )

        done = 0
        errors: list[tuple[Hashable, Exception]] = []
        for identifier, result in zip(queue.identifiers, results):
            if isinstance(result, FatalError):
                errors.append((identifier, result))
            elif isinstance(result, BaseException):
                raise result
            elif result.ok:
                done += 1
            else:
                errors.append((identifier, result.error))
        return done, errors


def _error_logger(identifier: Hashable) -> Callable[[Exception], None]:
    def on_error(error: Exception):
        _LOGGER.warning("an error occurred on %s: %s", identifier, error)

    return on_error
