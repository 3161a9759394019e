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

"""Helper functions."""

from __future__ import absolute_import, annotations

import inspect
import re
import urllib.parse
from typing import Any, Mapping

from multidict import CIMultiDict

from .error import ValidationError

# Headers a caller may set on upload, matched with exact casing.
VALID_HEADERS = (
    "Cache-Control",
    "Content-Disposition",
    "Content-Encoding",
    "Content-Length",
    "Content-MD5",
    "Content-Type",
    "Expect",
    "Expires",
)
AMZ_HEADER_PREFIX = "x-amz-"
AMZ_META_PREFIX = "x-amz-meta-"
AMZ_ACL_HEADER = "x-amz-acl"

_DNS_BUCKET_REGEX = re.compile(r"^[a-z0-9](?:[a-z0-9\-]{0,61}[a-z0-9])?$")


def quote(resource, safe="/", encoding=None, errors=None):
    """
    Wrapper to urllib.parse.quote() replacing back to '~' for older python
    versions.
    """
    return urllib.parse.quote(
        resource,
        safe=safe,
        encoding=encoding,
        errors=errors,
    ).replace("%7E", "~")


def queryencode(query, safe="", encoding=None, errors=None):
    """Encode query parameter value."""
    return quote(query, safe, encoding, errors)


def headers_to_strings(headers, titled_key=False):
    """Convert HTTP headers to multi-line string."""
    return "\n".join(
        [
            "{0}: {1}".format(
                key.title() if titled_key else key,
                re.sub(
                    r"^AWS ([^:]+):(\S+)$",
                    r"AWS \1:*REDACTED*",
                    value if isinstance(value, str) else str(value),
                )
                if titled_key
                else value,
            )
            for key, value in headers.items()
        ]
    )


def url_replace(url, scheme=None, netloc=None, path=None, query=None, fragment=None):
    """Return new URL with replaced properties in given URL."""
    return urllib.parse.SplitResult(
        scheme if scheme is not None else url.scheme,
        netloc if netloc is not None else url.netloc,
        path if path is not None else url.path,
        query if query is not None else url.query,
        fragment if fragment is not None else url.fragment,
    )


def to_multidict(headers) -> CIMultiDict:
    """Copy headers into case insensitive multi-dict, expanding lists."""
    result: CIMultiDict = CIMultiDict()
    for key, value in (headers or {}).items():
        if isinstance(value, (list, tuple)):
            for val in value:
                result.add(key, str(val))
        else:
            result.add(key, str(value))
    return result


def is_dns_bucket(bucket_name: str) -> bool:
    """Check whether bucket name can be used as a DNS label."""
    return bool(_DNS_BUCKET_REGEX.match(bucket_name))


def check_non_empty_string(string, name="value"):
    """Check whether given string is not empty."""
    if not isinstance(string, str):
        raise ValidationError(f"{name} must be a string")
    if not string.strip():
        raise ValidationError(f"{name} must not be empty")


def validate_headers(headers: Mapping[str, Any] | None):
    """Reject header names outside the upload allow list."""
    invalid = [
        key
        for key in (headers or {})
        if not (
            key in VALID_HEADERS
            or key == AMZ_ACL_HEADER
            or key.startswith(AMZ_META_PREFIX)
        )
    ]
    if invalid:
        raise ValidationError(
            "invalid headers {0}; allowed are {1} and {2}*".format(
                ", ".join(sorted(invalid)),
                ", ".join(VALID_HEADERS + (AMZ_ACL_HEADER,)),
                AMZ_META_PREFIX,
            ),
        )


async def invoke_callback(callback, *args):
    """Call plain or coroutine callback and return its result."""
    result = callback(*args)
    if inspect.isawaitable(result):
        result = await result
    return result
