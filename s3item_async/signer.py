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
s3item_async.signer
~~~~~~~~~~~~~~~~~~~

This module implements the shared secret HMAC-SHA1 signature scheme
(signature version 2) used by S3 compatible services.

The string to sign is::

    HTTP-Verb + "\\n" +
    Content-MD5 + "\\n" +
    Content-Type + "\\n" +
    Date-or-Expires + "\\n" +
    CanonicalizedAmzHeaders +
    CanonicalizedResource

:copyright: (C) 2022 L-ING <hlf01@icloud.com>
:license: Apache 2.0, see LICENSE for more details.

"""

from __future__ import absolute_import, annotations

import base64
import hashlib
import hmac
from datetime import datetime
from urllib.parse import urlsplit, urlunsplit

from multidict import CIMultiDict

from . import time
from .credentials import Credentials
from .helpers import AMZ_HEADER_PREFIX, queryencode, to_multidict, url_replace

_AUTH_SCHEME = "AWS"


def get_canonicalized_amz_headers(headers) -> str:
    """Get canonicalized x-amz-* headers, one 'name:value' per line."""
    amz_headers: dict[str, list[str]] = {}
    for key, value in to_multidict(headers).items():
        name = key.lower()
        if name.startswith(AMZ_HEADER_PREFIX):
            amz_headers.setdefault(name, []).append(value.strip())
    return "".join(
        f"{name}:{','.join(values)}\n" for name, values in sorted(amz_headers.items())
    )


def get_string_to_sign(
    method: str,
    resource: str,
    headers,
    date_or_expires: str,
) -> str:
    """Get string to sign."""
    headers = to_multidict(headers)
    return (
        "\n".join(
            [
                method.upper(),
                headers.get("Content-MD5", ""),
                headers.get("Content-Type", ""),
                date_or_expires,
            ]
        )
        + "\n"
        + get_canonicalized_amz_headers(headers)
        + resource
    )


def get_signature(secret_key: str, string_to_sign: str) -> str:
    """Get base64 encoded HMAC-SHA1 signature."""
    digest = hmac.new(
        secret_key.encode(),
        string_to_sign.encode(),
        hashlib.sha1,
    ).digest()
    return base64.b64encode(digest).decode()


def get_authorization(access_key: str, signature: str) -> str:
    """Get authorization header value."""
    return f"{_AUTH_SCHEME} {access_key}:{signature}"


def sign_v2(
    method: str,
    resource: str,
    headers,
    credentials: Credentials,
    date: datetime | None = None,
) -> CIMultiDict:
    """
    Do signature version 2 signing and return headers with Date and
    Authorization set.
    """
    headers = to_multidict(headers)
    headers["Date"] = time.to_http_header(date or time.utcnow())
    string_to_sign = get_string_to_sign(method, resource, headers, headers["Date"])
    headers["Authorization"] = get_authorization(
        credentials.access_key,
        get_signature(credentials.secret_key, string_to_sign),
    )
    return headers


def presign_v2(
    method: str,
    url: str,
    resource: str,
    credentials: Credentials,
    expires: int,
    headers=None,
) -> str:
    """
    Do signature version 2 presigning for an absolute Unix expiry time.
    The signature travels in the query string.
    """
    string_to_sign = get_string_to_sign(method, resource, headers, str(expires))
    signature = get_signature(credentials.secret_key, string_to_sign)

    parts = urlsplit(url)
    query = "&".join(
        (
            [parts.query] if parts.query else []
        )
        + [
            "AWSAccessKeyId=" + queryencode(credentials.access_key),
            "Expires=" + str(expires),
            "Signature=" + queryencode(signature),
        ]
    )
    return urlunsplit(url_replace(parts, query=query))
