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

"""Credential definitions to access S3 service."""

from __future__ import annotations

from .error import ValidationError


class Credentials:
    """
    Represents credentials access key and secret key.
    """

    __slots__ = ("_access_key", "_secret_key")

    def __init__(self, access_key: str, secret_key: str):
        if not access_key:
            raise ValidationError("Access key must not be empty")

        if not secret_key:
            raise ValidationError("Secret key must not be empty")

        self._access_key = access_key
        self._secret_key = secret_key

    def __repr__(self):
        return f"Credentials(access_key={self._access_key!r}, secret_key=***)"

    def __eq__(self, other):
        if not isinstance(other, Credentials):
            return NotImplemented
        return (self._access_key, self._secret_key) == (
            other.access_key,
            other.secret_key,
        )

    def __hash__(self):
        return hash((self._access_key, self._secret_key))

    @property
    def access_key(self) -> str:
        """Get access key."""
        return self._access_key

    @property
    def secret_key(self) -> str:
        """Get secret key."""
        return self._secret_key

    @classmethod
    def create(
        cls, access_key: str | None, secret_key: str | None
    ) -> Credentials | None:
        """
        Create credentials for signed access or return None for anonymous
        access when no access key is given.
        """
        if not access_key:
            if secret_key:
                raise ValidationError("access key must be provided with secret key")
            return None
        if not secret_key:
            raise ValidationError("secret key must be provided with access key")
        return cls(access_key, secret_key)
