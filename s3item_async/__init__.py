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

# type: ignore[reportUnusedImport]

"""
s3item-async - Asynchronous S3 object client for Python

>>> from s3item_async import Item
>>> import asyncio
>>> item = Item(
...     "my-bucket",
...     "my-object",
...     aws_access_key_id="ACCESS-KEY",
...     aws_secret_access_key="SECRET-KEY",
... )
>>> result = asyncio.run(item.get())
>>> print(result.response.body)
"""

__title__ = "s3item-async"
__author__ = "L-ING"
__version__ = "0.3.0"
__license__ = "Apache 2.0"
__copyright__ = "(C) 2022 L-ING <hlf01@icloud.com>"

from .batch import BatchCoordinator, BatchQueue
from .config import Config, SSLOptions
from .credentials import Credentials
from .datatypes import Result, S3Response
from .error import (
    BatchError,
    FatalError,
    S3ItemException,
    TransientError,
    ValidationError,
)
from .item import Item
from .location import Location
from .request import Request
from .storage import Storage
