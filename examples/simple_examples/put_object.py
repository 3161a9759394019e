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

from s3item_async import Item
import asyncio

item = Item(
    "my-bucket",
    "my-object",
    aws_access_key_id="ACCESS-KEY",
    aws_secret_access_key="SECRET-KEY",
    permissions="public-read",
)


async def main():
    # Upload data with content type and metadata.
    print("example one")
    await item.put(
        b"hello",
        headers={"Content-Type": "text/plain", "x-amz-meta-author": "me"},
    )

    # Upload a file.
    print("example two")
    await item.put(file="my-filename", headers={"Cache-Control": "max-age=60"})

    # Check the object and remove it.
    print("example three")
    if await item.exists():
        await item.delete()


loop = asyncio.get_event_loop()
loop.run_until_complete(main())
loop.close()
