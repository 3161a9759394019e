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

from s3item_async import Config, SSLOptions, Storage
import asyncio

storage = Storage(
    "my-bucket",
    "avatars/42/photo.jpg",
    access_key_id="ACCESS-KEY",
    secret_access_key="SECRET-KEY",
    config=Config(ssl=SSLOptions(verify_peer=True)),
)


async def main():
    async with storage:
        # Upload every style in one batch.
        storage.queued_for_write = {
            None: "photo.jpg",
            "thumb": "photo-thumb.jpg",
        }
        await storage.flush_writes()

        # Get a URL of the thumbnail valid for ten minutes.
        print(storage.expiring_url("thumb", 600))

        # Remove every style in one batch.
        storage.queue_delete(None, "thumb")
        await storage.flush_deletes()


loop = asyncio.get_event_loop()
loop.run_until_complete(main())
loop.close()
