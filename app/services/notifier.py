from datetime import datetime, timezone
from typing import Optional

import orjson
from redis.asyncio import Redis

from ..models import TaskStatus


class TaskNotifier:
    """Publishes task status changes on a Redis pub/sub channel."""

    def __init__(self, r: Redis, channel: str):
        self.r = r
        self.channel = channel

    async def publish(self, task_id: str, status: TaskStatus, message: Optional[str] = None) -> None:
        event = {
            "taskId": task_id,
            "status": status.value,
            "message": message,
            "eventAt": datetime.now(timezone.utc).isoformat(),
        }
        await self.r.publish(self.channel, orjson.dumps(event))
