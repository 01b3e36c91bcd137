"""Room speech queues and their registry."""

from .manager import QueueManager
from .room_queue import QueueClosed, RoomSpeechQueue

__all__ = ["QueueClosed", "QueueManager", "RoomSpeechQueue"]
