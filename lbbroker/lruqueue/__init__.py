from .LRUQueue import LRUQueue
from .WorkerQueue import WorkerQueue

__all__ = ["LRUQueue", "WorkerQueue"]
