import threading
import time
import uuid

from services.batch import Batch


class BatchStore:
    """In-memory registry of batches. For a single-process local tool."""

    def __init__(self):
        self._batches = {}
        self._lock = threading.Lock()

    def create(self):
        batch = Batch(uuid.uuid4().hex)
        with self._lock:
            self._batches[batch.id] = batch
        return batch

    def get(self, batch_id):
        with self._lock:
            batch = self._batches.get(batch_id)
        if batch is not None:
            batch.touch()
        return batch

    def remove(self, batch_id):
        """Drop a batch and its images; returns False if it was not there"""
        with self._lock:
            return self._batches.pop(batch_id, None) is not None

    def sweep(self, max_age_seconds):
        """Drop batches idle for more than `max_age_seconds`; returns how many went"""
        cutoff = time.time() - max_age_seconds
        with self._lock:
            stale = [
                batch_id for batch_id, batch in self._batches.items()
                if batch.last_used < cutoff and not batch.busy
            ]
            for batch_id in stale:
                del self._batches[batch_id]

        if stale:
            print(f"Dropped {len(stale)} idle batches")
        return len(stale)

    def __len__(self):
        with self._lock:
            return len(self._batches)
