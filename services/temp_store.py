import os
import re
import time
import uuid
from contextlib import contextmanager

# compressed_<milliseconds>_<random hex>.jpg
TEMP_NAME_PATTERN = re.compile(r"^compressed_\d+_[0-9a-f]{12}\.jpg$")


class TempStore:
    """
    Process-wide folder of compressed files waiting to be downloaded.
    Every file is handed out once: `take` reads it and deletes it.
    """

    def __init__(self, folder):
        self.folder = folder

    def new_name(self):
        # Timestamp alone collides under concurrent requests
        return f"compressed_{int(time.time() * 1000)}_{uuid.uuid4().hex[:12]}.jpg"

    def path_for(self, name):
        if not TEMP_NAME_PATTERN.match(name or ""):
            raise ValueError(f"Invalid temp file name: {name}")
        return os.path.join(self.folder, name)

    @contextmanager
    def reserve(self, data):
        """
        Write `data` under a fresh name and yield the name.
        If the block raises, the file is deleted before the error propagates.
        """
        os.makedirs(self.folder, exist_ok=True)
        name = self.new_name()
        path = self.path_for(name)
        try:
            with open(path, "wb") as f:
                f.write(data)
            yield name
        except BaseException:
            self.discard(name)
            raise

    def take(self, name):
        """Return the file's bytes and delete it, or None if it is gone"""
        try:
            path = self.path_for(name)
        except ValueError:
            return None

        try:
            with open(path, "rb") as f:
                data = f.read()
        except FileNotFoundError:
            return None

        self.discard(name)
        return data

    def discard(self, name):
        """Delete a temp file. Failures are printed, never raised."""
        try:
            os.remove(self.path_for(name))
            print(f"Deleted temporary file: {name}")
        except FileNotFoundError:
            pass
        except Exception as e:
            print("Error deleting temporary file:", e)

    def sweep(self, max_age_seconds):
        """Delete files older than `max_age_seconds`; returns how many went"""
        if not os.path.isdir(self.folder):
            return 0

        cutoff = time.time() - max_age_seconds
        removed = 0
        for name in os.listdir(self.folder):
            if not TEMP_NAME_PATTERN.match(name):
                continue
            try:
                if os.path.getmtime(os.path.join(self.folder, name)) < cutoff:
                    self.discard(name)
                    removed += 1
            except OSError as e:
                print("Error checking temporary file:", e)
        return removed
