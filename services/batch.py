"""
Batch of uploaded images and the upload validation that feeds it.

A Batch keeps items in upload order. Whether it is "complete" is always
derived from the items it currently holds, so removing the last item
puts it back into the not-yet-compressed state.
"""
import threading
import time

from services.accounting import size_reduction_percent, size_report


class CompressionResult:
    def __init__(self, compressed_bytes, original_size_bytes):
        self.compressed_bytes = compressed_bytes
        self.compressed_size_bytes = len(compressed_bytes)
        self.size_reduction_percent = size_reduction_percent(original_size_bytes, self.compressed_size_bytes)
        self._original_size_bytes = original_size_bytes

    def details(self):
        return size_report(self._original_size_bytes, self.compressed_size_bytes)


class ImageItem:
    def __init__(self, source_bytes, mime_type, filename=""):
        self.source_bytes = source_bytes
        self.mime_type = mime_type
        self.filename = filename
        self.original_size_bytes = len(source_bytes)
        self.compression_result = None

    @property
    def status(self):
        return "pending" if self.compression_result is None else "done"

    def attach(self, compressed_bytes):
        self.compression_result = CompressionResult(compressed_bytes, self.original_size_bytes)
        return self.compression_result


class Batch:
    def __init__(self, batch_id=None):
        self.id = batch_id
        self.items = []
        self.busy = False
        self.lock = threading.RLock()
        self.last_used = time.time()

    def touch(self):
        self.last_used = time.time()

    def __len__(self):
        return len(self.items)

    @property
    def is_empty(self):
        return not self.items

    @property
    def is_complete(self):
        return bool(self.items) and all(item.compression_result is not None for item in self.items)

    @property
    def view(self):
        # The upload zone shows again once nothing is left in the batch
        return "upload" if self.is_empty else "images"

    def add(self, items):
        with self.lock:
            self.items.extend(items)

    def get(self, index):
        """Item at `index`, or None when out of range"""
        with self.lock:
            if 0 <= index < len(self.items):
                return self.items[index]
            return None

    def remove(self, index):
        with self.lock:
            if not 0 <= index < len(self.items):
                raise IndexError(index)
            return self.items.pop(index)

    def clear(self):
        with self.lock:
            self.items = []

    def snapshot(self):
        with self.lock:
            return list(self.items)


# =========================
# UPLOAD VALIDATION
# =========================
def validate_upload(file, allowed_mime_types, max_upload_bytes):
    """
    Return (source_bytes, None) for an acceptable file or (None, message).
    A falsy or type-less entry returns (None, None): it is dropped without a message.
    """
    if not file or not getattr(file, "mimetype", None):
        return None, None

    name = file.filename or "unnamed"
    if file.mimetype not in allowed_mime_types:
        return None, f"The file {name} is not a valid image type."

    source_bytes = file.read()
    if len(source_bytes) > max_upload_bytes:
        limit_mb = max_upload_bytes / (1024 * 1024)
        return None, f"The file {name} is larger than {limit_mb:g} MB."

    return source_bytes, None


def accept_files(batch, files, notifier, allowed_mime_types, max_upload_bytes):
    """
    Append every valid file to `batch` in the order given and raise one
    error notification per rejected file. Returns the accepted items.
    """
    accepted = []
    for file in files:
        source_bytes, error = validate_upload(file, allowed_mime_types, max_upload_bytes)
        if error:
            notifier.error(error)
            continue
        if source_bytes is None:
            continue
        accepted.append(ImageItem(source_bytes, file.mimetype, file.filename or ""))

    if accepted:
        batch.add(accepted)
    return accepted
