"""
Compression workflow over a Batch.

Each run covers a snapshot of the batch taken when it starts, and every
result is attached to its own item, so removals during the run never
shift results. Items are compressed one after another; the first
failure stops the run, keeps the results already attached and raises a
single error notification.
"""
import traceback


class BatchBusyError(Exception):
    """A compression run is already in progress for this batch"""


def compress_batch(batch, compress, notifier):
    """
    Compress every item of `batch` with `compress` (bytes -> bytes).

    Returns True when every item of the snapshot got a result, False when
    there was nothing to compress or the run was abandoned.
    """
    with batch.lock:
        if batch.busy:
            raise BatchBusyError(batch.id)
        items = list(batch.items)
        if not items:
            notifier.error("Please upload some images to compress!")
            return False
        batch.busy = True

    try:
        for index, item in enumerate(items):
            try:
                compressed = compress(item.source_bytes)
            except Exception as e:
                print(f"Error compressing image {index + 1} of {len(items)}: {e}")
                traceback.print_exc()
                notifier.error("An error occurred while compressing images.")
                return False

            result = item.attach(compressed)
            print(f"Image {index + 1}/{len(items)}: {item.original_size_bytes} -> "
                  f"{result.compressed_size_bytes} bytes ({result.size_reduction_percent}% smaller)")
    finally:
        with batch.lock:
            batch.busy = False

    # Uploads that arrived mid-run are not part of this run
    if any(item.compression_result is None for item in batch.snapshot()):
        notifier.info("Some images were added during compression and still need compressing.")
    else:
        notifier.success("Compression completed successfully!")
    return True
