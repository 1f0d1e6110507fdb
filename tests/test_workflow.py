import pytest

from conftest import make_image
from services.batch import Batch, ImageItem
from services.compressor import CompressionError, compress_quality
from services.notifications import Notifier
from services.workflow import BatchBusyError, compress_batch


def halving_compressor(calls):
    def compress(source_bytes):
        calls.append(source_bytes)
        return source_bytes[: len(source_bytes) // 2]
    return compress


def failing_at(k, calls):
    def compress(source_bytes):
        calls.append(source_bytes)
        if len(calls) - 1 == k:
            raise CompressionError("corrupt input")
        return b"z"
    return compress


def make_batch(n):
    batch = Batch("test")
    batch.add([ImageItem(bytes([i]) * 2048, "image/jpeg", f"{i}.jpg") for i in range(n)])
    return batch


def test_every_item_gets_a_result_at_its_index():
    batch = make_batch(4)
    calls = []
    notifier = Notifier()

    assert compress_batch(batch, halving_compressor(calls), notifier) is True

    assert batch.is_complete
    assert calls == [item.source_bytes for item in batch.items]
    for i, item in enumerate(batch.items):
        assert item.filename == f"{i}.jpg"
        assert item.compression_result.compressed_bytes == bytes([i]) * 1024
        assert item.compression_result.size_reduction_percent == 50
    assert notifier.messages == [{"level": "success", "message": "Compression completed successfully!"}]


def test_failure_stops_the_run_and_keeps_earlier_results():
    batch = make_batch(5)
    calls = []
    notifier = Notifier()

    assert compress_batch(batch, failing_at(2, calls), notifier) is False

    assert len(calls) == 3
    assert [item.status for item in batch.items] == ["done", "done", "pending", "pending", "pending"]
    assert len(notifier.messages) == 1
    assert notifier.messages[0]["level"] == "error"
    assert not batch.busy


def test_empty_batch_is_a_noop():
    batch = Batch("empty")
    calls = []
    notifier = Notifier()

    assert compress_batch(batch, halving_compressor(calls), notifier) is False

    assert calls == []
    assert batch.is_empty
    assert notifier.messages == [{"level": "error", "message": "Please upload some images to compress!"}]


def test_busy_batch_refuses_a_second_run():
    batch = make_batch(1)
    batch.busy = True

    with pytest.raises(BatchBusyError):
        compress_batch(batch, halving_compressor([]), Notifier())
    assert batch.items[0].compression_result is None


def test_item_removed_during_run_does_not_disturb_others():
    batch = make_batch(3)

    def compress(source_bytes):
        if source_bytes == batch.items[0].source_bytes and len(batch) == 3:
            batch.remove(0)
        return b"z"

    assert compress_batch(batch, compress, Notifier()) is True
    assert len(batch) == 2
    assert batch.is_complete


def test_upload_during_run_is_reported_as_pending():
    batch = make_batch(2)
    late = ImageItem(b"late" * 100, "image/jpeg", "late.jpg")
    notifier = Notifier()

    def compress(source_bytes):
        if late not in batch.items:
            batch.add([late])
        return b"z"

    assert compress_batch(batch, compress, notifier) is True

    assert [item.status for item in batch.items] == ["done", "done", "pending"]
    assert not batch.is_complete
    assert [m["level"] for m in notifier.messages] == ["info"]


def test_runs_with_the_real_compressor():
    batch = Batch("real")
    batch.add([
        ImageItem(make_image(size=(1600, 1200)), "image/jpeg"),
        ImageItem(make_image(size=(300, 200), fmt="PNG"), "image/png"),
    ])

    assert compress_batch(batch, compress_quality, Notifier()) is True
    assert all(item.compression_result.compressed_bytes[:2] == b"\xff\xd8" for item in batch.items)
