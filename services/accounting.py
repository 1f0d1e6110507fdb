import math


def to_kib(size_bytes):
    return size_bytes / 1024


def round_half_up(value):
    """Round to the nearest integer with halves going up (2.5 -> 3, -2.5 -> -2)"""
    return int(math.floor(value + 0.5))


def size_reduction_percent(original_bytes, compressed_bytes):
    """
    Percent saved, computed from unrounded KiB sizes and rounded once.
    Negative when the output grew. A zero-byte original reports 0.
    """
    original_kb = to_kib(original_bytes)
    compressed_kb = to_kib(compressed_bytes)
    if original_kb == 0:
        return 0
    return round_half_up((original_kb - compressed_kb) / original_kb * 100)


def size_report(original_bytes, compressed_bytes):
    """Rounded KB sizes and reduction, keyed the way the API returns them"""
    return {
        "originalSize": round_half_up(to_kib(original_bytes)),
        "compressedSize": round_half_up(to_kib(compressed_bytes)),
        "sizeReduction": size_reduction_percent(original_bytes, compressed_bytes),
    }
