import io
import zipfile


def download_name(index):
    """Positional name for the item at 0-based `index`; output is always JPEG"""
    return f"compressed_image_{index + 1}.jpg"


def build_archive(items):
    """ZIP of every item's compressed bytes, in batch order"""
    zip_buffer = io.BytesIO()

    with zipfile.ZipFile(zip_buffer, "w", zipfile.ZIP_DEFLATED) as z:
        for i, item in enumerate(items):
            z.writestr(download_name(i), item.compression_result.compressed_bytes)

    zip_buffer.seek(0)
    return zip_buffer
