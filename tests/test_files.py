import io

import pytest
from PIL import Image

from chattykit.files import (
    FileManager,
    FileProcessingError,
    format_file_size,
    generate_file_id,
)


def _png_bytes(size, mode="RGB", color=(10, 20, 30)):
    buffer = io.BytesIO()
    if mode == "RGBA":
        color = (*color, 128)
    Image.new(mode, size, color).save(buffer, format="PNG")
    return buffer.getvalue()


def test_format_file_size_bytes_and_units():
    assert format_file_size(512) == "512 bytes"
    assert format_file_size(1024) == "1.0 KB"
    assert format_file_size(1024 * 1024).endswith(" MB")
    assert format_file_size(3 * 1024 * 1024 * 1024).endswith(" GB")


def test_generate_file_id_is_sha256_hex():
    assert generate_file_id(b"") == (
        "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
    )
    first = generate_file_id(b"abc")
    assert len(first) == 64
    assert first == generate_file_id(b"abc")
    assert first != generate_file_id(b"abd")


def test_process_text_file(tmp_path):
    path = tmp_path / "notes.txt"
    path.write_bytes(b"hello there")
    result = FileManager().process_file(path)
    assert result.kind == "document"
    assert result.filename == "notes.txt"
    assert result.mime_type == "text/plain"
    assert result.data == b"hello there"
    assert result.id == generate_file_id(b"hello there")


def test_process_code_file(tmp_path):
    path = tmp_path / "script.py"
    path.write_text("print(1)\n")
    result = FileManager().process_file(path)
    assert result.kind == "document"
    assert result.mime_type == "text/x-python"


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileProcessingError, match="does not exist"):
        FileManager().process_file(tmp_path / "absent.txt")


def test_too_large_file_raises(tmp_path):
    path = tmp_path / "big.txt"
    path.write_bytes(b"x" * 50)
    with pytest.raises(FileProcessingError, match="exceeds maximum allowed size"):
        FileManager(max_file_size=10).process_file(path)


def test_unsupported_type_raises(tmp_path):
    path = tmp_path / "blob.bin"
    path.write_bytes(b"\x00\xff\x00\xfe")
    with pytest.raises(FileProcessingError, match="Unsupported file type"):
        FileManager().process_file(path)


def test_process_files_skips_failures(tmp_path):
    good = tmp_path / "a.md"
    good.write_text("# title")
    results = FileManager().process_files([good, tmp_path / "missing.txt"])
    assert [item.filename for item in results] == ["a.md"]
    assert results[0].mime_type == "text/markdown"


def test_large_image_is_shrunk_to_jpeg(tmp_path):
    path = tmp_path / "wide.png"
    path.write_bytes(_png_bytes((3000, 1000)))
    result = FileManager().process_file(path)
    assert result.kind == "image"
    image = Image.open(io.BytesIO(result.data))
    assert image.format == "JPEG"
    assert max(image.size) == 2048
    assert image.width > image.height


def test_png_with_alpha_stays_png():
    data = _png_bytes((50, 40), mode="RGBA")
    output = FileManager().process_image(data, "image/png")
    image = Image.open(io.BytesIO(output))
    assert image.format == "PNG"
    assert image.size == (50, 40)


def test_invalid_image_data_is_returned_unchanged():
    data = b"not an image at all"
    assert FileManager().process_image(data, "image/png") == data


def test_quality_and_dimension_are_clamped():
    manager = FileManager(image_quality=500, max_image_dimension=5)
    assert manager.image_quality == 100
    assert manager.max_image_dimension == 100
    manager.image_quality = 0
    assert manager.image_quality == 1
    manager.max_image_dimension = 4096
    assert manager.max_image_dimension == 4096


def test_type_checks():
    manager = FileManager()
    assert manager.is_image_file("image/png")
    assert manager.is_document_file("application/pdf")
    assert manager.is_code_file("text/x-scala")
    assert manager.is_file_type_supported("text/css")
    assert not manager.is_file_type_supported("application/x-foo")


def test_file_filter_shape():
    parts = FileManager().file_filter().split(";;")
    assert len(parts) == 5
    assert parts[0].startswith("All Supported Files (")
    assert parts[-1] == "All Files (*.*)"
    assert "*.svg" in parts[1]
    assert "*.scala" in parts[3]


def test_save_file_round_trip(tmp_path):
    target = tmp_path / "out.bin"
    FileManager().save_file(target, b"\x01\x02\x03")
    assert target.read_bytes() == b"\x01\x02\x03"


def test_save_file_to_directory_raises(tmp_path):
    with pytest.raises(FileProcessingError, match="Failed to create file"):
        FileManager().save_file(tmp_path, b"data")