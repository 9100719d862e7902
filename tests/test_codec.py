from __future__ import annotations

import io
import struct

import numpy as np
import pytest
from PIL import Image

from bmp_studio.config import Settings
from bmp_studio.models.errors import FormatError
from bmp_studio.models.pixel_buffer import row_stride
from bmp_studio.services.codec_service import CodecService
from bmp_studio.services.image_service import ImageService

from conftest import make_image


def build_bmp(rows, bit_count=24, compression=0, signature=b"BM", gap=b"", filler=b"\x00"):
    """Собирает BMP вручную; `rows` — строки сверху вниз из кортежей (r, g, b)."""
    height, width = len(rows), len(rows[0])
    stride = row_stride(width)
    body = b""
    for row in reversed(rows):
        line = b"".join(bytes((b, g, r)) for r, g, b in row)
        body += line + filler * (stride - len(line))
    offset = 54 + len(gap)
    file_header = signature + struct.pack("<IHHI", offset + len(body), 0, 0, offset)
    info_header = struct.pack(
        "<IiiHHIIiiII", 40, width, height, 1, bit_count, compression, len(body), 2835, 2835, 0, 0
    )
    return file_header + info_header + gap + body


ROWS = [
    [(255, 0, 0), (0, 255, 0), (0, 0, 255)],
    [(10, 20, 30), (40, 50, 60), (70, 80, 90)],
]


@pytest.fixture
def codec() -> CodecService:
    return CodecService()


@pytest.mark.parametrize("width, stride", [(1, 4), (2, 8), (3, 12), (4, 12), (5, 16)])
def test_row_stride(width, stride):
    assert row_stride(width) == stride


def test_decode_reads_rows_top_down_in_rgb(codec):
    image = codec.decode(build_bmp(ROWS))

    assert (image.width, image.height) == (3, 2)
    assert image.pixels.shape == (2, 3, 3)
    assert image.pixels.dtype == np.uint8
    np.testing.assert_array_equal(image.pixels, np.array(ROWS, dtype=np.uint8))
    assert image.info_header.x_pixels_per_meter == 2835


def test_round_trip_is_byte_exact(codec):
    data = build_bmp(ROWS)
    assert codec.encode(codec.decode(data)) == data


def test_round_trip_keeps_non_zero_row_padding(codec):
    data = build_bmp([[(3, 2, 1)], [(6, 5, 4)]], filler=b"\xaa")
    image = codec.decode(data)

    assert data[54:] == bytes.fromhex("040506aa010203aa")
    np.testing.assert_array_equal(image.pixels, [[[3, 2, 1]], [[6, 5, 4]]])
    assert codec.encode(image) == data


def test_padding_survives_in_place_edits(codec):
    data = build_bmp(ROWS, filler=b"\x5c")
    image = codec.decode(data)
    image.pixels[0, 0] = (1, 1, 1)

    out = codec.encode(image)
    stride = row_stride(3)
    assert out[54 + 9:54 + stride] == b"\x5c\x5c\x5c"
    assert out[54 + stride + 9:54 + 2 * stride] == b"\x5c\x5c\x5c"


def test_round_trip_preserves_gap_before_pixels(codec):
    data = build_bmp(ROWS, gap=b"\x01\x02\x03\x04")
    image = codec.decode(data)

    assert image.gap == b"\x01\x02\x03\x04"
    np.testing.assert_array_equal(image.pixels, np.array(ROWS, dtype=np.uint8))
    assert codec.encode(image) == data


def test_encoded_file_is_readable_by_pillow(codec, gradient_image):
    data = codec.encode(gradient_image)
    with Image.open(io.BytesIO(data)) as pil_image:
        assert pil_image.size == (gradient_image.width, gradient_image.height)
        decoded = np.asarray(pil_image.convert("RGB"))
    np.testing.assert_array_equal(decoded, gradient_image.pixels)


def test_decode_pillow_written_bmp(codec, gradient_image):
    buf = io.BytesIO()
    Image.fromarray(gradient_image.pixels).save(buf, format="BMP")
    image = codec.decode(buf.getvalue())
    np.testing.assert_array_equal(image.pixels, gradient_image.pixels)


@pytest.mark.parametrize(
    "data",
    [
        build_bmp(ROWS, signature=b"XX"),
        build_bmp(ROWS, bit_count=32),
        build_bmp(ROWS, compression=1),
        build_bmp(ROWS)[:-1],
        b"BM",
    ],
    ids=["signature", "bit-depth", "compression", "truncated", "short-header"],
)
def test_decode_rejects_malformed_input(codec, data):
    with pytest.raises(FormatError):
        codec.decode(data)


def test_decode_rejects_non_positive_height(codec):
    data = bytearray(build_bmp(ROWS))
    struct.pack_into("<i", data, 22, -2)
    with pytest.raises(FormatError):
        codec.decode(bytes(data))


def test_decode_respects_pixel_limit():
    codec = CodecService(Settings(max_pixels=5))
    with pytest.raises(FormatError):
        codec.decode(build_bmp(ROWS))


def test_encode_uses_current_dimensions(codec):
    image = codec.decode(build_bmp(ROWS))
    image.replace_pixels(np.full((1, 1, 3), 7, dtype=np.uint8))

    data = codec.encode(image)
    assert len(data) == 54 + row_stride(1)
    assert data[54:] == b"\x07\x07\x07\x00"
    assert image.info_header.image_size == row_stride(1)
    assert image.file_header.file_size == 54 + 2 * row_stride(3)
    np.testing.assert_array_equal(codec.decode(data).pixels, image.pixels)


def test_image_service_save_and_load(tmp_path, gradient_image):
    service = ImageService()
    path = service.save_image(gradient_image, tmp_path / "out.bmp")

    loaded = service.load_image(path)
    np.testing.assert_array_equal(loaded.pixels, gradient_image.pixels)
    assert path.read_bytes() == CodecService().encode(gradient_image)


def test_image_service_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        ImageService().load_image(tmp_path / "missing.bmp")


def test_describe_lists_header_fields():
    image = make_image(np.zeros((2, 3, 3), dtype=np.uint8))
    report = ImageService().describe(image)

    lines = report.splitlines()
    assert "width: 3" in lines
    assert "height: 2" in lines
    assert "size: 40" in lines
    assert "bit count: 24" in lines
