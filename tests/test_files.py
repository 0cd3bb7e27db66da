"""Tests for the file and image checks."""

import io
import logging

import pytest

from fieldcheck.errors import ContractError
from fieldcheck.http import UploadFile
from fieldcheck.validation import ImageDimension, Validator
from fieldcheck.validation.files import detect_mime_type, kilobytes, sniff_mime_type


class BrokenUpload:
    """An upload whose content cannot be opened."""

    filename = "broken.bin"
    content_type = ""
    size = 1024

    def open(self) -> io.BytesIO:
        raise OSError("disk went away")


# ---------------------------------------------------------------------------
# Content type detection
# ---------------------------------------------------------------------------


class TestSniffing:
    @pytest.mark.parametrize(
        ("fmt", "expected"),
        [("PNG", "image/png"), ("JPEG", "image/jpeg"), ("GIF", "image/gif"), ("BMP", "image/bmp")],
    )
    def test_images(self, image_bytes, fmt: str, expected: str) -> None:
        assert sniff_mime_type(image_bytes(fmt, 4, 4)) == expected

    def test_webp(self) -> None:
        assert sniff_mime_type(b"RIFF\x10\x00\x00\x00WEBPVP8 ") == "image/webp"

    def test_pdf(self) -> None:
        assert sniff_mime_type(b"%PDF-1.7\n") == "application/pdf"

    def test_text(self) -> None:
        assert sniff_mime_type(b"Lorem ipsum dolor sit amet\n") == "text/plain"

    def test_binary(self) -> None:
        assert sniff_mime_type(b"\x00\x01\x02\x03") == "application/octet-stream"

    def test_empty(self) -> None:
        assert sniff_mime_type(b"") == "application/octet-stream"


class TestDetectMimeType:
    def test_declared_type_wins(self, image_bytes) -> None:
        upload = UploadFile.from_bytes("a.bin", image_bytes("PNG", 4, 4), "text/plain")
        assert detect_mime_type(upload) == "text/plain"

    def test_parameters_stripped(self) -> None:
        upload = UploadFile.from_bytes("a.txt", b"hello", "Text/Plain; charset=utf-8")
        assert detect_mime_type(upload) == "text/plain"

    def test_octet_stream_is_sniffed(self, image_bytes) -> None:
        upload = UploadFile.from_bytes("a.bin", image_bytes("PNG", 4, 4), "application/octet-stream")
        assert detect_mime_type(upload) == "image/png"

    def test_missing_type_is_sniffed(self, image_bytes) -> None:
        upload = UploadFile.from_bytes("upload", image_bytes("GIF", 4, 4))
        assert detect_mime_type(upload) == "image/gif"

    def test_falls_back_to_extension(self) -> None:
        upload = UploadFile.from_bytes("report.pdf", b"\x00\x01\x02")
        assert detect_mime_type(upload) == "application/pdf"

    def test_unknown(self) -> None:
        upload = UploadFile.from_bytes("blob", b"\x00\x01\x02")
        assert detect_mime_type(upload) == "application/octet-stream"


# ---------------------------------------------------------------------------
# Mime type
# ---------------------------------------------------------------------------


class TestFileMimeType:
    def test_allowed(self, jpeg_upload: UploadFile, png_upload: UploadFile) -> None:
        v = Validator()
        v.file_mime_type("k", jpeg_upload, "image/jpeg, image/png")
        v.file_mime_type("k", png_upload, "image/png")
        assert v.errors == {}

    def test_text(self, text_upload: UploadFile) -> None:
        v = Validator()
        v.file_mime_type("k", text_upload, "text/plain")
        assert v.errors == {}

    def test_not_allowed(self, png_upload: UploadFile) -> None:
        v = Validator()
        v.file_mime_type("k", png_upload, "image/jpeg")
        assert v.errors == {"k": ["must be a file of type 'image/jpeg'"]}

    def test_message_keeps_list_verbatim(self, png_upload: UploadFile) -> None:
        v = Validator()
        v.file_mime_type("k", png_upload, "image/jpeg,application/octet-stream")
        assert v.errors == {"k": ["must be a file of type 'image/jpeg,application/octet-stream'"]}

    def test_custom_message(self, jpeg_upload: UploadFile) -> None:
        v = Validator()
        v.file_mime_type("k", jpeg_upload, "application/pdf", message="Error")
        assert v.errors == {"k": ["Error"]}

    def test_sniffed_when_undeclared(self) -> None:
        upload = UploadFile.from_bytes("doc.pdf", b"%PDF-1.4\n%...")
        v = Validator()
        v.file_mime_type("k", upload, "application/pdf")
        assert v.errors == {}

    def test_empty_list_is_contract_error(self, png_upload: UploadFile) -> None:
        with pytest.raises(ContractError):
            Validator().file_mime_type("k", png_upload, " , ")

    def test_unreadable(self, caplog: pytest.LogCaptureFixture) -> None:
        v = Validator()
        with caplog.at_level(logging.DEBUG, logger="fieldcheck.files"):
            v.file_mime_type("k", BrokenUpload(), "image/png")
        assert v.errors == {"k": ["file could not be read"]}
        assert "broken.bin" in caplog.text

    def test_unreadable_ignores_custom_message(self) -> None:
        v = Validator()
        v.file_mime_type("k", BrokenUpload(), "image/png", message="Error")
        assert v.errors == {"k": ["file could not be read"]}


# ---------------------------------------------------------------------------
# Size
# ---------------------------------------------------------------------------


class TestFileSize:
    def test_kilobytes_round_up(self) -> None:
        assert kilobytes(0) == 0.0
        assert kilobytes(1) == 1.0
        assert kilobytes(1024) == 1.0
        assert kilobytes(1025) == 2.0

    def test_exact_minimum(self, jpeg_upload: UploadFile) -> None:
        v = Validator()
        v.file_size("k", jpeg_upload, jpeg_upload.size)
        assert v.errors == {}

    def test_within_bounds(self, gif_upload: UploadFile, text_upload: UploadFile) -> None:
        v = Validator()
        v.file_size("k", gif_upload, 0, 100_000_000)
        v.file_size("k", text_upload, 2, 100_000_000)
        v.file_size("k", text_upload, max_size=8)
        assert v.errors == {}

    def test_too_small(self, jpeg_upload: UploadFile) -> None:
        v = Validator()
        v.file_size("k", jpeg_upload, 2 * jpeg_upload.size)
        expected = f"file size cannot be less than '{kilobytes(2 * jpeg_upload.size):.1f}'KB"
        assert v.errors == {"k": [expected]}

    def test_too_large(self, png_upload: UploadFile) -> None:
        v = Validator()
        v.file_size("k", png_upload, 100, 1000)
        assert v.errors == {"k": ["file size cannot be larger than '1.0'KB"]}

    def test_both_bounds_violated(self, text_upload: UploadFile) -> None:
        v = Validator()
        v.file_size("k", text_upload, 2048, 4)
        assert v.errors == {"k": ["file size must be between '2.0'KB and '1.0'KB"]}

    def test_custom_message(self, text_upload: UploadFile) -> None:
        v = Validator()
        v.file_size("k", text_upload, max_size=4, message="Error")
        assert v.errors == {"k": ["Error"]}

    def test_no_bounds_is_contract_error(self, text_upload: UploadFile) -> None:
        with pytest.raises(ContractError):
            Validator().file_size("k", text_upload)


# ---------------------------------------------------------------------------
# Image format
# ---------------------------------------------------------------------------


class TestIsImage:
    def test_formats(
        self, jpeg_upload: UploadFile, png_upload: UploadFile, gif_upload: UploadFile
    ) -> None:
        v = Validator()
        assert v.is_image("k", jpeg_upload, "JPEG") is True
        assert v.is_image("k", png_upload, "PNG") is True
        assert v.is_image("k", gif_upload, "Gif") is True
        assert v.is_image("k", jpeg_upload, "jpg") is True
        assert v.is_image("k", gif_upload) is True
        assert v.errors == {}

    def test_several_formats(self, gif_upload: UploadFile) -> None:
        v = Validator()
        assert v.is_image("k", gif_upload, "png, gif") is True
        assert v.errors == {}

    @pytest.mark.parametrize(
        ("fixture", "formats"),
        [("jpeg_upload", "PNG"), ("png_upload", "JPEG"), ("gif_upload", "PNG"), ("text_upload", "PNG")],
    )
    def test_wrong_format(self, request: pytest.FixtureRequest, fixture: str, formats: str) -> None:
        upload = request.getfixturevalue(fixture)
        v = Validator()
        assert v.is_image("k", upload, formats) is False
        assert v.errors == {"k": [f"must be an image of '{formats}' format"]}

    def test_not_an_image(self, text_upload: UploadFile) -> None:
        v = Validator()
        assert v.is_image("k", text_upload) is False
        assert v.errors == {"k": ["must be an image"]}

    def test_bmp_is_not_accepted(self, image_bytes) -> None:
        upload = UploadFile.from_bytes("a.bmp", image_bytes("BMP", 4, 4))
        v = Validator()
        assert v.is_image("k", upload) is False
        assert v.errors == {"k": ["must be an image"]}

    def test_custom_message(self, text_upload: UploadFile) -> None:
        v = Validator()
        v.is_image("k", text_upload, "PNG", message="Error")
        assert v.errors == {"k": ["Error"]}

    def test_unknown_format_name(self, png_upload: UploadFile) -> None:
        with pytest.raises(ContractError, match="tiff"):
            Validator().is_image("k", png_upload, "png, tiff")


# ---------------------------------------------------------------------------
# Image dimensions
# ---------------------------------------------------------------------------


class TestImageDimensions:
    def test_within_bounds(
        self, jpeg_upload: UploadFile, png_upload: UploadFile, gif_upload: UploadFile
    ) -> None:
        v = Validator()
        v.image_dimensions("k", jpeg_upload, ImageDimension(200, 300))
        v.image_dimensions("k", png_upload, ImageDimension(200, 300), ImageDimension(200, 300))
        v.image_dimensions("k", gif_upload, max_dimension=ImageDimension(200, 300))
        assert v.errors == {}

    def test_too_small(self, jpeg_upload: UploadFile) -> None:
        v = Validator()
        v.image_dimensions("k", jpeg_upload, ImageDimension(5000, 5000))
        assert v.errors == {"k": ["image dimension (W x H) cannot be less than '5000 x 5000' pixels"]}

    def test_too_large(self, gif_upload: UploadFile) -> None:
        v = Validator()
        v.image_dimensions("k", gif_upload, max_dimension=ImageDimension(100, 100))
        assert v.errors == {"k": ["image dimension (W x H) cannot be more than '100 x 100' pixels"]}

    def test_between(self, png_upload: UploadFile) -> None:
        v = Validator()
        v.image_dimensions("k", png_upload, ImageDimension(300, 50), ImageDimension(300, 100))
        assert v.errors == {
            "k": ["image dimension (W x H) must be between '300 x 50' and '300 x 100' pixels"]
        }

    def test_custom_message(self, jpeg_upload: UploadFile) -> None:
        v = Validator()
        v.image_dimensions("k", jpeg_upload, ImageDimension(3000, 300), message="Error")
        assert v.errors == {"k": ["Error"]}

    @pytest.mark.parametrize("message", [None, "Error"])
    def test_not_an_image(self, text_upload: UploadFile, message: str | None) -> None:
        v = Validator()
        v.image_dimensions("k", text_upload, max_dimension=ImageDimension(100, 100), message=message)
        assert v.errors == {
            "k": ["File is not an image. Only dimensions of image files can be determined."]
        }

    def test_corrupt_image(self) -> None:
        upload = UploadFile.from_bytes("bad.png", b"\x89PNG\r\n\x1a\n" + b"\x00" * 16, "image/png")
        v = Validator()
        v.image_dimensions("k", upload, ImageDimension(1, 1))
        assert v.errors == {"k": ["image dimensions could not be read"]}

    @pytest.mark.parametrize("message", [None, "Error"])
    def test_unreadable_upload(self, message: str | None) -> None:
        v = Validator()
        v.image_dimensions("k", BrokenUpload(), ImageDimension(1, 1), message=message)
        assert v.errors == {"k": ["file could not be read"]}

    def test_no_bounds_is_contract_error(self, png_upload: UploadFile) -> None:
        with pytest.raises(ContractError):
            Validator().image_dimensions("k", png_upload)
