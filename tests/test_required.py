"""Tests for Validator.required and its emptiness rules."""

import io

import pytest

from fieldcheck.address import Address, AddressList
from fieldcheck.errors import ContractError
from fieldcheck.http import UploadFile
from fieldcheck.validation import Validator


def required_errors(value: object, **kwargs) -> dict[str, list[str]]:
    v = Validator()
    v.required("k", value, **kwargs)
    return v.errors


SET = {"k": ["must be set"]}


class TestEmptyValues:
    @pytest.mark.parametrize(
        "value",
        [
            "",
            " ",
            "\t\n",
            0,
            0.0,
            False,
            None,
            b"",
            bytearray(),
            [],
            (),
            set(),
            frozenset(),
            [None, ""],
            ("",),
            Address(),
            Address(name="Martin"),
            AddressList(),
        ],
    )
    def test_empty_is_error(self, value: object) -> None:
        assert required_errors(value) == SET

    @pytest.mark.parametrize(
        "value",
        [
            "a",
            " x ",
            1,
            -1,
            0.5,
            True,
            b"\x00",
            ["a"],
            [None, "a"],
            [" "],
            [0],
            ("x",),
            {"x"},
            Address("martin@example.com"),
            AddressList([Address("martin@example.com")]),
        ],
    )
    def test_set_is_valid(self, value: object) -> None:
        assert required_errors(value) == {}

    def test_custom_message(self) -> None:
        assert required_errors("", message="foo") == {"k": ["foo"]}


class TestStreams:
    def test_empty_stream(self) -> None:
        assert required_errors(io.BytesIO()) == SET

    def test_stream_with_content(self) -> None:
        assert required_errors(io.BytesIO(b"content")) == {}

    def test_stream_position_restored(self) -> None:
        stream = io.BytesIO(b"content")
        stream.seek(2)
        Validator().required("k", stream)
        assert stream.tell() == 2

    def test_stream_at_end_is_empty(self) -> None:
        stream = io.BytesIO(b"content")
        stream.seek(0, io.SEEK_END)
        assert required_errors(stream) == SET

    def test_closed_stream_is_empty(self) -> None:
        stream = io.BytesIO(b"content")
        stream.close()
        assert required_errors(stream) == SET


class TestUploads:
    def test_upload_with_content(self, text_upload: UploadFile) -> None:
        assert required_errors(text_upload) == {}

    def test_zero_size(self) -> None:
        assert required_errors(UploadFile.from_bytes("empty.txt", b"")) == SET

    def test_unreadable_upload(self) -> None:
        class Broken(UploadFile):
            def open(self):
                raise OSError("gone")

        upload = Broken(filename="x.txt", content_type="text/plain", size=4, _content=b"abcd")
        assert required_errors(upload) == SET


class TestUnsupportedTypes:
    @pytest.mark.parametrize("value", [{"a": 1}, object(), 1j])
    def test_raises_contract_error(self, value: object) -> None:
        with pytest.raises(ContractError, match="not a supported type"):
            Validator().required("k", value)

    def test_contract_error_is_type_error(self) -> None:
        with pytest.raises(TypeError):
            Validator().required("k", {"a": 1})

    def test_nothing_recorded(self) -> None:
        v = Validator()
        with pytest.raises(ContractError):
            v.required("k", object())
        assert v.errors == {}
