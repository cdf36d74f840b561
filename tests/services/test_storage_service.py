import os

import pytest
from fastapi import HTTPException

from app.services.storage_service import LocalImageStorage, detect_image_format


@pytest.fixture
def storage(tmp_path):
    return LocalImageStorage(str(tmp_path), "/storage/", max_bytes=4096)


class TestDetectImageFormat:

    @pytest.mark.parametrize("image_format", ["PNG", "JPEG", "GIF", "WEBP"])
    def test_real_images(self, image_bytes, image_format):
        assert detect_image_format(image_bytes(image_format)) == image_format

    @pytest.mark.parametrize("data", [
        b"<script>alert(1)</script>",
        b"\x89PNG\r\n\x1a\n" + b"\x00" * 64,
        b"",
    ])
    def test_non_images(self, data):
        assert detect_image_format(data) is None


class TestLocalImageStorage:

    def test_save_image(self, storage, tmp_path, image_bytes):
        data = image_bytes("PNG")
        stored = storage.save_image(data, "image/png", "qr-codes")

        assert stored.path.startswith("qr-codes/")
        assert stored.path.endswith(".png")
        assert stored.url == f"/storage/{stored.path}"
        with open(os.path.join(str(tmp_path), *stored.path.split("/")), "rb") as f:
            assert f.read() == data

    def test_extension_follows_decoded_format(self, storage, image_bytes):
        stored = storage.save_image(image_bytes("JPEG"), "image/png", "payments")
        assert stored.path.endswith(".jpg")

    def test_non_image_content_type_rejected(self, storage):
        with pytest.raises(HTTPException) as exc_info:
            storage.save_image(b"hello", "text/plain", "uploads")
        assert exc_info.value.status_code == 400
        assert exc_info.value.detail == "File must be an image"

    def test_markup_claiming_to_be_an_image_rejected(self, storage, tmp_path):
        with pytest.raises(HTTPException) as exc_info:
            storage.save_image(b"<script>alert(1)</script>", "image/png", "qr")
        assert exc_info.value.detail == "File must be an image"
        assert not os.path.exists(os.path.join(str(tmp_path), "qr"))

    def test_unsupported_image_format_rejected(self, storage, image_bytes):
        with pytest.raises(HTTPException) as exc_info:
            storage.save_image(image_bytes("BMP"), "image/bmp", "uploads")
        assert exc_info.value.detail == "File must be an image"

    def test_oversized_file_rejected(self, tmp_path):
        storage = LocalImageStorage(str(tmp_path), "/storage", max_bytes=5 * 1024 * 1024)
        with pytest.raises(HTTPException) as exc_info:
            storage.save_image(b"\x00" * (5 * 1024 * 1024 + 1), "image/png", "uploads")
        assert exc_info.value.detail == "File size must be less than 5MB"

    @pytest.mark.parametrize("folder", ["../etc", "/abs", "a//b", "qr codes", "qr\n"])
    def test_unsafe_folder_rejected(self, storage, image_bytes, folder):
        with pytest.raises(HTTPException) as exc_info:
            storage.save_image(image_bytes("PNG"), "image/png", folder)
        assert exc_info.value.detail == "Invalid folder name"
