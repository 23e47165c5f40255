from io import BytesIO

import pytest
from PIL import Image
from werkzeug.datastructures import FileStorage

from services.image_storage import ONLY_IMAGES, TOO_LARGE, UPLOAD_FAILED, ImageStorage


def _png_bytes(size=(8, 8)) -> bytes:
    buffer = BytesIO()
    Image.new("RGBA", size, (255, 0, 0, 128)).save(buffer, format="PNG")
    return buffer.getvalue()


def _upload(data: bytes, filename="olma.png", content_type="image/png") -> FileStorage:
    return FileStorage(stream=BytesIO(data), filename=filename, content_type=content_type)


@pytest.fixture
def storage(tmp_path):
    return ImageStorage(
        tmp_path / "static" / "uploads",
        tmp_path,
        lambda rel: f"http://testserver/{rel}",
        max_bytes=5 * 1024 * 1024,
    )


def test_upload_stores_jpeg_and_returns_url(storage, tmp_path):
    url = storage.upload(_upload(_png_bytes()), "products", user_id="u1")
    assert url.startswith("http://testserver/static/uploads/products/u1/olma_")
    assert url.endswith(".jpg")
    saved = tmp_path / url.replace("http://testserver/", "")
    with Image.open(saved) as image:
        assert image.format == "JPEG"


def test_rejects_non_image_mime(storage):
    with pytest.raises(ValueError, match=ONLY_IMAGES):
        storage.upload(_upload(b"%PDF-1.4", filename="doc.pdf", content_type="application/pdf"), "products")


def test_rejects_large_files(tmp_path):
    small = ImageStorage(tmp_path / "uploads", tmp_path, lambda rel: rel, max_bytes=100)
    with pytest.raises(ValueError, match=TOO_LARGE):
        small.upload(_upload(_png_bytes((64, 64)) + b"\0" * 200), "products")


def test_corrupt_image_fails(storage):
    with pytest.raises(ValueError, match=UPLOAD_FAILED):
        storage.upload(_upload(b"not really a png"), "banners")


def test_unknown_folder(storage):
    with pytest.raises(ValueError):
        storage.upload(_upload(_png_bytes()), "avatars")


def test_missing_file(storage):
    with pytest.raises(ValueError, match=UPLOAD_FAILED):
        storage.upload(None, "stores")


@pytest.mark.parametrize("user_id", ["../../../escaped", "a/b", "..", "u1\n"])
def test_user_folder_must_be_a_plain_name(storage, tmp_path, user_id):
    with pytest.raises(ValueError, match=UPLOAD_FAILED):
        storage.upload(_upload(_png_bytes()), "products", user_id=user_id)
    assert not (tmp_path / "escaped").exists()


def test_absolute_user_folder_is_rejected(storage, tmp_path):
    target = tmp_path / "abs_target"
    with pytest.raises(ValueError, match=UPLOAD_FAILED):
        storage.upload(_upload(_png_bytes()), "products", user_id=str(target))
    assert not target.exists()


def test_unwritable_folder_reports_upload_failure(storage, tmp_path):
    # a plain file where the folder directory should be
    (tmp_path / "static" / "uploads" / "stores").write_bytes(b"")
    with pytest.raises(ValueError, match=UPLOAD_FAILED):
        storage.upload(_upload(_png_bytes()), "stores")
