"""Tests for the GCS uploader (storage client mocked)"""
import base64
from datetime import timedelta

import pytest
from unittest.mock import Mock, patch

from shopsite_api.core.asset_uploader import (
    CACHE_CONTROL,
    GCSUploader,
    decode_data_url,
    normalize_data_url,
)
from shopsite_api.core.config import Settings
from shopsite_api.models.errors import ApplicationError, ErrorCode
from shopsite_api.models.schemas import ImageUpload

from conftest import PNG_B64, PNG_DATA_URL


@pytest.fixture
def storage_client():
    client = Mock()
    client.bucket.return_value.blob.return_value.generate_signed_url.return_value = "https://signed.example/put"
    return client


@pytest.fixture
def uploader(storage_client):
    return GCSUploader(storage_client, "barber-sites")


def _blob(storage_client):
    return storage_client.bucket.return_value.blob.return_value


class TestDataUrls:

    @pytest.mark.parametrize("filename,mime", [
        ("a.png", "image/png"),
        ("a.webp", "image/webp"),
        ("a.gif", "image/gif"),
        ("a.JPG", "image/jpeg"),
        ("a.jpeg", "image/jpeg"),
        ("noext", "image/jpeg"),
    ])
    def test_normalize_infers_mime(self, filename, mime):
        assert normalize_data_url("QUJD", filename) == f"data:{mime};base64,QUJD"

    def test_normalize_keeps_existing_prefix(self):
        assert normalize_data_url(PNG_DATA_URL, "x.jpg") == PNG_DATA_URL

    def test_decode(self):
        mime, payload = decode_data_url("data:image/png;base64,QUJD")
        assert mime == "image/png"
        assert payload == b"ABC"

    @pytest.mark.parametrize("value", ["QUJD", "data:image/png,QUJD", "data:image/png;base64,***"])
    def test_decode_rejects_malformed(self, value):
        with pytest.raises(ValueError):
            decode_data_url(value)


class TestUpload:

    @pytest.mark.asyncio
    async def test_upload_stores_public_object(self, uploader, storage_client):
        result = await uploader.upload("my-shop", "hero.png", "data:image/png;base64,QUJD")

        assert result.public_url == "https://storage.googleapis.com/barber-sites/my-shop/hero.png"
        assert result.file_path == "my-shop/hero.png"
        storage_client.bucket.return_value.blob.assert_called_with("my-shop/hero.png")
        blob = _blob(storage_client)
        blob.upload_from_string.assert_called_once_with(b"ABC", content_type="image/png")
        blob.make_public.assert_called_once()
        assert blob.cache_control == CACHE_CONTROL

    @pytest.mark.asyncio
    async def test_malformed_data_url_raises(self, uploader):
        with pytest.raises(ValueError):
            await uploader.upload("s", "x.png", "not a data url")


class TestUploadBatch:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("parallel", [False, True])
    async def test_partial_failure_accounting(self, uploader, storage_client, parallel):
        _blob(storage_client).upload_from_string.side_effect = [None, RuntimeError("503 backend"), None]
        images = [
            ImageUpload(key="hero", filename="hero.png", base64=PNG_B64),
            ImageUpload(key="about", filename="about.png", base64=PNG_B64),
            ImageUpload(key="gallery0", filename="g0.png", base64=PNG_B64),
            ImageUpload(key="gallery1", filename="g1.png"),
        ]

        result = await uploader.upload_batch("my-shop", images, parallel=parallel)

        # 4 items, 2 failures -> 2 URLs and 2 errors
        assert len(result.image_urls) == 2
        assert len(result.errors) == 2
        assert {e.error for e in result.errors} >= {"Missing required fields"}
        assert "gallery1" in {e.key for e in result.errors}

    @pytest.mark.asyncio
    async def test_sequential_order_maps_keys(self, uploader, storage_client):
        _blob(storage_client).upload_from_string.side_effect = [None, RuntimeError("503 backend"), None]
        images = [
            ImageUpload(key="hero", filename="hero.png", base64=PNG_B64),
            ImageUpload(key="about", filename="about.png", base64=PNG_B64),
            ImageUpload(key="gallery0", filename="g0.png", base64=PNG_B64),
        ]

        result = await uploader.upload_batch("my-shop", images)

        assert result.image_urls == {
            "hero": "https://storage.googleapis.com/barber-sites/my-shop/hero.png",
            "gallery0": "https://storage.googleapis.com/barber-sites/my-shop/g0.png",
        }
        assert [(e.key, e.error) for e in result.errors] == [("about", "503 backend")]

    @pytest.mark.asyncio
    async def test_missing_key_reported_as_unknown(self, uploader):
        result = await uploader.upload_batch("s", [ImageUpload(filename="x.png", base64=PNG_B64)])

        assert result.image_urls == {}
        assert [(e.key, e.error) for e in result.errors] == [("unknown", "Missing required fields")]

    @pytest.mark.asyncio
    async def test_all_failed_batch_does_not_raise(self, uploader, storage_client):
        _blob(storage_client).upload_from_string.side_effect = RuntimeError("down")
        images = [ImageUpload(key=f"k{i}", filename=f"{i}.png", base64=PNG_B64) for i in range(3)]

        result = await uploader.upload_batch("s", images)

        assert result.image_urls == {}
        assert len(result.errors) == 3

    @pytest.mark.asyncio
    @pytest.mark.parametrize("parallel", [False, True])
    async def test_duplicate_key_reported(self, uploader, storage_client, parallel):
        images = [
            ImageUpload(key="hero", filename="a.png", base64=PNG_B64),
            ImageUpload(key="hero", filename="b.png", base64=PNG_B64),
        ]

        result = await uploader.upload_batch("s", images, parallel=parallel)

        # Every item accounted for: 1 URL + 1 error
        assert result.image_urls == {"hero": "https://storage.googleapis.com/barber-sites/s/a.png"}
        assert [(e.key, e.error) for e in result.errors] == [("hero", "Duplicate image key")]
        assert _blob(storage_client).upload_from_string.call_count == 1


class TestSignedUploadUrls:

    @pytest.mark.asyncio
    async def test_signed_put_urls(self, uploader, storage_client):
        urls = await uploader.signed_upload_urls("my-shop", ["hero.jpg", "about.jpg"])

        assert [u.filename for u in urls] == ["hero.jpg", "about.jpg"]
        assert urls[0].signed_url == "https://signed.example/put"
        assert urls[1].public_url == "https://storage.googleapis.com/barber-sites/my-shop/about.jpg"
        _blob(storage_client).generate_signed_url.assert_called_with(
            version="v4",
            expiration=timedelta(minutes=15),
            method="PUT",
            content_type="image/jpeg",
        )


class TestFromSettings:

    def test_missing_credentials(self):
        with pytest.raises(ApplicationError) as exc_info:
            GCSUploader.from_settings(Settings(_env_file=None, gcs_bucket_name="b"))
        assert exc_info.value.code == ErrorCode.CONFIGURATION_ERROR

    def test_missing_bucket(self):
        with pytest.raises(ApplicationError) as exc_info:
            GCSUploader.from_settings(Settings(_env_file=None, gcp_service_account_json="{}"))
        assert exc_info.value.code == ErrorCode.CONFIGURATION_ERROR

    def test_malformed_json(self):
        settings = Settings(_env_file=None, gcp_service_account_json="{not json", gcs_bucket_name="b")
        with pytest.raises(ApplicationError) as exc_info:
            GCSUploader.from_settings(settings)
        assert exc_info.value.code == ErrorCode.CONFIGURATION_ERROR

    def test_builds_client_from_service_account(self):
        settings = Settings(
            _env_file=None,
            gcp_service_account_json='{"project_id": "p1", "type": "service_account"}',
            gcs_bucket_name="barber-sites",
            gcs_signed_url_minutes=30,
        )
        with patch("shopsite_api.core.asset_uploader.storage.Client.from_service_account_info") as factory:
            uploader = GCSUploader.from_settings(settings)

        factory.assert_called_once_with({"project_id": "p1", "type": "service_account"}, project="p1")
        assert uploader.bucket_name == "barber-sites"
        assert uploader.signed_url_minutes == 30
