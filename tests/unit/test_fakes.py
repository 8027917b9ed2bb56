"""Tests for fake implementations to ensure they work correctly."""

import asyncio
import io

import pytest
from botocore.exceptions import ClientError
from PIL import Image

from image_optimizer.testing.fakes import (
    FakeAsyncS3Client,
    create_test_image,
    make_s3_event,
    make_s3_record,
    setup_test_s3_environment,
)


class TestFakeAsyncS3Client:
    """Tests for FakeAsyncS3Client to ensure it behaves like the real client."""

    def test_get_object_not_found_is_client_error(self):
        client = FakeAsyncS3Client()
        client.create_bucket("bucket")

        with pytest.raises(ClientError) as excinfo:
            asyncio.run(client.get_object(Bucket="bucket", Key="missing.jpg"))

        assert excinfo.value.response["Error"]["Code"] == "NoSuchKey"

    def test_put_then_get_roundtrip(self):
        client = FakeAsyncS3Client()
        client.create_bucket("bucket")

        async def roundtrip():
            await client.put_object(
                Bucket="bucket", Key="a.webp", Body=b"data", ContentType="image/webp",
                Metadata={"k": "v"},
            )
            response = await client.get_object(Bucket="bucket", Key="a.webp")
            async with response["Body"] as stream:
                return await stream.read(), response["Metadata"]

        assert asyncio.run(roundtrip()) == (b"data", {"k": "v"})

    def test_fail_only_matching_key(self):
        client = setup_test_s3_environment()
        client.fail("GetObject", key="images/photo1.jpg")

        with pytest.raises(ClientError):
            asyncio.run(client.get_object(Bucket="test-source", Key="images/photo1.jpg"))
        asyncio.run(client.get_object(Bucket="test-source", Key="images/logo.png"))

    def test_list_objects_v2_pages(self):
        client = setup_test_s3_environment()

        first = asyncio.run(
            client.list_objects_v2(Bucket="test-source", Prefix="images/", MaxKeys=4)
        )
        second = asyncio.run(
            client.list_objects_v2(
                Bucket="test-source",
                Prefix="images/",
                MaxKeys=4,
                ContinuationToken=first["NextContinuationToken"],
            )
        )

        assert first["IsTruncated"] is True
        assert len(first["Contents"]) == 4
        assert second["IsTruncated"] is False
        assert "NextContinuationToken" not in second
        assert len(second["Contents"]) == 2

    def test_async_context_manager(self):
        client = FakeAsyncS3Client()

        async def enter():
            async with client as s3:
                return s3

        assert asyncio.run(enter()) is client


class TestHelpers:
    def test_create_test_image_formats(self):
        image = Image.open(io.BytesIO(create_test_image(30, 20, "PNG", "RGBA")))
        assert image.format == "PNG"
        assert image.mode == "RGBA"
        assert image.size == (30, 20)

    def test_make_s3_record_encodes_key(self):
        record = make_s3_record("bucket", "my photos/summer day.jpg")
        assert record["s3"]["object"]["key"] == "my+photos/summer+day.jpg"
        assert record["s3"]["bucket"]["name"] == "bucket"

    def test_make_s3_event(self):
        event = make_s3_event([("a", "1.jpg"), ("b", "2.png")])
        assert [r["s3"]["bucket"]["name"] for r in event["Records"]] == ["a", "b"]
