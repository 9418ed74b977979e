from fastapi import status
from fastapi.testclient import TestClient

from tests.consts import TEST_BUCKET_NAME

BOUNDARY = "gateway-test-boundary"


def multipart_body(*parts: str) -> bytes:
    body = "".join(f"--{BOUNDARY}\r\n{part}\r\n" for part in parts)
    return f"{body}--{BOUNDARY}--\r\n".encode()


def post_multipart(client: TestClient, body: bytes):
    return client.post(
        "/upload",
        content=body,
        headers={"Content-Type": f"multipart/form-data; boundary={BOUNDARY}"},
    )


def test_download_unknown_key(client: TestClient):
    response = client.get("/download/does-not-exist")
    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert "NoSuchKey" in response.json()["error"]


def test_upload_without_file_field(client: TestClient):
    response = client.post("/upload", files={"attachment": ("a.txt", b"data", "text/plain")})
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json() == {"error": "multipart field 'file' is required"}


def test_upload_file_field_is_not_a_file(client: TestClient):
    response = post_multipart(
        client,
        multipart_body('Content-Disposition: form-data; name="file"\r\n\r\njust text'),
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json() == {"error": "multipart field 'file' must be a file"}


def test_upload_file_without_content_type(client: TestClient):
    response = post_multipart(
        client,
        multipart_body('Content-Disposition: form-data; name="file"; filename="note.txt"\r\n\r\nhello-test'),
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json() == {"error": "multipart field 'file' has no Content-Type header"}


def test_upload_not_multipart(client: TestClient):
    response = client.post("/upload", json={"file": "hello"})
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json() == {"error": "request body must be multipart/form-data"}


def test_upload_storage_failure(client: TestClient, mocked_aws):
    mocked_aws.delete_bucket(Bucket=TEST_BUCKET_NAME)

    response = client.post("/upload", files={"file": ("a.txt", b"data", "text/plain")})
    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert "NoSuchBucket" in response.json()["error"]


def test_download_storage_failure(client: TestClient, mocked_aws):
    mocked_aws.delete_bucket(Bucket=TEST_BUCKET_NAME)

    response = client.get("/download/anything")
    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert "error" in response.json()


def test_unknown_route(client: TestClient):
    assert client.get("/download/").status_code == status.HTTP_404_NOT_FOUND
