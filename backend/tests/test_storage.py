"""
Tests for the storage clients.
Real clients are exercised against httpx.MockTransport.
"""
import json
import time

import httpx
import pytest

from dashboard.config import Settings
from dashboard.schemas.files import FileStatus
from dashboard.storage.drive_client import DriveStorageClient, MockDriveStorageClient
from dashboard.storage.factory import get_primary_client, get_sharing_client
from dashboard.storage.supabase_client import MockSupabaseStorageClient, SupabaseStorageClient

from conftest import DRIVE_TEST_CONFIG, SUPABASE_TEST_CONFIG, make_pdf

STORAGE_ROOT = "https://project.supabase.test/storage/v1"


class Recorder:
    """MockTransport handler that records requests and replays a response."""
    
    def __init__(self, status_code=200, json_body=None, exc=None, content=None):
        self.status_code = status_code
        self.json_body = json_body if json_body is not None else {}
        self.exc = exc
        self.content = content
        self.requests = []
    
    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.exc is not None:
            raise self.exc("connection refused", request=request)
        if self.content is not None:
            return httpx.Response(self.status_code, content=self.content)
        return httpx.Response(self.status_code, json=self.json_body)
    
    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


class TestMockSupabaseClient:
    """Tests for the unconfigured primary store."""
    
    @pytest.mark.asyncio
    async def test_upload_returns_mock_result(self, mock_primary):
        result = await mock_primary.upload(make_pdf("a.pdf", size=100))
        
        assert result.success is True
        assert result.is_mock is True
        assert result.name == "a.pdf"
        assert result.size == 100
        assert result.url == "mock://files/a.pdf"
        assert result.file_id.startswith("mock_")
    
    @pytest.mark.asyncio
    async def test_list_returns_fixed_records(self, mock_primary):
        files = await mock_primary.list_files()
        
        assert [f.id for f in files] == ["1", "2", "3"]
        assert [f.name for f in files] == ["intro-to-js.pdf", "lecture3.mp4", "python-basics.pdf"]
        assert files[1].status == FileStatus.PENDING
        assert files[0].size == 1200 * 1024
        created = [f.created_at for f in files]
        assert created == sorted(created, reverse=True)
    
    @pytest.mark.asyncio
    async def test_delete_and_update_always_succeed(self, mock_primary):
        assert await mock_primary.delete("anything.pdf") is True
        assert await mock_primary.update_file("1", {"status": "published"}) is True
    
    def test_is_mock(self, mock_primary):
        assert mock_primary.is_mock is True
    
    @pytest.mark.asyncio
    async def test_upload_waits_for_simulated_latency(self):
        client = MockSupabaseStorageClient(latency_seconds=0.05)
        
        started = time.monotonic()
        result = await client.upload(make_pdf())
        
        assert time.monotonic() - started >= 0.04
        assert result.success is True


class TestSupabaseClient:
    """Tests for the Supabase Storage REST client."""
    
    @pytest.mark.asyncio
    async def test_upload_request_contract(self):
        recorder = Recorder(json_body={"Key": "admin-files/notes.pdf"})
        client = SupabaseStorageClient(SUPABASE_TEST_CONFIG, transport=recorder.transport)
        
        result = await client.upload(make_pdf("notes.pdf"))
        await client.aclose()
        
        assert result.success is True
        assert result.is_mock is False
        assert result.url == f"{STORAGE_ROOT}/object/public/admin-files/notes.pdf"
        
        request = recorder.requests[0]
        assert request.method == "POST"
        assert str(request.url) == f"{STORAGE_ROOT}/object/admin-files/notes.pdf"
        assert request.headers["Authorization"] == "Bearer service-key"
        assert request.headers["x-upsert"] == "true"
        assert request.headers["content-type"].startswith("multipart/form-data")
        assert b"%PDF-1.4" in request.content
    
    @pytest.mark.asyncio
    async def test_upload_sends_metadata_field(self):
        recorder = Recorder()
        client = SupabaseStorageClient(SUPABASE_TEST_CONFIG, transport=recorder.transport)
        
        await client.upload(make_pdf(), {"owner": "admin"})
        await client.aclose()
        
        body = recorder.requests[0].content
        assert b'name="metadata"' in body
        assert json.dumps({"owner": "admin"}).encode() in body
    
    @pytest.mark.asyncio
    async def test_upload_http_error_is_failure_result(self):
        recorder = Recorder(status_code=500)
        client = SupabaseStorageClient(SUPABASE_TEST_CONFIG, transport=recorder.transport)
        
        result = await client.upload(make_pdf())
        await client.aclose()
        
        assert result.success is False
        assert "Upload failed" in result.error
        assert result.url is None
        assert len(recorder.requests) == 1
    
    @pytest.mark.asyncio
    async def test_upload_network_error_is_failure_result(self):
        recorder = Recorder(exc=httpx.ConnectError)
        client = SupabaseStorageClient(SUPABASE_TEST_CONFIG, transport=recorder.transport)
        
        result = await client.upload(make_pdf())
        await client.aclose()
        
        assert result.success is False
        assert "connection refused" in result.error
    
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "name",
        ["../../bucket/other-bucket/evil.pdf", "nested/evil.pdf", "..\\evil.pdf", "..", ".", ""],
    )
    async def test_upload_rejects_names_outside_bucket(self, name):
        recorder = Recorder()
        client = SupabaseStorageClient(SUPABASE_TEST_CONFIG, transport=recorder.transport)
        
        result = await client.upload(make_pdf(name))
        await client.aclose()
        
        assert result.success is False
        assert "Invalid object name" in result.error
        assert recorder.requests == []
    
    @pytest.mark.asyncio
    async def test_upload_encodes_name_as_one_segment(self):
        recorder = Recorder()
        client = SupabaseStorageClient(SUPABASE_TEST_CONFIG, transport=recorder.transport)
        
        result = await client.upload(make_pdf("week 1 #notes?.pdf"))
        await client.aclose()
        
        expected = f"{STORAGE_ROOT}/object/admin-files/week%201%20%23notes%3F.pdf"
        assert str(recorder.requests[0].url) == expected
        assert result.url == f"{STORAGE_ROOT}/object/public/admin-files/week%201%20%23notes%3F.pdf"
    
    @pytest.mark.asyncio
    async def test_upload_unserializable_metadata_is_failure_result(self):
        recorder = Recorder()
        client = SupabaseStorageClient(SUPABASE_TEST_CONFIG, transport=recorder.transport)
        
        result = await client.upload(make_pdf(), {"when": object()})
        await client.aclose()
        
        assert result.success is False
        assert recorder.requests == []
    
    @pytest.mark.asyncio
    async def test_list_maps_objects(self):
        recorder = Recorder(json_body={
            "objects": [
                {"id": 7, "name": "x.pdf", "size": 10, "status": "published", "createdAt": "2025-11-01"},
                {"id": "8", "name": "y.pdf", "status": "pending", "created_at": "2025-10-01T09:30:00Z"},
            ]
        })
        client = SupabaseStorageClient(SUPABASE_TEST_CONFIG, transport=recorder.transport)
        
        files = await client.list_files()
        await client.aclose()
        
        assert [f.id for f in files] == ["7", "8"]
        assert files[0].size == 10
        assert files[1].size is None
        assert files[1].created_at.isoformat() == "2025-10-01"
        
        request = recorder.requests[0]
        assert request.method == "GET"
        assert str(request.url) == f"{STORAGE_ROOT}/object/list/admin-files"
        assert request.headers["Authorization"] == "Bearer service-key"
    
    @pytest.mark.asyncio
    async def test_list_missing_collection_is_empty(self):
        recorder = Recorder(json_body={})
        client = SupabaseStorageClient(SUPABASE_TEST_CONFIG, transport=recorder.transport)
        
        assert await client.list_files() == []
        await client.aclose()
    
    @pytest.mark.asyncio
    async def test_list_error_falls_back_to_mock_list(self):
        recorder = Recorder(status_code=503)
        client = SupabaseStorageClient(SUPABASE_TEST_CONFIG, transport=recorder.transport)
        
        files = await client.list_files()
        await client.aclose()
        
        assert [f.id for f in files] == ["1", "2", "3"]
    
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "record",
        [
            {"id": "9", "name": "x.pdf", "size": -1},
            {"id": "9", "name": "x.pdf", "status": "archived"},
            {"id": "9"},
        ],
    )
    async def test_list_invalid_record_falls_back_to_mock_list(self, record):
        recorder = Recorder(json_body={"objects": [record]})
        client = SupabaseStorageClient(SUPABASE_TEST_CONFIG, transport=recorder.transport)
        
        files = await client.list_files()
        await client.aclose()
        
        assert [f.id for f in files] == ["1", "2", "3"]
    
    @pytest.mark.asyncio
    async def test_list_non_json_body_falls_back_to_mock_list(self):
        recorder = Recorder(content=b"<html>gateway</html>")
        client = SupabaseStorageClient(SUPABASE_TEST_CONFIG, transport=recorder.transport)
        
        files = await client.list_files()
        await client.aclose()
        
        assert len(files) == 3
    
    @pytest.mark.asyncio
    async def test_list_network_error_falls_back_to_mock_list(self):
        recorder = Recorder(exc=httpx.ConnectError)
        client = SupabaseStorageClient(SUPABASE_TEST_CONFIG, transport=recorder.transport)
        
        files = await client.list_files()
        await client.aclose()
        
        assert len(files) == 3
    
    @pytest.mark.asyncio
    @pytest.mark.parametrize("status_code,expected", [(200, True), (204, True), (404, False), (500, False)])
    async def test_delete_follows_status(self, status_code, expected):
        recorder = Recorder(status_code=status_code)
        client = SupabaseStorageClient(SUPABASE_TEST_CONFIG, transport=recorder.transport)
        
        assert await client.delete("notes.pdf") is expected
        await client.aclose()
        
        request = recorder.requests[0]
        assert request.method == "DELETE"
        assert str(request.url) == f"{STORAGE_ROOT}/object/admin-files/notes.pdf"
    
    @pytest.mark.asyncio
    @pytest.mark.parametrize("name", ["../other-bucket/evil.pdf", ".."])
    async def test_delete_rejects_names_outside_bucket(self, name):
        recorder = Recorder()
        client = SupabaseStorageClient(SUPABASE_TEST_CONFIG, transport=recorder.transport)
        
        assert await client.delete(name) is False
        await client.aclose()
        
        assert recorder.requests == []
    
    @pytest.mark.asyncio
    async def test_delete_network_error_is_false(self):
        recorder = Recorder(exc=httpx.ConnectError)
        client = SupabaseStorageClient(SUPABASE_TEST_CONFIG, transport=recorder.transport)
        
        assert await client.delete("notes.pdf") is False
        await client.aclose()
    
    def test_requires_configuration(self):
        from dashboard.config import SupabaseConfig
        
        with pytest.raises(ValueError):
            SupabaseStorageClient(SupabaseConfig(url="https://x.test", key=None))


class TestMockDriveClient:
    """Tests for the unconfigured sharing store."""
    
    @pytest.mark.asyncio
    async def test_upload_returns_mock_share_link(self, mock_sharing):
        result = await mock_sharing.upload(make_pdf(), {"uploadedAt": "now"})
        
        assert result.success is True
        assert result.is_mock is True
        assert result.file_id.startswith("mock_")
        assert result.share_link == f"https://drive.google.com/file/d/{result.file_id}/view"
    
    @pytest.mark.asyncio
    async def test_share_link_is_deterministic(self, mock_sharing):
        link = await mock_sharing.generate_share_link("abc123")
        
        assert link == "https://drive.google.com/file/d/abc123/view"
        assert await mock_sharing.generate_share_link("abc123") == link
    
    @pytest.mark.asyncio
    async def test_delete_succeeds(self, mock_sharing):
        assert await mock_sharing.delete("abc123") is True
    
    @pytest.mark.asyncio
    async def test_upload_waits_for_simulated_latency(self):
        client = MockDriveStorageClient(latency_seconds=0.05)
        
        started = time.monotonic()
        result = await client.upload(make_pdf())
        
        assert time.monotonic() - started >= 0.04
        assert result.is_mock is True


class TestDriveClient:
    """Tests for the Drive bridge client."""
    
    @pytest.mark.asyncio
    async def test_upload_request_contract(self):
        recorder = Recorder(json_body={"fileId": "drv-1", "shareLink": "https://share/drv-1"})
        client = DriveStorageClient(DRIVE_TEST_CONFIG, transport=recorder.transport)
        
        metadata = {"uploadedAt": "2025-11-10T00:00:00.000Z", "primaryUrl": "https://p/notes.pdf"}
        result = await client.upload(make_pdf("notes.pdf"), metadata)
        await client.aclose()
        
        assert result.success is True
        assert result.file_id == "drv-1"
        assert result.share_link == "https://share/drv-1"
        
        request = recorder.requests[0]
        assert request.method == "POST"
        assert str(request.url) == "https://drive-bridge.test/api/upload"
        assert b'name="file"; filename="notes.pdf"' in request.content
        assert b'name="metadata"' in request.content
        assert json.dumps(metadata).encode() in request.content
    
    @pytest.mark.asyncio
    async def test_upload_failure_is_result(self):
        recorder = Recorder(status_code=500)
        client = DriveStorageClient(DRIVE_TEST_CONFIG, transport=recorder.transport)
        
        result = await client.upload(make_pdf())
        await client.aclose()
        
        assert result.success is False
        assert "Drive upload failed" in result.error
    
    @pytest.mark.asyncio
    @pytest.mark.parametrize("recorder", [Recorder(content=b"not json"), Recorder(json_body=["drv-1"])])
    async def test_upload_malformed_body_is_failure_result(self, recorder):
        client = DriveStorageClient(DRIVE_TEST_CONFIG, transport=recorder.transport)
        
        result = await client.upload(make_pdf())
        await client.aclose()
        
        assert result.success is False
        assert result.error
    
    @pytest.mark.asyncio
    @pytest.mark.parametrize("recorder", [Recorder(content=b"not json"), Recorder(json_body=["link"])])
    async def test_share_link_malformed_body_is_none(self, recorder):
        client = DriveStorageClient(DRIVE_TEST_CONFIG, transport=recorder.transport)
        
        assert await client.generate_share_link("drv-1") is None
        await client.aclose()
    
    @pytest.mark.asyncio
    @pytest.mark.parametrize("file_id", ["../upload", "a/b", ".."])
    async def test_share_and_delete_reject_path_ids(self, file_id):
        recorder = Recorder(json_body={"shareLink": "https://share/x"})
        client = DriveStorageClient(DRIVE_TEST_CONFIG, transport=recorder.transport)
        
        assert await client.generate_share_link(file_id) is None
        assert await client.delete(file_id) is False
        await client.aclose()
        
        assert recorder.requests == []
    
    @pytest.mark.asyncio
    async def test_generate_share_link(self):
        recorder = Recorder(json_body={"shareLink": "https://share/drv-1"})
        client = DriveStorageClient(DRIVE_TEST_CONFIG, transport=recorder.transport)
        
        link = await client.generate_share_link("drv-1")
        await client.aclose()
        
        assert link == "https://share/drv-1"
        assert recorder.requests[0].method == "POST"
        assert str(recorder.requests[0].url) == "https://drive-bridge.test/api/share/drv-1"
    
    @pytest.mark.asyncio
    @pytest.mark.parametrize("exc,status_code", [(None, 500), (httpx.ConnectError, 200)])
    async def test_generate_share_link_failure_is_none(self, exc, status_code):
        recorder = Recorder(status_code=status_code, exc=exc)
        client = DriveStorageClient(DRIVE_TEST_CONFIG, transport=recorder.transport)
        
        assert await client.generate_share_link("drv-1") is None
        await client.aclose()
    
    @pytest.mark.asyncio
    @pytest.mark.parametrize("status_code,expected", [(200, True), (404, False)])
    async def test_delete(self, status_code, expected):
        recorder = Recorder(status_code=status_code)
        client = DriveStorageClient(DRIVE_TEST_CONFIG, transport=recorder.transport)
        
        assert await client.delete("drv-1") is expected
        await client.aclose()
        
        assert recorder.requests[0].method == "DELETE"
        assert str(recorder.requests[0].url) == "https://drive-bridge.test/api/delete/drv-1"


class TestFactory:
    """Tests for client selection."""
    
    def test_unconfigured_settings_give_mock_clients(self):
        settings = Settings(supabase_url=None, supabase_key=None, drive_api_endpoint=None)
        
        assert isinstance(get_primary_client(settings), MockSupabaseStorageClient)
        assert isinstance(get_sharing_client(settings), MockDriveStorageClient)
    
    def test_url_without_key_stays_mock(self):
        settings = Settings(supabase_url="https://x.supabase.test", supabase_key="")
        
        assert get_primary_client(settings).is_mock is True
    
    def test_mock_latency_comes_from_settings(self):
        settings = Settings(mock_primary_latency_ms=1000, mock_sharing_latency_ms=800)
        
        assert get_primary_client(settings).latency_seconds == 1.0
        assert get_sharing_client(settings).latency_seconds == 0.8
    
    @pytest.mark.asyncio
    async def test_configured_settings_give_real_clients(self):
        settings = Settings(
            supabase_url="https://x.supabase.test",
            supabase_key="key",
            drive_api_endpoint="https://bridge.test",
        )
        primary = get_primary_client(settings)
        sharing = get_sharing_client(settings)
        
        assert isinstance(primary, SupabaseStorageClient)
        assert isinstance(sharing, DriveStorageClient)
        await primary.aclose()
        await sharing.aclose()
