"""Tests for the upload, retrieval and deletion workflow."""

import io
import sqlite3

import pytest

from shareline.exceptions import InvalidInputError, NotFoundError, StorageFailureError
from shareline.file_storage import FileStorage
from shareline.repositories.file_repository import FileRepository
from shareline.services.access_service import AccessService
from shareline.services.file_service import FileService

PDF_BYTES = b"%PDF-1.4\nfake pdf body\n%%EOF"


@pytest.fixture
def service(test_db, storage, clock, fixed_mime):
    return FileService(storage=storage, access_service=AccessService(clock=clock), clock=clock)


def upload(service, owner, name="report.pdf", data=PDF_BYTES, content_type=None):
    return service.upload_file(owner.user_id, name, io.BytesIO(data), content_type)


class TestUpload:
    def test_upload_records_metadata(self, service, alice, storage, clock):
        file = upload(service, alice)

        assert file.file_id is not None
        assert file.owner_id == alice.user_id
        assert file.original_filename == "report.pdf"
        assert file.size == len(PDF_BYTES)
        assert file.mime_type == "application/pdf"
        assert file.created_at == clock.now
        assert file.share_token is None
        assert storage.exists(file.storage_key)

    def test_client_hint_ignored_by_default(self, service, alice):
        file = upload(service, alice, name="report.pdf", data=b"plain words", content_type="application/pdf")

        assert file.mime_type == "text/plain"

    def test_client_hint_used_in_auto_mode(self, service, alice, monkeypatch):
        monkeypatch.setattr("shareline.config.MIME_DETECTION", "auto")

        file = upload(service, alice, name="notes", data=b"hello", content_type="text/markdown")

        assert file.mime_type == "text/markdown"

    def test_mime_type_is_content_based_not_name_based(self, service, alice):
        file = upload(service, alice, name="not-really.pdf", data=b"plain words")

        assert file.mime_type == "text/plain"

    def test_empty_name_rejected_without_record(self, service, alice):
        with pytest.raises(InvalidInputError):
            upload(service, alice, name="")

        assert service.list_files(alice.user_id) == []

    def test_registry_failure_leaves_bytes_behind(self, service, alice, storage, monkeypatch):
        def broken(file, conn=None):
            raise sqlite3.OperationalError("database is locked")

        monkeypatch.setattr(FileRepository, "save", staticmethod(broken))

        with pytest.raises(StorageFailureError):
            upload(service, alice)

        owner_dir = storage.root / str(alice.user_id)
        assert len(list(owner_dir.iterdir())) == 1


class TestListAndOpen:
    def test_list_is_owner_scoped_and_newest_first(self, service, alice, bob, clock):
        first = upload(service, alice, name="a.txt")
        clock.advance(minutes=1)
        second = upload(service, alice, name="b.txt")
        upload(service, bob, name="c.txt")

        files = service.list_files(alice.user_id)

        assert [f.file_id for f in files] == [second.file_id, first.file_id]

    def test_owner_can_open(self, service, alice):
        file = upload(service, alice)

        opened, content = service.open_file(file.file_id, alice.user_id)

        assert opened.file_id == file.file_id
        assert b"".join(content) == PDF_BYTES

    def test_other_user_cannot_open(self, service, alice, bob):
        file = upload(service, alice)

        with pytest.raises(NotFoundError):
            service.open_file(file.file_id, bob.user_id)

    def test_missing_content_reported_as_not_found(self, service, alice, storage):
        file = upload(service, alice)
        storage.resolve(file.storage_key).unlink()

        with pytest.raises(NotFoundError):
            service.open_file(file.file_id, alice.user_id)

    def test_shared_file_opens_by_token(self, service, alice):
        file = upload(service, alice)
        token = service.access.create_share_token(file.file_id, alice.user_id)

        opened, content = service.open_shared_file(token)

        assert opened.file_id == file.file_id
        assert b"".join(content) == PDF_BYTES
        assert service.get_shared_file(token).original_filename == "report.pdf"


class TestDelete:
    def test_delete_removes_bytes_and_record(self, service, alice, storage):
        file = upload(service, alice)

        service.delete_file(file.file_id, alice.user_id)

        assert FileRepository.get_by_id(file.file_id) is None
        assert not storage.exists(file.storage_key)

    def test_other_user_cannot_delete(self, service, alice, bob, storage):
        file = upload(service, alice)

        with pytest.raises(NotFoundError):
            service.delete_file(file.file_id, bob.user_id)

        assert FileRepository.get_by_id(file.file_id) is not None
        assert storage.exists(file.storage_key)

    def test_failed_byte_deletion_keeps_record(self, service, alice, monkeypatch):
        file = upload(service, alice)

        def broken(self, storage_key):
            raise StorageFailureError("Could not delete file")

        monkeypatch.setattr(FileStorage, "delete", broken)

        with pytest.raises(StorageFailureError):
            service.delete_file(file.file_id, alice.user_id)

        assert FileRepository.get_by_id(file.file_id) is not None

    def test_delete_succeeds_when_bytes_already_gone(self, service, alice, storage):
        file = upload(service, alice)
        storage.resolve(file.storage_key).unlink()

        service.delete_file(file.file_id, alice.user_id)

        assert FileRepository.get_by_id(file.file_id) is None

    def test_deleted_file_share_token_stops_working(self, service, alice):
        file = upload(service, alice)
        token = service.access.create_share_token(file.file_id, alice.user_id)

        service.delete_file(file.file_id, alice.user_id)

        with pytest.raises(NotFoundError):
            service.open_shared_file(token)
