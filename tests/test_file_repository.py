"""Tests for listing and deleting files."""

import pytest

from common.exceptions import NotFoundError, ServiceUnavailableError, UnauthenticatedError
from common.types import Invalidation, LocalFile


async def _store(storage, path, file_id):
    return await storage.create('bucket-files', file_id, LocalFile.from_path(path), lambda snapshot: None)


class TestList:

    @pytest.mark.asyncio
    async def test_list_without_session_makes_no_request(self, client, storage):
        with pytest.raises(UnauthenticatedError):
            await client.files.list()

        assert storage.calls == []

    @pytest.mark.asyncio
    async def test_list_preserves_service_order(self, logged_in_client, storage, tmp_path):
        for name, file_id in (('b.txt', 'id-2'), ('a.txt', 'id-1'), ('c.txt', 'id-3')):
            path = tmp_path / name
            path.write_text(name)
            await _store(storage, path, file_id)

        listing = await logged_in_client.files.list()

        assert [r.file_id for r in listing.records] == ['id-2', 'id-1', 'id-3']
        assert logged_in_client.files.records == listing.records
        assert listing.failed is False

    @pytest.mark.asyncio
    async def test_list_failure_returns_failed_empty_listing(self, logged_in_client, storage):
        storage.unavailable = True

        listing = await logged_in_client.files.list()

        assert listing.records == ()
        assert listing.failed is True
        assert listing.error == 'Cannot connect to storage service'
        assert logged_in_client.files.failed is True

    @pytest.mark.asyncio
    async def test_late_listing_after_logout_is_discarded(self, logged_in_client, storage, sample_file):
        await _store(storage, sample_file, 'id-1')
        original_list = storage.list

        async def list_then_logout(bucket_id):
            records = await original_list(bucket_id)
            logged_in_client.state.clear_session()
            return records

        storage.list = list_then_logout
        listing = await logged_in_client.files.list()

        assert len(listing.records) == 1
        assert logged_in_client.state.records == ()


class TestRemove:

    @pytest.mark.asyncio
    async def test_remove_patches_listing_without_refetch(self, logged_in_client, storage, sample_file, image_file):
        await _store(storage, sample_file, 'id-1')
        await _store(storage, image_file, 'id-2')
        await logged_in_client.files.list()
        storage.calls.clear()

        result = await logged_in_client.files.remove('id-1')

        assert result.file_id == 'id-1'
        assert result.invalidation == Invalidation.PATCHED
        assert [r.file_id for r in logged_in_client.files.records] == ['id-2']
        assert storage.calls == ['delete']

    @pytest.mark.asyncio
    async def test_remove_unknown_id_raises_not_found_and_keeps_listing(self, logged_in_client, storage, sample_file):
        await _store(storage, sample_file, 'id-1')
        before = (await logged_in_client.files.list()).records

        with pytest.raises(NotFoundError):
            await logged_in_client.files.remove('missing')

        assert logged_in_client.files.records == before

    @pytest.mark.asyncio
    async def test_remove_failure_keeps_record(self, logged_in_client, storage, sample_file):
        await _store(storage, sample_file, 'id-1')
        await logged_in_client.files.list()
        storage.unavailable = True

        with pytest.raises(ServiceUnavailableError) as exc_info:
            await logged_in_client.files.remove('id-1')

        assert exc_info.value.message == 'Cannot connect to storage service'
        assert logged_in_client.files.get_cached('id-1') is not None

    @pytest.mark.asyncio
    async def test_remove_without_session_makes_no_request(self, client, storage):
        with pytest.raises(UnauthenticatedError):
            await client.files.remove('id-1')

        assert storage.calls == []
