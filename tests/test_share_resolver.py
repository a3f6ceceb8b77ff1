"""Tests for share link construction and anonymous resolution."""

import pytest

from common.exceptions import ServiceUnavailableError, ShareUnavailableError
from common.types import LocalFile
from vault.share_resolver import ShareResolver

from conftest import BUCKET_ID


async def _store(storage, path, file_id):
    return await storage.create(BUCKET_ID, file_id, LocalFile.from_path(path), lambda snapshot: None)


class TestShareLinks:

    def test_share_url_format(self, client):
        assert client.shares.share_url('abc123') == 'https://files.example.com/share/abc123'

    def test_trailing_slash_on_origin_is_ignored(self, storage):
        resolver = ShareResolver(storage, BUCKET_ID, 'https://files.example.com/')

        assert resolver.share_url('abc123') == 'https://files.example.com/share/abc123'

    @pytest.mark.parametrize('link', [
        'https://files.example.com/share/abc123',
        'https://files.example.com/share/abc123/',
        'http://localhost:3000/share/abc123?utm=x',
        '/share/abc123',
    ])
    def test_extract_id(self, link):
        assert ShareResolver.extract_id(link) == 'abc123'

    def test_share_url_round_trips_through_extract_id(self, client):
        assert ShareResolver.extract_id(client.shares.share_url('6613c0f1a2b3c4d5e6f7')) == '6613c0f1a2b3c4d5e6f7'

    def test_share_url_escapes_reserved_characters(self, client):
        assert client.shares.share_url('a%41') == 'https://files.example.com/share/a%2541'
        assert client.shares.share_url('a b/c') == 'https://files.example.com/share/a%20b%2Fc'

    @pytest.mark.parametrize('file_id', ['a%41', 'a b', 'report.v2'])
    def test_escaped_ids_round_trip_through_extract_id(self, client, file_id):
        assert ShareResolver.extract_id(client.shares.share_url(file_id)) == file_id

    @pytest.mark.parametrize('link', [
        'https://files.example.com/files/abc123',
        'https://files.example.com/share/',
        'abc123',
    ])
    def test_extract_id_rejects_other_links(self, link):
        with pytest.raises(ValueError):
            ShareResolver.extract_id(link)


class TestResolve:

    @pytest.mark.asyncio
    async def test_resolve_works_without_session(self, client, storage, sample_file):
        await _store(storage, sample_file, 'id-1')

        shared = await client.shares.resolve('id-1')

        assert client.state.session is None
        assert shared.record.name == 'notes.txt'
        assert shared.download_url == storage.download_url(BUCKET_ID, 'id-1')
        assert shared.preview_url is None

    @pytest.mark.asyncio
    async def test_resolve_round_trip_matches_get(self, client, storage, sample_file, image_file):
        await _store(storage, sample_file, '6613c0f1a2b3c4d5e6f7')
        await _store(storage, image_file, 'img-1')

        for file_id in ('6613c0f1a2b3c4d5e6f7', 'img-1'):
            shared = await client.shares.resolve(ShareResolver.extract_id(client.shares.share_url(file_id)))
            assert shared.record == await storage.get(BUCKET_ID, file_id)

    @pytest.mark.asyncio
    async def test_resolve_image_includes_preview(self, client, storage, image_file):
        await _store(storage, image_file, 'img-1')

        shared = await client.shares.resolve('img-1')

        assert shared.record.is_image
        assert shared.preview_url == storage.preview_url(BUCKET_ID, 'img-1', 600, 400)

    @pytest.mark.asyncio
    async def test_resolve_deleted_file_is_unavailable(self, logged_in_client, storage, sample_file):
        await _store(storage, sample_file, 'id-1')
        link = logged_in_client.shares.share_url('id-1')
        await logged_in_client.files.remove('id-1')

        with pytest.raises(ShareUnavailableError) as exc_info:
            await logged_in_client.shares.resolve(ShareResolver.extract_id(link))

        assert exc_info.value.message == 'File not found or no longer available.'

    @pytest.mark.asyncio
    async def test_resolve_service_outage_is_not_masked(self, client, storage):
        storage.unavailable = True

        with pytest.raises(ServiceUnavailableError):
            await client.shares.resolve('id-1')
