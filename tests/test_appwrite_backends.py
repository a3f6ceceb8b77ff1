"""Unit tests for the Appwrite transport, identity and storage backends."""

import json

import httpx
import pytest

from common.exceptions import (
    AlreadyExistsError,
    InvalidCredentialsError,
    NotFoundError,
    RejectedError,
    ServiceUnavailableError,
    UnauthenticatedError,
    VaultError,
)
from common.types import LocalFile, Session
from fakes import FakeIdentity
from vault.backends import AppwriteIdentity, AppwriteStorage, AppwriteTransport, error_from_response
from vault.client import VaultClient

from conftest import BUCKET_ID, SHARE_ORIGIN

ENDPOINT = 'https://appwrite.test/v1'


def _file_json(file_id='file123', name='notes.txt', size=10240, **extra):
    data = {
        '$id': file_id,
        'bucketId': 'bucket-files',
        '$createdAt': '2025-03-14T09:26:00.000+00:00',
        'name': name,
        'mimeType': 'text/plain',
        'sizeOriginal': size,
        'chunksTotal': 1,
        'chunksUploaded': 1,
    }
    data.update(extra)
    return data


def _transport(handler, **kwargs):
    return AppwriteTransport(ENDPOINT, 'demo', transport=httpx.MockTransport(handler), **kwargs)


def _error(status, message, error_type=''):
    return httpx.Response(status, json={'message': message, 'code': status, 'type': error_type})


@pytest.mark.parametrize('status,error_type,expected', [
    (401, 'user_invalid_credentials', InvalidCredentialsError),
    (401, 'general_unauthorized_scope', UnauthenticatedError),
    (403, '', UnauthenticatedError),
    (404, 'storage_file_not_found', NotFoundError),
    (409, 'user_already_exists', AlreadyExistsError),
    (400, 'storage_invalid_file_size', RejectedError),
    (413, '', RejectedError),
    (500, 'general_unknown', ServiceUnavailableError),
    (503, '', ServiceUnavailableError),
])
def test_error_mapping(status, error_type, expected):
    """Test each status maps to its exception and keeps the service message."""
    error = error_from_response(_error(status, 'service says no', error_type))

    assert type(error) is expected
    assert error.message == 'service says no'
    assert error.code == status


def test_plain_bad_request_is_generic_error():
    error = error_from_response(_error(400, 'Invalid `email` param', 'general_argument_invalid'))

    assert type(error) is VaultError
    assert error.error_type == 'general_argument_invalid'


def test_non_json_error_body_uses_text():
    error = error_from_response(httpx.Response(502, text='Bad Gateway'))

    assert isinstance(error, ServiceUnavailableError)
    assert error.message == 'Bad Gateway'


@pytest.mark.asyncio
async def test_requests_carry_project_and_request_id():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={'total': 0, 'files': []})

    transport = _transport(handler)
    await AppwriteStorage(transport).list('bucket-files')
    await transport.aclose()

    request = seen[0]
    assert request.url.path == '/v1/storage/buckets/bucket-files/files'
    assert request.headers['X-Appwrite-Project'] == 'demo'
    assert request.headers['X-Request-ID']


@pytest.mark.asyncio
async def test_connect_error_is_service_unavailable():
    def handler(request):
        raise httpx.ConnectError('Connection refused', request=request)

    transport = _transport(handler)
    with pytest.raises(ServiceUnavailableError) as exc_info:
        await transport.request('GET', '/account')
    await transport.aclose()

    assert 'Cannot connect' in exc_info.value.message


@pytest.mark.asyncio
async def test_timeout_is_service_unavailable():
    def handler(request):
        raise httpx.ReadTimeout('timed out', request=request)

    transport = _transport(handler)
    with pytest.raises(ServiceUnavailableError) as exc_info:
        await transport.request('GET', '/account')
    await transport.aclose()

    assert 'timed out' in exc_info.value.message


@pytest.mark.asyncio
async def test_aclose_closes_http_client():
    transport = _transport(lambda request: httpx.Response(200, json={}))

    await transport.aclose()

    assert transport.client.is_closed


@pytest.mark.asyncio
async def test_non_json_success_body_is_service_unavailable():
    transport = _transport(lambda request: httpx.Response(200, text='<html>proxy error</html>'))

    with pytest.raises(ServiceUnavailableError) as exc_info:
        await AppwriteStorage(transport).list('bucket-files')
    await transport.aclose()

    assert 'proxy error' in exc_info.value.message


class TestIdentity:

    @pytest.mark.asyncio
    async def test_login_persists_fallback_cookies(self):
        saved = []

        def handler(request):
            if request.url.path == '/v1/account/sessions/email':
                assert json.loads(request.content) == {'email': 'ada@example.com', 'password': 'correct-horse'}
                return httpx.Response(
                    201,
                    json={'$id': 'session-1', 'userId': 'user-ada'},
                    headers={'X-Fallback-Cookies': '{"a_session_demo":"token"}'},
                )
            if request.url.path == '/v1/account':
                assert request.headers['X-Fallback-Cookies'] == '{"a_session_demo":"token"}'
                return httpx.Response(200, json={'$id': 'user-ada', 'name': 'Ada Lovelace', 'email': 'ada@example.com'})
            return httpx.Response(404)

        transport = _transport(handler, on_cookies_changed=saved.append)
        session = await AppwriteIdentity(transport).create_session('ada@example.com', 'correct-horse')
        await transport.aclose()

        assert session.session_id == 'session-1'
        assert session.user_id == 'user-ada'
        assert session.name == 'Ada Lovelace'
        assert saved == ['{"a_session_demo":"token"}']

    @pytest.mark.asyncio
    async def test_wrong_password(self):
        def handler(request):
            return _error(401, 'Invalid credentials. Please check the email and password.', 'user_invalid_credentials')

        transport = _transport(handler)
        with pytest.raises(InvalidCredentialsError) as exc_info:
            await AppwriteIdentity(transport).create_session('ada@example.com', 'wrong')
        await transport.aclose()

        assert exc_info.value.message == 'Invalid credentials. Please check the email and password.'

    @pytest.mark.asyncio
    async def test_current_session_without_cookie_is_unauthenticated(self):
        def handler(request):
            return _error(401, 'User (role: guests) missing scope (account)', 'general_unauthorized_scope')

        transport = _transport(handler)
        with pytest.raises(UnauthenticatedError):
            await AppwriteIdentity(transport).get_current_session()
        await transport.aclose()

    @pytest.mark.asyncio
    async def test_create_identity_sends_generated_user_id(self):
        bodies = []

        def handler(request):
            bodies.append(json.loads(request.content))
            return httpx.Response(201, json={'$id': bodies[-1]['userId']})

        transport = _transport(handler)
        user_id = await AppwriteIdentity(transport).create_identity('user-123', 'g@example.com', 'pw-12345', 'Grace')
        await transport.aclose()

        assert user_id == 'user-123'
        assert bodies == [{'userId': 'user-123', 'email': 'g@example.com', 'password': 'pw-12345', 'name': 'Grace'}]

    @pytest.mark.asyncio
    async def test_destroy_session_forgets_cookies_even_on_failure(self):
        saved = []

        def handler(request):
            assert request.method == 'DELETE'
            assert request.url.path == '/v1/account/sessions/current'
            return _error(500, 'Server Error', 'general_unknown')

        transport = _transport(handler, fallback_cookies='{"a_session_demo":"token"}', on_cookies_changed=saved.append)
        with pytest.raises(ServiceUnavailableError):
            await AppwriteIdentity(transport).destroy_session()
        await transport.aclose()

        assert transport.fallback_cookies is None
        assert saved == [None]


class TestStorage:

    @pytest.mark.asyncio
    async def test_list_parses_records_in_order(self):
        def handler(request):
            return httpx.Response(200, json={'total': 2, 'files': [
                _file_json('b', 'b.txt'),
                _file_json('a', 'a.png', mimeType='image/png'),
            ]})

        transport = _transport(handler)
        records = await AppwriteStorage(transport).list('bucket-files')
        await transport.aclose()

        assert [r.file_id for r in records] == ['b', 'a']
        assert records[1].is_image
        assert records[0].created_at.year == 2025

    @pytest.mark.asyncio
    async def test_get_missing_file(self):
        def handler(request):
            return _error(404, 'The requested file could not be found.', 'storage_file_not_found')

        transport = _transport(handler)
        with pytest.raises(NotFoundError):
            await AppwriteStorage(transport).get('bucket-files', 'missing')
        await transport.aclose()

    @pytest.mark.asyncio
    async def test_small_file_is_single_request(self, sample_file):
        requests = []
        snapshots = []

        def handler(request):
            requests.append(request)
            return httpx.Response(201, json=_file_json('file123'))

        transport = _transport(handler)
        record = await AppwriteStorage(transport).create(
            'bucket-files', 'file123', LocalFile.from_path(sample_file), snapshots.append
        )
        await transport.aclose()

        assert len(requests) == 1
        assert 'Content-Range' not in requests[0].headers
        assert b'name="fileId"' in requests[0].content
        assert record.file_id == 'file123'
        assert [s.percent for s in snapshots] == [0, 100]

    @pytest.mark.asyncio
    async def test_large_file_is_uploaded_in_chunks(self, sample_file):
        requests = []
        snapshots = []

        def handler(request):
            requests.append(request)
            index = len(requests)
            return httpx.Response(201, json=_file_json('file123', chunksTotal=3, chunksUploaded=index))

        transport = _transport(handler)
        storage = AppwriteStorage(transport, chunk_size=4096)
        await storage.create('bucket-files', 'file123', LocalFile.from_path(sample_file), snapshots.append)
        await transport.aclose()

        assert [r.headers['Content-Range'] for r in requests] == [
            'bytes 0-4095/10240',
            'bytes 4096-8191/10240',
            'bytes 8192-10239/10240',
        ]
        assert 'x-appwrite-id' not in requests[0].headers
        assert requests[1].headers['x-appwrite-id'] == 'file123'
        assert [s.percent for s in snapshots] == [0, 33, 67, 100]

    @pytest.mark.asyncio
    async def test_size_rejection_keeps_message(self, sample_file):
        def handler(request):
            return _error(400, 'File size not allowed', 'storage_invalid_file_size')

        transport = _transport(handler)
        with pytest.raises(RejectedError) as exc_info:
            await AppwriteStorage(transport).create(
                'bucket-files', 'file123', LocalFile.from_path(sample_file), lambda s: None
            )
        await transport.aclose()

        assert exc_info.value.message == 'File size not allowed'

    def test_download_and_preview_urls(self):
        storage = AppwriteStorage(_transport(lambda request: httpx.Response(200)))

        assert storage.download_url('bucket-files', 'file123') == (
            'https://appwrite.test/v1/storage/buckets/bucket-files/files/file123/download?project=demo'
        )
        assert storage.preview_url('bucket-files', 'file123', 600, 400) == (
            'https://appwrite.test/v1/storage/buckets/bucket-files/files/file123/preview'
            '?project=demo&width=600&height=400'
        )

    @pytest.mark.asyncio
    async def test_missing_id_in_upload_response_is_service_unavailable(self, sample_file):
        def handler(request):
            data = _file_json()
            del data['$id']
            return httpx.Response(201, json=data)

        transport = _transport(handler)
        with pytest.raises(ServiceUnavailableError) as exc_info:
            await AppwriteStorage(transport).create(
                'bucket-files', 'file123', LocalFile.from_path(sample_file), lambda s: None
            )
        await transport.aclose()

        assert "missing '$id'" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_proxy_error_page_ends_upload_progress(self, sample_file):
        transport = _transport(lambda request: httpx.Response(200, text='<html>proxy error</html>'))
        client = VaultClient(FakeIdentity(), AppwriteStorage(transport), bucket_id=BUCKET_ID, share_origin=SHARE_ORIGIN)
        client.state.authenticate(
            Session(session_id='session-0', user_id='user-ada', name='Ada Lovelace', email='ada@example.com')
        )

        task = client.uploads.start(sample_file)
        snapshots = [snapshot async for snapshot in task.snapshots()]
        with pytest.raises(ServiceUnavailableError) as exc_info:
            await task.wait()
        await transport.aclose()

        assert [s.percent for s in snapshots] == [0]
        assert 'proxy error' in exc_info.value.message
        assert task.percent == 0
        assert client.uploads.active is None
