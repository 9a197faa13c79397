"""Tests for the HTTP API."""

import base64
import os

import pytest
from fastapi.testclient import TestClient

from common.chunk_codec import compute_checksum
from server.exceptions import BlobTooLargeError
from server.main import app
from server.service_locator import set_blob_store
from tests.blob_fakes import InMemoryBlobStore


@pytest.fixture
def store(monkeypatch, test_db):
    monkeypatch.setattr("server.config.MAX_SINGLE_BLOB_BYTES", 10)
    monkeypatch.setattr("server.config.CHUNK_SIZE", 4)
    blob_store = InMemoryBlobStore()
    set_blob_store(blob_store)
    yield blob_store
    set_blob_store(None)


@pytest.fixture
def client(store):
    """Create FastAPI test client."""
    with TestClient(app) as test_client:
        yield test_client


def _register(client, username):
    response = client.post('/auth/register', json={'username': username, 'password': 'secret-pass'})
    assert response.status_code == 201
    return {'Authorization': f"Bearer {response.json()['api_key']}"}


@pytest.fixture
def alice(client):
    return _register(client, 'alice')


@pytest.fixture
def bob(client):
    return _register(client, 'bob')


def _upload(client, headers, data, name='file.bin', **form):
    return client.post('/transfers', files={'file': (name, data)}, data=form, headers=headers)


class TestService:
    def test_root(self, client):
        response = client.get('/')
        assert response.status_code == 200
        assert response.json()['status'] == 'running'

    def test_health(self, client):
        assert client.get('/health').json()['status'] == 'healthy'

    def test_ready(self, client):
        response = client.get('/ready')
        assert response.status_code == 200
        assert response.json() == {'ready': True, 'database': 'ok', 'blob_store': 'ok'}

    def test_request_id_header(self, client):
        assert client.get('/health').headers['X-Request-ID']

    def test_error_responses_are_documented(self, client):
        paths = client.get('/openapi.json').json()['paths']
        ref = '#/components/schemas/ErrorResponse'
        upload = paths['/transfers']['post']['responses']
        assert upload['503']['content']['application/json']['schema']['$ref'] == ref
        assert paths['/blobs/{blob_id}']['get']['responses']['403']['content']['application/json']['schema']['$ref'] == ref
        assert paths['/auth/login']['post']['responses']['401']['content']['application/json']['schema']['$ref'] == ref

    def test_error_body_has_only_detail_and_code(self, client):
        response = client.get('/transfers', headers={'Authorization': 'Bearer cv_unknown'})
        assert response.status_code == 401
        assert set(response.json()) == {'detail', 'code'}
        assert response.json()['code'] == 'INVALID_API_KEY'


class TestAuth:
    def test_register_returns_prefixed_key(self, client):
        response = client.post('/auth/register', json={'username': 'carol', 'password': 'pw'})
        assert response.status_code == 201
        assert response.json()['api_key'].startswith('cv_')

    def test_duplicate_username(self, client, alice):
        response = client.post('/auth/register', json={'username': 'alice', 'password': 'other'})
        assert response.status_code == 400
        assert response.json()['code'] == 'USER_ALREADY_EXISTS'

    def test_blank_username(self, client):
        response = client.post('/auth/register', json={'username': '  ', 'password': 'pw'})
        assert response.status_code == 400
        assert response.json()['code'] == 'INVALID_INPUT'

    def test_login_rotates_key(self, client, alice):
        response = client.post('/auth/login', json={'username': 'alice', 'password': 'secret-pass'})
        assert response.status_code == 200
        new_headers = {'Authorization': f"Bearer {response.json()['api_key']}"}

        assert client.get('/transfers', headers=alice).status_code == 401
        assert client.get('/transfers', headers=new_headers).status_code == 200

    def test_login_wrong_password(self, client, alice):
        response = client.post('/auth/login', json={'username': 'alice', 'password': 'nope'})
        assert response.status_code == 401
        assert response.json()['code'] == 'INVALID_CREDENTIALS'

    def test_logout_revokes_key(self, client, alice):
        assert client.post('/auth/logout', headers=alice).json() == {'logged_out': True}

        response = client.get('/transfers', headers=alice)
        assert response.status_code == 401
        assert response.json()['code'] == 'INVALID_API_KEY'

    @pytest.mark.parametrize('headers', [{}, {'Authorization': 'Token abc'}, {'Authorization': 'Bearer cv_unknown'}])
    def test_missing_or_bad_key(self, client, headers):
        response = client.get('/transfers', headers=headers)
        assert response.status_code == 401
        assert response.json()['code'] == 'INVALID_API_KEY'


class TestTransfers:
    def test_upload_small_file(self, client, alice, store):
        response = _upload(client, alice, b'tiny', 'note.txt')

        assert response.status_code == 201
        body = response.json()
        assert body['original_name'] == 'note.txt'
        assert body['size'] == 4
        assert body['chunk_count'] == 1
        assert body['preview_type'] is None
        assert store.put_names == ['note.txt']

    def test_upload_large_file_is_chunked(self, client, alice, store):
        data = os.urandom(11)
        body = _upload(client, alice, data, 'clip.mp4').json()

        assert [c['size'] for c in body['chunks']] == [4, 4, 3]
        assert body['chunk_ids'] == [c['blob_id'] for c in body['chunks']]
        assert body['preview_type'] == 'video'
        assert store.put_names == ['clip.mp4.part1of3', 'clip.mp4.part2of3', 'clip.mp4.part3of3']

    def test_empty_upload(self, client, alice):
        response = _upload(client, alice, b'', 'empty.txt')
        assert response.status_code == 400
        assert response.json()['code'] == 'EMPTY_FILE'

    def test_upload_with_thumbnail(self, client, alice):
        thumbnail = base64.b64encode(b'preview').decode()
        body = _upload(client, alice, b'image bytes', 'cat.png', thumbnail=thumbnail).json()

        assert body['thumbnail'] == thumbnail
        assert body['preview_type'] == 'image'
        listed = client.get('/transfers', headers=alice).json()['transfers']
        assert listed[0]['thumbnail'] == thumbnail

    def test_blob_store_failure(self, client, alice, store):
        store.fail_on_put = 1
        response = _upload(client, alice, b'data')

        assert response.status_code == 503
        assert response.json()['code'] == 'BLOB_STORE_UNAVAILABLE'
        assert client.get('/transfers', headers=alice).json()['transfers'] == []

    def test_list_most_recent_first(self, client, alice, bob):
        first = _upload(client, alice, b'one', 'one.txt').json()['transfer_id']
        second = _upload(client, alice, b'two', 'two.txt').json()['transfer_id']
        _upload(client, bob, b'three', 'three.txt')

        listed = client.get('/transfers', headers=alice).json()['transfers']
        assert [t['transfer_id'] for t in listed] == [second, first]

    def test_manifest(self, client, alice):
        data = os.urandom(11)
        transfer_id = _upload(client, alice, data).json()['transfer_id']

        manifest = client.get(f'/transfers/{transfer_id}', headers=alice).json()
        assert manifest['chunks'][0]['checksum'] == compute_checksum(data[:4])

    def test_download_reassembles(self, client, alice):
        data = os.urandom(11)
        transfer_id = _upload(client, alice, data, 'report final.pdf').json()['transfer_id']

        response = client.get(f'/transfers/{transfer_id}/download', headers=alice)

        assert response.status_code == 200
        assert response.content == data
        assert response.headers['content-disposition'].startswith('attachment;')
        assert 'report%20final.pdf' in response.headers['content-disposition']

    def test_client_side_reassembly_via_blobs(self, client, alice):
        data = os.urandom(11)
        manifest = _upload(client, alice, data).json()

        pieces = [client.get(f'/blobs/{blob_id}', headers=alice).content for blob_id in manifest['chunk_ids']]
        assert b''.join(pieces) == data

    def test_missing_chunk_on_download(self, client, alice, store):
        manifest = _upload(client, alice, os.urandom(11)).json()
        del store.blobs[manifest['chunk_ids'][2]]

        response = client.get(f"/transfers/{manifest['transfer_id']}/download", headers=alice)
        assert response.status_code == 404
        assert response.json()['code'] == 'CHUNK_NOT_FOUND'

    def test_corrupted_chunk_on_download(self, client, alice, store):
        manifest = _upload(client, alice, b'payload').json()
        store.blobs[manifest['chunk_ids'][0]] = b'garbage'

        response = client.get(f"/transfers/{manifest['transfer_id']}/download", headers=alice)
        assert response.status_code == 502
        assert response.json()['code'] == 'CHECKSUM_MISMATCH'

    def test_truncated_chunk_on_download(self, client, alice, store):
        manifest = _upload(client, alice, b'payload').json()
        blob_id = manifest['chunk_ids'][0]
        store.blobs[blob_id] = store.blobs[blob_id][:-1]

        response = client.get(f"/transfers/{manifest['transfer_id']}/download", headers=alice)
        assert response.status_code == 502
        assert response.json()['code'] == 'CHECKSUM_MISMATCH'
        assert 'is 6 bytes, expected 7' in response.json()['detail']

    def test_blob_over_download_limit(self, client, alice, store, monkeypatch):
        manifest = _upload(client, alice, b'payload').json()

        async def refuse(blob_id):
            raise BlobTooLargeError('Bad Request: file is too big')

        monkeypatch.setattr(store, 'get', refuse)

        for path in (f"/transfers/{manifest['transfer_id']}/download", f"/blobs/{manifest['chunk_ids'][0]}"):
            response = client.get(path, headers=alice)
            assert response.status_code == 502
            assert response.json()['code'] == 'BLOB_TOO_LARGE'

    def test_delete_then_download_is_denied(self, client, alice):
        transfer_id = _upload(client, alice, b'payload').json()['transfer_id']

        response = client.delete(f'/transfers/{transfer_id}', headers=alice)
        assert response.json() == {'transfer_id': transfer_id, 'deleted': True}

        response = client.get(f'/transfers/{transfer_id}/download', headers=alice)
        assert response.status_code == 403
        assert response.json()['code'] == 'ACCESS_DENIED'


class TestOwnership:
    def test_foreign_and_unknown_ids_look_the_same(self, client, alice, bob):
        manifest = _upload(client, alice, b'secret').json()
        transfer_id = manifest['transfer_id']

        foreign = client.get(f'/transfers/{transfer_id}', headers=bob)
        unknown = client.get('/transfers/does-not-exist', headers=bob)

        assert foreign.status_code == unknown.status_code == 403
        assert foreign.json() == unknown.json()

    def test_foreign_user_cannot_touch_transfer(self, client, alice, bob):
        manifest = _upload(client, alice, b'secret').json()
        transfer_id = manifest['transfer_id']

        assert client.get(f'/transfers/{transfer_id}/download', headers=bob).status_code == 403
        assert client.delete(f'/transfers/{transfer_id}', headers=bob).status_code == 403
        assert client.get(f"/blobs/{manifest['chunk_ids'][0]}", headers=bob).status_code == 403
        assert client.get('/transfers', headers=bob).json()['transfers'] == []

        assert client.get(f'/transfers/{transfer_id}', headers=alice).status_code == 200
