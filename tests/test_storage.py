import io

import pytest
from botocore.exceptions import ClientError
from PIL import Image

from errors import NotFound, ValidationError, StorageError
from services.storage import LocalStorage, S3Storage, build_storage


def _png(width=40, height=30, color=(200, 30, 30)):
    buf = io.BytesIO()
    Image.new('RGB', (width, height), color).save(buf, format='PNG')
    return buf.getvalue()


class _Body:
    def __init__(self, data):
        self.data = data

    def read(self):
        return self.data


class FakeS3:
    """Just enough of the boto3 S3 client for the storage layer."""

    def __init__(self):
        self.objects = {}

    def put_object(self, Bucket, Key, Body, ContentType, **kwargs):
        self.objects[Key] = (Body, ContentType)

    def get_object(self, Bucket, Key):
        if Key not in self.objects:
            raise ClientError({'Error': {'Code': 'NoSuchKey', 'Message': 'missing'}}, 'GetObject')
        body, content_type = self.objects[Key]
        return {'Body': _Body(body), 'ContentType': content_type}

    def delete_object(self, Bucket, Key):
        self.objects.pop(Key, None)

    def list_objects_v2(self, Bucket, Prefix=''):
        return {'Contents': [{'Key': k, 'Size': len(v[0])} for k, v in self.objects.items() if k.startswith(Prefix)]}


def test_local_storage_put_get_list_delete(tmp_path):
    storage = LocalStorage(str(tmp_path))
    url = storage.put('staff/a.jpg', b'abc', 'image/jpeg')
    assert url == '/api/images/staff/a.jpg'

    data, content_type = storage.get('staff/a.jpg')
    assert data == b'abc'
    assert content_type == 'image/jpeg'

    storage.put('events/b.jpg', b'xy', 'image/jpeg')
    assert [f['key'] for f in storage.list()] == ['events/b.jpg', 'staff/a.jpg']
    assert [f['key'] for f in storage.list('staff/')] == ['staff/a.jpg']

    storage.delete('staff/a.jpg')
    with pytest.raises(NotFound):
        storage.get('staff/a.jpg')


def test_local_storage_rejects_path_traversal(tmp_path):
    storage = LocalStorage(str(tmp_path))
    with pytest.raises(ValidationError):
        storage.get('../secrets.txt')
    with pytest.raises(ValidationError):
        storage.put('', b'x', 'image/jpeg')


def test_s3_storage_maps_missing_key_to_not_found():
    storage = S3Storage('site-media', region='us-east-1', client=FakeS3())
    storage.put('galleries/x.jpg', b'img', 'image/jpeg')
    assert storage.get('galleries/x.jpg') == (b'img', 'image/jpeg')

    with pytest.raises(NotFound) as exc:
        storage.get('galleries/missing.jpg')
    assert exc.value.message == 'Image not found'


def test_s3_other_errors_become_storage_errors(ctx):
    class Broken(FakeS3):
        def get_object(self, Bucket, Key):
            raise ClientError({'Error': {'Code': 'AccessDenied'}}, 'GetObject')

    storage = S3Storage('site-media', client=Broken())
    with pytest.raises(StorageError):
        storage.get('galleries/x.jpg')


def test_s3_urls_private_and_public():
    private = S3Storage('site-media', client=FakeS3())
    assert private.url_for('a/b.jpg') == '/api/images/a/b.jpg'

    public = S3Storage('site-media', region='eu-west-1', public=True, client=FakeS3())
    assert public.url_for('a/b.jpg') == 'https://site-media.s3.eu-west-1.amazonaws.com/a/b.jpg'

    cdn = S3Storage('site-media', public=True, public_base_url='https://cdn.example.com/', client=FakeS3())
    assert cdn.url_for('a/b.jpg') == 'https://cdn.example.com/a/b.jpg'


def test_build_storage_requires_bucket_for_s3():
    with pytest.raises(ValueError):
        build_storage({'USE_S3': True})
    assert isinstance(build_storage({'UPLOAD_FOLDER': '/tmp/uploads'}), LocalStorage)


def test_upload_resizes_and_serves_through_proxy(admin_client, client):
    rv = admin_client.post('/api/upload', data={
        'type': 'gallery-image',
        'file': (io.BytesIO(_png(2400, 1200)), 'Lake View.png', 'image/png'),
    }, content_type='multipart/form-data')
    assert rv.status_code == 200
    body = rv.get_json()
    assert body['success'] is True
    assert body['key'].startswith('galleries/')
    assert body['thumbnailKey'].startswith('galleries/thumb_')
    assert body['dimensions'] == {'width': 2400, 'height': 1200}

    image = client.get(body['url'])
    assert image.status_code == 200
    assert image.headers['Cache-Control'] == 'public, max-age=31536000, immutable'
    assert Image.open(io.BytesIO(image.data)).size == (1920, 960)

    thumb = client.get(body['thumbnailUrl'])
    assert Image.open(io.BytesIO(thumb.data)).size == (300, 200)


def test_upload_validation(admin_client, client):
    rv = admin_client.post('/api/upload', data={}, content_type='multipart/form-data')
    assert rv.status_code == 400
    assert rv.get_json() == {'error': 'No file provided'}

    rv = admin_client.post('/api/upload', data={
        'file': (io.BytesIO(b'hello'), 'notes.txt', 'text/plain'),
    }, content_type='multipart/form-data')
    assert rv.get_json() == {'error': 'File must be an image'}

    rv = client.post('/api/upload', data={
        'file': (io.BytesIO(_png()), 'x.png', 'image/png'),
    }, content_type='multipart/form-data')
    assert rv.status_code == 401


def test_image_proxy_missing_key(client):
    rv = client.get('/api/images/galleries/none.jpg')
    assert rv.status_code == 404
    assert rv.get_json() == {'error': 'Image not found'}


def test_file_listing_and_delete(admin_client):
    admin_client.post('/api/upload', data={
        'type': 'staff-image',
        'file': (io.BytesIO(_png()), 'me.png', 'image/png'),
    }, content_type='multipart/form-data')

    files = admin_client.get('/api/files?prefix=staff/').get_json()
    assert len(files) == 2

    assert admin_client.delete('/api/files').get_json() == {'error': 'File key is required'}
    rv = admin_client.delete(f"/api/files?key={files[0]['key']}")
    assert rv.status_code == 200
    assert len(admin_client.get('/api/files?prefix=staff/').get_json()) == 1
