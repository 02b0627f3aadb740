"""Object storage for uploaded images.

`S3Storage` talks to any S3-compatible bucket through boto3; `LocalStorage`
keeps files under `UPLOAD_FOLDER` for development. Both serve private objects
through the `/api/images/<key>` proxy.
"""
import os
import mimetypes
from flask import current_app
import boto3
from botocore.exceptions import BotoCoreError, ClientError
from errors import NotFound, StorageError, ValidationError

IMAGE_PROXY_PREFIX = '/api/images/'
MISSING_KEY_CODES = ('NoSuchKey', '404', 'NotFound')


def _clean_key(key):
    key = (key or '').strip().lstrip('/')
    if not key:
        raise ValidationError('File key is required')
    parts = key.split('/')
    if any(part in ('', '.', '..') for part in parts):
        raise ValidationError('Invalid file key')
    return key


class ObjectStorage:
    """Blob store interface used by the upload and image proxy endpoints."""

    def put(self, key, data, content_type):
        raise NotImplementedError

    def get(self, key):
        """Return (bytes, content_type); NotFound when the key does not exist."""
        raise NotImplementedError

    def delete(self, key):
        raise NotImplementedError

    def list(self, prefix=''):
        raise NotImplementedError

    def url_for(self, key):
        return IMAGE_PROXY_PREFIX + key


class S3Storage(ObjectStorage):
    def __init__(self, bucket, region=None, endpoint_url=None, access_key=None, secret_key=None,
                 public=False, public_base_url=None, client=None):
        if not bucket:
            raise ValueError('S3_BUCKET must be set when USE_S3 is enabled')
        self.bucket = bucket
        self.region = region
        self.endpoint_url = endpoint_url
        self.public = public
        self.public_base_url = public_base_url
        self.client = client or boto3.client(
            's3',
            aws_access_key_id=access_key,
            aws_secret_access_key=secret_key,
            region_name=region,
            endpoint_url=endpoint_url,
        )

    def url_for(self, key):
        if not self.public:
            return super().url_for(key)
        if self.public_base_url:
            return f"{self.public_base_url.rstrip('/')}/{key}"
        if self.endpoint_url:
            return f"{self.endpoint_url.rstrip('/')}/{self.bucket}/{key}"
        if self.region:
            return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{key}"
        return f"https://{self.bucket}.s3.amazonaws.com/{key}"

    def put(self, key, data, content_type):
        key = _clean_key(key)
        try:
            self.client.put_object(Bucket=self.bucket, Key=key, Body=data, ContentType=content_type,
                                   CacheControl='max-age=31536000')
        except (BotoCoreError, ClientError):
            current_app.logger.exception('S3 upload failed for %s', key)
            raise StorageError('Failed to upload file')
        return self.url_for(key)

    def get(self, key):
        key = _clean_key(key)
        try:
            obj = self.client.get_object(Bucket=self.bucket, Key=key)
        except ClientError as e:
            if e.response.get('Error', {}).get('Code') in MISSING_KEY_CODES:
                raise NotFound('Image not found')
            current_app.logger.exception('S3 download failed for %s', key)
            raise StorageError('Failed to fetch image')
        except BotoCoreError:
            current_app.logger.exception('S3 download failed for %s', key)
            raise StorageError('Failed to fetch image')
        return obj['Body'].read(), obj.get('ContentType') or 'image/jpeg'

    def delete(self, key):
        key = _clean_key(key)
        try:
            self.client.delete_object(Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError):
            current_app.logger.exception('S3 delete failed for %s', key)
            raise StorageError('Failed to delete file')

    def list(self, prefix=''):
        try:
            response = self.client.list_objects_v2(Bucket=self.bucket, Prefix=prefix or '')
        except (BotoCoreError, ClientError):
            current_app.logger.exception('S3 listing failed for prefix %s', prefix)
            raise StorageError('Failed to list files')
        files = []
        for obj in response.get('Contents', []):
            key = obj.get('Key', '')
            modified = obj.get('LastModified')
            files.append({
                'key': key,
                'name': key.rsplit('/', 1)[-1],
                'size': obj.get('Size', 0),
                'lastModified': modified.isoformat() if modified else None,
                'url': self.url_for(key),
            })
        return files


class LocalStorage(ObjectStorage):
    def __init__(self, root):
        self.root = os.path.abspath(root)

    def _path(self, key):
        return os.path.join(self.root, *_clean_key(key).split('/'))

    def put(self, key, data, content_type):
        path = self._path(key)
        try:
            os.makedirs(os.path.dirname(path), exist_ok=True)
            with open(path, 'wb') as fh:
                fh.write(data)
        except OSError:
            current_app.logger.exception('Local upload failed for %s', key)
            raise StorageError('Failed to upload file')
        return self.url_for(_clean_key(key))

    def get(self, key):
        path = self._path(key)
        if not os.path.isfile(path):
            raise NotFound('Image not found')
        with open(path, 'rb') as fh:
            data = fh.read()
        return data, mimetypes.guess_type(path)[0] or 'application/octet-stream'

    def delete(self, key):
        path = self._path(key)
        if not os.path.isfile(path):
            raise NotFound('File not found')
        os.remove(path)

    def list(self, prefix=''):
        files = []
        if not os.path.isdir(self.root):
            return files
        for dirpath, _, filenames in os.walk(self.root):
            for name in sorted(filenames):
                full = os.path.join(dirpath, name)
                key = os.path.relpath(full, self.root).replace(os.sep, '/')
                if prefix and not key.startswith(prefix):
                    continue
                stat = os.stat(full)
                files.append({
                    'key': key,
                    'name': name,
                    'size': stat.st_size,
                    'lastModified': None,
                    'url': self.url_for(key),
                })
        return sorted(files, key=lambda f: f['key'])


def build_storage(config, instance_path=None):
    if config.get('USE_S3'):
        return S3Storage(
            bucket=config.get('S3_BUCKET'),
            region=config.get('S3_REGION'),
            endpoint_url=config.get('S3_ENDPOINT_URL'),
            access_key=config.get('S3_ACCESS_KEY'),
            secret_key=config.get('S3_SECRET_ACCESS_KEY'),
            public=bool(config.get('S3_PUBLIC')),
            public_base_url=config.get('S3_PUBLIC_URL'),
        )
    root = config.get('UPLOAD_FOLDER') or os.path.join(instance_path or '.', 'uploads')
    return LocalStorage(root)


def get_storage(app=None):
    app = app or current_app
    return app.extensions['storage']
