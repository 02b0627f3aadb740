import io
from datetime import datetime, timezone
from flask import current_app
from werkzeug.utils import secure_filename
from PIL import Image, ImageOps, UnidentifiedImageError
from errors import ValidationError

MAX_UPLOAD_BYTES = 10 * 1024 * 1024
MAX_WIDTH = 1920
THUMBNAIL_SIZE = (300, 200)

# Upload type (sent by the admin forms) -> storage folder
UPLOAD_FOLDERS = {
    'blog-main-image': 'blog-posts',
    'event-image': 'events',
    'gallery-image': 'galleries',
    'staff-image': 'staff',
}
DEFAULT_FOLDER = 'images'


def folder_for(upload_type) -> str:
    return UPLOAD_FOLDERS.get(upload_type or '', DEFAULT_FOLDER)


def _read(fileobj) -> bytes:
    if fileobj is None or not getattr(fileobj, 'filename', None):
        raise ValidationError('No file provided')
    mimetype = getattr(fileobj, 'mimetype', None) or ''
    if not mimetype.startswith('image/'):
        raise ValidationError('File must be an image')
    data = fileobj.read()
    if len(data) > MAX_UPLOAD_BYTES:
        raise ValidationError('File size must be less than 10MB')
    if not data:
        raise ValidationError('File is empty')
    return data


def process_image(data: bytes):
    """Return (main_jpeg, thumbnail_jpeg, (width, height)) for raw image bytes.

    The main image is capped at MAX_WIDTH; the thumbnail is center-cropped.
    """
    try:
        img = Image.open(io.BytesIO(data))
        img = ImageOps.exif_transpose(img)
    except (UnidentifiedImageError, OSError):
        raise ValidationError('File must be an image')
    width, height = img.size
    img = img.convert('RGB')

    main = img
    if width > MAX_WIDTH:
        main = img.resize((MAX_WIDTH, max(1, round(height * MAX_WIDTH / width))), Image.LANCZOS)
    main_buf = io.BytesIO()
    main.save(main_buf, format='JPEG', quality=85)

    thumb = ImageOps.fit(img, THUMBNAIL_SIZE, Image.LANCZOS, centering=(0.5, 0.5))
    thumb_buf = io.BytesIO()
    thumb.save(thumb_buf, format='JPEG', quality=80)
    return main_buf.getvalue(), thumb_buf.getvalue(), (width, height)


def save_upload(fileobj, upload_type, storage) -> dict:
    """Validate, resize and store an uploaded image plus its thumbnail."""
    data = _read(fileobj)
    main_bytes, thumb_bytes, (width, height) = process_image(data)

    stem = secure_filename(fileobj.filename).rsplit('.', 1)[0] or 'image'
    timestamp = datetime.now(timezone.utc).strftime('%Y%m%d%H%M%S%f')
    folder = folder_for(upload_type)
    file_name = f"{timestamp}_{stem}.jpg"
    key = f"{folder}/{file_name}"
    thumb_key = f"{folder}/thumb_{file_name}"

    url = storage.put(key, main_bytes, 'image/jpeg')
    thumbnail_url = storage.put(thumb_key, thumb_bytes, 'image/jpeg')
    current_app.logger.info('Stored upload %s (%d bytes)', key, len(main_bytes))
    return {
        'url': url,
        'key': key,
        'thumbnailUrl': thumbnail_url,
        'thumbnailKey': thumb_key,
        'fileName': file_name,
        'originalName': fileobj.filename,
        'size': len(data),
        'dimensions': {'width': width, 'height': height},
    }
