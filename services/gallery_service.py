from typing import Any, Dict, Optional
from models import GalleryImage
from errors import ValidationError
from services import crud

GALLERY_TYPES = ('retreat-center', 'events', 'nature', 'community', 'cabins')

GALLERY_TITLES = {
    'retreat-center': 'Retreat Center',
    'events': 'Events',
    'nature': 'Nature',
    'community': 'Community',
    'cabins': 'Cabins',
}


def _clean_type(value):
    if value not in GALLERY_TYPES:
        raise ValidationError(f"Invalid gallery type. Must be one of: {', '.join(GALLERY_TYPES)}")
    return value


def list_images(gallery_type: Optional[str] = None, category: Optional[str] = None, include_inactive: bool = False):
    query = GalleryImage.query
    if gallery_type:
        query = query.filter(GalleryImage.gallery_type == gallery_type)
    if category:
        query = query.filter(GalleryImage.category == category)
    if not include_inactive:
        query = query.filter(GalleryImage.is_active.is_(True))
    return query.order_by(GalleryImage.order_index.asc(), GalleryImage.created_at.asc()).all()


def create_image(data: Dict[str, Any]) -> GalleryImage:
    crud.require(data, 'galleryType', 'title', 'url', message='Gallery type, title, and url are required')
    gallery_type = _clean_type(data['galleryType'])
    order = crud.parse_int(data.get('order'), 'order')
    if order is None:
        order = crud.next_order(GalleryImage, GalleryImage.gallery_type == gallery_type)
    image = GalleryImage(
        gallery_type=gallery_type,
        title=data['title'].strip(),
        description=data.get('description'),
        url=data['url'],
        thumbnail_url=data.get('thumbnailUrl'),
        category=data.get('category'),
        order_index=order,
        is_active=crud.parse_bool(data.get('isActive'), default=True),
    )
    return crud.save(image, 'creating gallery image')


def update_image(image_id: str, data: Dict[str, Any]) -> GalleryImage:
    image = crud.get_or_404(GalleryImage, image_id, 'Gallery image not found')
    crud.apply_fields(image, data, {
        'galleryType': ('gallery_type', _clean_type),
        'title': 'title',
        'description': 'description',
        'url': 'url',
        'thumbnailUrl': 'thumbnail_url',
        'category': 'category',
        'order': ('order_index', lambda v: crud.parse_int(v, 'order') or 0),
        'isActive': ('is_active', crud.parse_bool),
    })
    crud.commit('updating gallery image')
    return image


def reorder_images(pairs):
    return crud.reorder(GalleryImage, pairs, 'Gallery image', 'reordering gallery')


def delete_image(image_id: str) -> GalleryImage:
    image = crud.get_or_404(GalleryImage, image_id, 'Gallery image not found')
    crud.remove(image, 'deleting gallery image')
    return image
