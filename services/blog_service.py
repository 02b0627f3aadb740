import re
from typing import Any, Dict, Optional
from models import db, BlogPost, utcnow
from errors import ValidationError, NotFound
from services import crud


def generate_slug(title: str) -> str:
    """Generate URL-friendly slug from title."""
    slug = title.lower()
    slug = re.sub(r'[^a-z0-9\s-]', '', slug)
    slug = re.sub(r'[\s_]+', '-', slug)
    slug = re.sub(r'-{2,}', '-', slug)
    return slug.strip('-')


def _slug_taken(slug, exclude_id=None):
    query = BlogPost.query.filter(BlogPost.slug == slug)
    if exclude_id:
        query = query.filter(BlogPost.id != exclude_id)
    return db.session.query(query.exists()).scalar()


def _clean_tags(value):
    if value is None:
        return []
    if isinstance(value, str):
        return [t.strip() for t in value.split(',') if t.strip()]
    if not isinstance(value, (list, tuple)):
        raise ValidationError('Tags must be a list')
    return [str(t).strip() for t in value if str(t).strip()]


def list_posts(published: Optional[bool] = None, category: Optional[str] = None, limit: Optional[int] = None):
    query = BlogPost.query
    if published is not None:
        query = query.filter(BlogPost.published.is_(published))
    if category:
        query = query.filter(BlogPost.category == category)
    # Order by published date or created date
    query = query.order_by(BlogPost.published_at.desc().nullslast(), BlogPost.created_at.desc())
    if limit:
        query = query.limit(limit)
    return query.all()


def get_post(post_id: str) -> BlogPost:
    return crud.get_or_404(BlogPost, post_id, 'Blog post not found')


def get_post_by_slug(slug: str, count_view: bool = False) -> BlogPost:
    post = BlogPost.query.filter_by(slug=slug).first()
    if post is None:
        raise NotFound('Blog post not found')
    if count_view:
        post.views = (post.views or 0) + 1
        crud.commit('counting blog view')
    return post


def create_post(data: Dict[str, Any]) -> BlogPost:
    crud.require(data, 'title', 'content', message='Title and content are required')
    slug = generate_slug(data.get('slug') or data['title'])
    if not slug:
        raise ValidationError('Title must contain letters or numbers')
    if _slug_taken(slug):
        raise ValidationError('A blog post with this slug already exists')

    published = crud.parse_bool(data.get('published'))
    post = BlogPost(
        title=data['title'].strip(),
        slug=slug,
        content=data['content'],
        excerpt=data.get('excerpt') or '',
        main_image=data.get('mainImage'),
        thumbnail=data.get('thumbnail'),
        author_name=data.get('authorName') or 'Clear View Retreat',
        author_email=data.get('authorEmail') or '',
        category=data.get('category') or 'General',
        tags=_clean_tags(data.get('tags')),
        published=published,
        published_at=utcnow() if published else None,
    )
    return crud.save(post, 'creating blog post')


def update_post(post_id: str, data: Dict[str, Any]) -> BlogPost:
    post = get_post(post_id)
    if 'title' in data:
        crud.clean_text(data['title'], 'title')
    if 'slug' in data and data['slug']:
        if not isinstance(data['slug'], str):
            raise ValidationError('slug must be a string')
        slug = generate_slug(data['slug'])
        if not slug:
            raise ValidationError('Slug must contain letters or numbers')
        if _slug_taken(slug, exclude_id=post.id):
            raise ValidationError('A blog post with this slug already exists')
        post.slug = slug

    was_published = bool(post.published)
    crud.apply_fields(post, data, {
        'title': ('title', str.strip),
        'content': 'content',
        'excerpt': 'excerpt',
        'mainImage': 'main_image',
        'thumbnail': 'thumbnail',
        'authorName': 'author_name',
        'authorEmail': 'author_email',
        'category': 'category',
        'tags': ('tags', _clean_tags),
        'published': ('published', crud.parse_bool),
    })
    # First publication stamps published_at; unpublishing keeps the original date
    if post.published and not was_published and not post.published_at:
        post.published_at = utcnow()
    crud.commit('updating blog post')
    return post


def delete_post(post_id: str) -> BlogPost:
    post = get_post(post_id)
    crud.remove(post, 'deleting blog post')
    return post
