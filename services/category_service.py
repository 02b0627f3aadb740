from typing import Any, Dict
from models import db, Category
from errors import ValidationError
from services import crud
from services.blog_service import generate_slug


def _check_unique(name, slug, exclude_id=None):
    query = Category.query.filter((Category.name == name) | (Category.slug == slug))
    if exclude_id:
        query = query.filter(Category.id != exclude_id)
    if db.session.query(query.exists()).scalar():
        raise ValidationError('A category with this name already exists')


def list_categories():
    return Category.query.order_by(Category.name.asc()).all()


def create_category(data: Dict[str, Any]) -> Category:
    crud.require(data, 'name', message='Category name is required')
    name = data['name'].strip()
    slug = generate_slug(data.get('slug') or name)
    _check_unique(name, slug)
    category = Category(name=name, slug=slug, description=data.get('description'))
    return crud.save(category, 'creating category')


def update_category(category_id: str, data: Dict[str, Any]) -> Category:
    category = crud.get_or_404(Category, category_id, 'Category not found')
    if 'name' in data:
        name = (data.get('name') or '').strip()
        if not name:
            raise ValidationError('Category name is required')
        slug = generate_slug(data.get('slug') or name)
        _check_unique(name, slug, exclude_id=category.id)
        category.name = name
        category.slug = slug
    crud.apply_fields(category, data, {'description': 'description'})
    crud.commit('updating category')
    return category


def delete_category(category_id: str) -> Category:
    category = crud.get_or_404(Category, category_id, 'Category not found')
    crud.remove(category, 'deleting category')
    return category
