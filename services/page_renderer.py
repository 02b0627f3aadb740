"""Maps cached content sections onto the named slots of the public pages.

Items handled here are the dicts produced by `ContentItem.to_dict()` (the
shape the content cache stores).

Rich content (`html` / `richtext`) is emitted without sanitization. Only
admins can write content, and existing pages depend on inline markup and
styles, so the raw HTML is kept and every place that emits it goes through
`trusted_html()`.
"""
from enum import Enum
from typing import Any, Dict, List, NamedTuple, Optional
from flask import current_app
from markupsafe import Markup, escape

RICH_CONTENT_TYPES = ('html', 'richtext')

LOADING_ERROR_MESSAGE = 'Error loading content. Please try again later.'
EMPTY_MESSAGE = 'Content coming soon.'


class HeroSlot(str, Enum):
    HEADLINE = 'headline'
    SUBHEADLINE = 'subheadline'
    CALL_TO_ACTION = 'Call to Action'


class FeatureSlot(str, Enum):
    INTRODUCTION = 'Features Introduction'


class AboutSlot(str, Enum):
    MAIN = 'Main Content'
    VISION = 'The Vision'
    JOURNEY = 'The Journey'
    FOUNDERS_INTRODUCTION = 'Founders Introduction'
    FOUNDERS_STORY = 'Founders Story'
    BOARD_INTRODUCTION = 'Board Introduction'
    BOARD_RESPONSIBILITIES = 'Board Responsibilities'
    GRATITUDE_INTRODUCTION = 'Gratitude Introduction'
    INDIVIDUAL_SUPPORTERS = 'Individual Supporters'
    GLOBAL_ACCORD = 'Global Accord Section'
    BOY_SCOUTS = 'Boy Scouts Section'
    ATTRACTIONS = 'Area Attractions Content'
    CALL_TO_ACTION = 'Call to Action'


class ContactSlot(str, Enum):
    INTRODUCTION = 'Contact Introduction'
    ADDRESS = 'Address'
    PHONE = 'Phone'
    EMAIL = 'Email'
    HOURS = 'Office Hours'


class DonateSlot(str, Enum):
    INTRODUCTION = 'Donate Introduction'
    WAYS_TO_GIVE = 'Ways to Give'
    IMPACT = 'Your Impact'
    CALL_TO_ACTION = 'Call to Action'


class LegalSlot(str, Enum):
    MAIN = 'Main Content'


class TrustedHtml(Markup):
    """Admin-authored markup emitted as-is. Not sanitized."""
    __slots__ = ()


def trusted_html(value) -> TrustedHtml:
    return TrustedHtml(value or '')


class SectionView(NamedTuple):
    items: List[Dict[str, Any]]
    error: Optional[str] = None

    @property
    def is_empty(self):
        return self.error is None and not self.items

    @property
    def message(self):
        if self.error:
            return self.error
        if not self.items:
            return EMPTY_MESSAGE
        return None


def _name(item):
    return (item.get('metadata') or {}).get('name')


def select_item(items, slot, fallback=True):
    """Pick the item for `slot`.

    Fallback order: exact metadata name match, first richtext item, first
    item, None. Pages showing several slots pass `fallback=False` for the
    secondary ones so a missing slot does not repeat another item.
    """
    if not items:
        return None
    wanted = slot.value if isinstance(slot, Enum) else slot
    for item in items:
        if _name(item) == wanted:
            return item
    if not fallback:
        return None
    for item in items:
        if item.get('contentType') == 'richtext':
            return item
    return items[0]


def render_content(item):
    """TrustedHtml for rich items, the plain string otherwise (Jinja escapes it)."""
    if not item:
        return ''
    content = item.get('content') or ''
    if item.get('contentType') in RICH_CONTENT_TYPES:
        return trusted_html(content)
    return content


def slot_content(items, slot, fallback=True):
    return render_content(select_item(items, slot, fallback=fallback))


def paragraphs(text) -> Markup:
    """Escape plain text and turn blank lines into paragraphs, single newlines into <br>."""
    if isinstance(text, Markup):
        return text
    if not text:
        return Markup('')
    blocks = [block for block in str(text).replace('\r\n', '\n').split('\n\n') if block.strip()]
    return Markup('').join(
        Markup('<p>{}</p>').format(Markup('<br>').join(escape(line) for line in block.split('\n')))
        for block in blocks
    )


def load_section(cache, section, subsection=None) -> SectionView:
    """Fetch a section through the cache; failures become an error message, never an exception."""
    try:
        items = cache.get(section)
    except Exception:
        current_app.logger.exception('Failed to load content section %s', section)
        return SectionView([], LOADING_ERROR_MESSAGE)
    if subsection:
        items = [item for item in items if item.get('subsection') == subsection]
    return SectionView(list(items))


def register_template_helpers(app):
    """Expose the slot enums and rendering helpers to Jinja templates."""
    app.add_template_filter(paragraphs, 'paragraphs')
    app.add_template_filter(render_content, 'render_content')
    app.add_template_filter(trusted_html, 'trusted_html')
    app.add_template_global(slot_content, 'slot_content')
    app.add_template_global(select_item, 'select_item')
    app.jinja_env.globals.update(
        HeroSlot=HeroSlot,
        FeatureSlot=FeatureSlot,
        AboutSlot=AboutSlot,
        ContactSlot=ContactSlot,
        DonateSlot=DonateSlot,
        LegalSlot=LegalSlot,
    )
