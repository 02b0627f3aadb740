from markupsafe import Markup

from services.page_renderer import (
    AboutSlot, HeroSlot, SectionView, TrustedHtml, load_section, paragraphs, render_content,
    select_item, slot_content, LOADING_ERROR_MESSAGE, EMPTY_MESSAGE,
)


def item(content, name=None, content_type='text'):
    return {'content': content, 'contentType': content_type, 'metadata': {'name': name} if name else {}}


def test_select_item_prefers_metadata_name():
    items = [item('a', 'subheadline'), item('b', 'headline')]
    assert select_item(items, HeroSlot.HEADLINE)['content'] == 'b'


def test_select_item_falls_back_to_first_richtext_then_first_item():
    rich = item('<p>rich</p>', 'other', 'richtext')
    items = [item('plain', 'x'), rich]
    assert select_item(items, AboutSlot.VISION) is rich

    plain_only = [item('first'), item('second')]
    assert select_item(plain_only, AboutSlot.VISION)['content'] == 'first'


def test_select_item_without_fallback_and_empty_list():
    assert select_item([item('a', 'x')], AboutSlot.VISION, fallback=False) is None
    assert select_item([], HeroSlot.HEADLINE) is None
    assert slot_content([], HeroSlot.HEADLINE) == ''


def test_select_item_accepts_plain_string_names():
    items = [item('a', 'Custom')]
    assert select_item(items, 'Custom', fallback=False)['content'] == 'a'


def test_rich_content_is_trusted_html_and_text_is_not():
    rich = render_content(item('<b>hi</b>', content_type='html'))
    assert isinstance(rich, TrustedHtml)
    assert isinstance(rich, Markup)
    assert str(rich) == '<b>hi</b>'

    text = render_content(item('<b>hi</b>'))
    assert not isinstance(text, Markup)
    assert str(Markup.escape(text)) == '&lt;b&gt;hi&lt;/b&gt;'


def test_paragraphs_escapes_and_splits():
    out = paragraphs('Hello <you>\nline two\n\nSecond')
    assert str(out) == '<p>Hello &lt;you&gt;<br>line two</p><p>Second</p>'
    assert paragraphs('') == ''


class _BrokenCache:
    def get(self, section):
        raise RuntimeError('boom')


class _StaticCache:
    def __init__(self, items):
        self.items = items

    def get(self, section):
        return self.items


def test_load_section_turns_errors_into_message(ctx):
    view = load_section(_BrokenCache(), 'about')
    assert view.items == []
    assert view.message == LOADING_ERROR_MESSAGE
    assert not view.is_empty


def test_load_section_empty_and_subsection_filter(ctx):
    view = load_section(_StaticCache([]), 'about')
    assert view.is_empty
    assert view.message == EMPTY_MESSAGE

    items = [dict(item('a'), subsection='board'), dict(item('b'), subsection=None)]
    view = load_section(_StaticCache(items), 'about', 'board')
    assert [i['content'] for i in view.items] == ['a']
    assert view.message is None


def test_section_view_defaults():
    assert SectionView([item('a')]).message is None
