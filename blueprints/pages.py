"""Public site pages rendered from cached content sections."""
from flask import Blueprint, render_template, abort
from errors import NotFound
from services import blog_service, event_service, gallery_service, staff_service, registration_type_service
from services.content_cache import get_cache
from services.page_renderer import load_section, AboutSlot, LegalSlot

pages_bp = Blueprint('pages', __name__)

ABOUT_SUBSECTIONS = ('beliefs', 'history', 'founders', 'board', 'gratitude', 'attractions')
LEGAL_PAGES = {'privacy': 'Privacy Policy', 'terms': 'Terms of Service'}


def _section(section, subsection=None):
    return load_section(get_cache(), section, subsection)


@pages_bp.route('/')
def home():
    return render_template(
        'pages/home.html',
        hero=_section('hero'),
        features=_section('features'),
        events=event_service.upcoming_events(limit=3),
    )


@pages_bp.route('/about')
def about():
    return render_template('pages/about.html', view=_section('about'), subsection=None,
                           staff=staff_service.list_staff(), slot=AboutSlot.MAIN)


@pages_bp.route('/about/<subsection>')
def about_subsection(subsection):
    if subsection not in ABOUT_SUBSECTIONS:
        abort(404)
    return render_template('pages/about.html', view=_section('about', subsection), subsection=subsection,
                           staff=[], slot=AboutSlot.MAIN)


@pages_bp.route('/events')
def events():
    return render_template('pages/events.html', view=_section('events'),
                           events=event_service.upcoming_events(),
                           registration_types=registration_type_service.list_types())


@pages_bp.route('/events/<event_id>')
def event_detail(event_id):
    event = event_service.get_event(event_id)
    if not event.is_active:
        raise NotFound('Event not found')
    return render_template('pages/event_detail.html', event=event)


@pages_bp.route('/gallery')
def gallery():
    return render_template('pages/gallery.html', view=_section('gallery'), gallery_type=None,
                           titles=gallery_service.GALLERY_TITLES, images=[])


@pages_bp.route('/gallery/<gallery_type>')
def gallery_type(gallery_type):
    if gallery_type not in gallery_service.GALLERY_TYPES:
        abort(404)
    return render_template('pages/gallery.html', view=_section('gallery'), gallery_type=gallery_type,
                           titles=gallery_service.GALLERY_TITLES,
                           images=gallery_service.list_images(gallery_type=gallery_type))


@pages_bp.route('/blog')
def blog():
    return render_template('pages/blog.html', posts=blog_service.list_posts(published=True))


@pages_bp.route('/blog/<slug>')
def blog_post(slug):
    post = blog_service.get_post_by_slug(slug)
    if not post.published:
        raise NotFound('Blog post not found')
    post = blog_service.get_post_by_slug(slug, count_view=True)
    return render_template('pages/blog_post.html', post=post)


@pages_bp.route('/contact')
def contact():
    return render_template('pages/contact.html', view=_section('contact'))


@pages_bp.route('/donate')
def donate():
    return render_template('pages/donate.html', view=_section('donate'))


@pages_bp.route('/sections/<section>')
def section(section):
    """Generic page for sections without a dedicated template."""
    return render_template('pages/section.html', title=section.replace('-', ' ').title(),
                           view=_section(section))


@pages_bp.route('/privacy')
def privacy():
    return _legal('privacy')


@pages_bp.route('/terms')
def terms():
    return _legal('terms')


def _legal(page):
    return render_template('pages/legal.html', title=LEGAL_PAGES[page],
                           view=_section('legal', page), slot=LegalSlot.MAIN)
