from typing import Any, Dict, Optional, Tuple
from flask import current_app
from models import NewsletterSubscriber, utcnow
from errors import ValidationError, NotFound
from metrics import track_form_submission
from services import crud, notifier

ALREADY_SUBSCRIBED = "You're already subscribed to our newsletter!"
REACTIVATED = 'Welcome back! Your subscription has been reactivated.'
SUBSCRIBED = "Thank you for subscribing! You'll receive updates about retreats and ministry news."
UNSUBSCRIBED = 'You have been unsubscribed from our newsletter.'


def list_subscribers(active_only: bool = True):
    query = NewsletterSubscriber.query
    if active_only:
        query = query.filter(NewsletterSubscriber.is_active.is_(True))
    return query.order_by(NewsletterSubscriber.created_at.desc()).all()


def subscribe(data: Dict[str, Any], notify: bool = True) -> Tuple[NewsletterSubscriber, str]:
    """Subscribe an address. Returns the subscriber row and the message to show.

    An active subscriber is left as is, an inactive one is reactivated, and
    only a brand new row triggers the signup notification.
    """
    email = crud.normalize_email(data.get('email'))
    first_name = data.get('firstName') or None
    last_name = data.get('lastName') or None

    existing = NewsletterSubscriber.query.filter_by(email=email).first()
    if existing is not None:
        if existing.is_active:
            return existing, ALREADY_SUBSCRIBED
        existing.is_active = True
        existing.unsubscribed_at = None
        existing.first_name = first_name or existing.first_name
        existing.last_name = last_name or existing.last_name
        existing.updated_at = utcnow()
        crud.commit('reactivating subscriber')
        return existing, REACTIVATED

    subscriber = NewsletterSubscriber(
        email=email,
        first_name=first_name,
        last_name=last_name,
        source=data.get('source') or 'website',
        is_active=True,
    )
    crud.save(subscriber, 'creating subscriber')
    track_form_submission('newsletter')
    current_app.logger.info('New newsletter subscriber %s', subscriber.id)

    if notify:
        notifier.send_notification('newsletter_signup', {
            'email': email,
            'firstName': first_name or '',
            'lastName': last_name or '',
            'source': data.get('source') or 'Website',
        }, user_email=email)
    return subscriber, SUBSCRIBED


def unsubscribe(email: Optional[str] = None, subscriber_id: Optional[str] = None) -> NewsletterSubscriber:
    """Soft delete: the row stays and can be reactivated by subscribing again."""
    if subscriber_id:
        subscriber = crud.get_or_404(NewsletterSubscriber, subscriber_id, 'Subscriber not found')
    elif email:
        subscriber = NewsletterSubscriber.query.filter_by(email=crud.normalize_email(email)).first()
        if subscriber is None:
            raise NotFound('Subscriber not found')
    else:
        raise ValidationError('Email or ID required')

    if subscriber.is_active:
        subscriber.is_active = False
        subscriber.unsubscribed_at = utcnow()
        subscriber.updated_at = utcnow()
        crud.commit('unsubscribing')
    return subscriber
