from typing import Any, Dict, Optional
from flask import current_app
from models import ContactSubmission
from errors import ValidationError, StorageError
from metrics import track_form_submission
from services import crud, notifier, newsletter_service

REQUIRED_FIELDS = ('firstName', 'lastName', 'email', 'message')
RECEIVED_MESSAGE = "Your message has been received. We'll get back to you within 24 hours."


def list_submissions(status: Optional[str] = None, limit: Optional[int] = None):
    query = ContactSubmission.query
    if status:
        query = query.filter(ContactSubmission.status == status)
    query = query.order_by(ContactSubmission.created_at.desc())
    if limit:
        query = query.limit(limit)
    return query.all()


def submit(data: Dict[str, Any]) -> ContactSubmission:
    """Store a contact (or volunteer) form and send its notification."""
    for field in REQUIRED_FIELDS:
        value = data.get(field)
        if not isinstance(value, str) or not value.strip():
            raise ValidationError(f'Missing required field: {field}')
    email = crud.normalize_email(data['email'])
    opt_in = crud.parse_bool(data.get('newsletterOptIn'))
    form_type = 'volunteer_form' if data.get('formType') == 'volunteer' else 'contact_form'

    submission = ContactSubmission(
        first_name=data['firstName'].strip(),
        last_name=data['lastName'].strip(),
        email=email,
        phone=data.get('phone') or None,
        subject=data.get('subject') or ('Volunteer Application' if form_type == 'volunteer_form' else 'General Inquiry'),
        message=data['message'],
        newsletter_opt_in=opt_in,
        status='new',
    )
    crud.save(submission, 'saving contact submission')
    track_form_submission('volunteer' if form_type == 'volunteer_form' else 'contact')

    if opt_in:
        try:
            newsletter_service.subscribe({
                'email': email,
                'firstName': submission.first_name,
                'lastName': submission.last_name,
                'source': 'contact-form',
            })
        except StorageError:
            # The submission itself is stored; the opt-in can be redone by hand
            current_app.logger.warning('Newsletter opt-in failed for contact submission %s', submission.id)

    notifier.send_notification(form_type, {
        'firstName': submission.first_name,
        'lastName': submission.last_name,
        'email': email,
        'phone': submission.phone or 'Not provided',
        'subject': submission.subject,
        'message': submission.message,
        'newsletterOptIn': 'Yes' if opt_in else 'No',
    }, user_email=email)
    return submission


def update_status(submission_id: str, data: Dict[str, Any]) -> ContactSubmission:
    submission = crud.get_or_404(ContactSubmission, submission_id, 'Submission not found')
    status = data.get('status')
    if status not in ContactSubmission.VALID_STATUSES:
        raise ValidationError(f"Invalid status. Must be one of: {', '.join(ContactSubmission.VALID_STATUSES)}")
    crud.apply_fields(submission, data, {'status': 'status'})
    crud.commit('updating contact submission')
    return submission


def delete_submission(submission_id: str) -> ContactSubmission:
    submission = crud.get_or_404(ContactSubmission, submission_id, 'Submission not found')
    crud.remove(submission, 'deleting contact submission')
    return submission
