from flask_sqlalchemy import SQLAlchemy
from flask_login import UserMixin
from datetime import datetime, timedelta, timezone
from bcrypt import hashpw, gensalt, checkpw
import uuid


db = SQLAlchemy()


def utcnow():
  """Naive UTC timestamp, the format every DateTime column stores."""
  return datetime.now(timezone.utc).replace(tzinfo=None)


def generate_id():
  return uuid.uuid4().hex


def _iso(value):
  return value.isoformat() if value else None


#Helper function for password hashing
def hash_password(password):
  """Return a bcrypt hash (utf-8 string) for the given password."""
  return hashpw(password.encode('utf-8'), gensalt()).decode('utf-8')

#Helper function to check password
def check_password(password, hashed_password):
  """Return True if password matches the stored bcrypt hashed password."""
  return checkpw(password.encode('utf-8'), hashed_password.encode('utf-8'))


class User(db.Model, UserMixin):
  """Admin-area account. The role is the only claim the site checks."""
  __tablename__ = 'users'

  VALID_ROLES = ['Admin', 'Viewer']
  ROLE_ADMIN = 'Admin'
  MAX_FAILED_LOGINS = 7

  user_id = db.Column(db.Integer, primary_key=True)
  username = db.Column(db.String(100), unique=True, nullable=False)
  email = db.Column(db.String(255))
  password_hash = db.Column(db.String(255), nullable=False)
  role = db.Column(db.String(50), nullable=False, default='Viewer')

  # Account lockout fields
  failed_login_attempts = db.Column(db.Integer, default=0)
  account_locked = db.Column(db.Boolean, default=False)
  locked_until = db.Column(db.DateTime)
  created_at = db.Column(db.DateTime, default=utcnow)

  def get_id(self):
    return str(self.user_id)

  @property
  def is_admin(self):
    return (self.role or '').lower() == 'admin'

  def set_password(self, password):
    self.password_hash = hash_password(password)

  def check_password(self, password):
    return check_password(password, self.password_hash)

  def set_role(self, role):
    """Set role with automatic capitalization and validation."""
    if role:
      normalized_role = role.capitalize()
      if normalized_role in self.VALID_ROLES:
        self.role = normalized_role
      else:
        raise ValueError(f"Invalid role '{role}'. Must be one of: {', '.join(self.VALID_ROLES)}")
    else:
      self.role = 'Viewer'

  def is_locked(self):
    """Check if account is currently locked."""
    if self.account_locked and self.locked_until:
      if utcnow() < self.locked_until:
        return True
      # Lock expired, reset
      self.account_locked = False
      self.failed_login_attempts = 0
      self.locked_until = None
      db.session.commit()
    return False

  def record_failed_login(self):
    """Record failed login attempt and lock account if threshold reached."""
    self.failed_login_attempts = (self.failed_login_attempts or 0) + 1
    if self.failed_login_attempts >= self.MAX_FAILED_LOGINS:
      self.account_locked = True
      self.locked_until = utcnow() + timedelta(minutes=30)
    db.session.commit()

  def reset_failed_logins(self):
    """Reset failed login counter after successful login."""
    self.failed_login_attempts = 0
    self.account_locked = False
    self.locked_until = None
    db.session.commit()


class ContentItem(db.Model):
  """One named piece of editable page content, addressed by section/subsection/metadata name."""
  __tablename__ = 'website_content'
  __table_args__ = (
    db.Index('idx_content_section_subsection', 'section', 'subsection'),
  )

  id = db.Column(db.String(32), primary_key=True, default=generate_id)
  section = db.Column(db.String(100), nullable=False, index=True)
  subsection = db.Column(db.String(100))
  content_type = db.Column(db.String(50), nullable=False, default='text')  # text, html, richtext
  content = db.Column(db.Text, nullable=False, default='')
  # `metadata` is reserved on declarative classes, so the attribute is `meta`
  meta = db.Column('metadata', db.JSON)
  order_index = db.Column(db.Integer, default=0)
  is_active = db.Column(db.Boolean, default=True, index=True)
  updated_by = db.Column(db.String(255))
  created_at = db.Column(db.DateTime, default=utcnow)
  updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

  @property
  def name(self):
    return (self.meta or {}).get('name')

  def to_dict(self):
    return {
      'id': self.id,
      'section': self.section,
      'subsection': self.subsection,
      'contentType': self.content_type,
      'content': self.content,
      'metadata': dict(self.meta or {}),
      'order': self.order_index,
      'isActive': bool(self.is_active),
      'createdAt': _iso(self.created_at),
      'updatedAt': _iso(self.updated_at),
      'user': self.updated_by,
    }


class BlogPost(db.Model):
  """Blog posts shown on /blog."""
  __tablename__ = 'blog_posts'

  id = db.Column(db.String(32), primary_key=True, default=generate_id)
  title = db.Column(db.String(255), nullable=False)
  slug = db.Column(db.String(255), unique=True, nullable=False, index=True)
  content = db.Column(db.Text, nullable=False)
  excerpt = db.Column(db.Text)
  main_image = db.Column(db.String(500))
  thumbnail = db.Column(db.String(500))
  author_name = db.Column(db.String(255), nullable=False)
  author_email = db.Column(db.String(255), nullable=False)
  category = db.Column(db.String(100), nullable=False, index=True)
  tags = db.Column(db.JSON)  # Array of tags
  published = db.Column(db.Boolean, default=False, index=True)
  published_at = db.Column(db.DateTime)
  views = db.Column(db.Integer, default=0)
  created_at = db.Column(db.DateTime, default=utcnow)
  updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

  def to_dict(self):
    return {
      'id': self.id,
      'title': self.title,
      'slug': self.slug,
      'content': self.content,
      'excerpt': self.excerpt or '',
      'mainImage': self.main_image,
      'thumbnail': self.thumbnail,
      'authorName': self.author_name,
      'authorEmail': self.author_email,
      'category': self.category,
      'tags': list(self.tags or []),
      'published': bool(self.published),
      'publishedAt': _iso(self.published_at),
      'views': self.views or 0,
      'createdAt': _iso(self.created_at),
      'updatedAt': _iso(self.updated_at),
    }


class Category(db.Model):
  __tablename__ = 'categories'

  id = db.Column(db.String(32), primary_key=True, default=generate_id)
  name = db.Column(db.String(100), unique=True, nullable=False)
  slug = db.Column(db.String(100), unique=True, nullable=False)
  description = db.Column(db.Text)
  created_at = db.Column(db.DateTime, default=utcnow)
  updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

  def to_dict(self):
    return {
      'id': self.id,
      'name': self.name,
      'slug': self.slug,
      'description': self.description,
      'createdAt': _iso(self.created_at),
      'updatedAt': _iso(self.updated_at),
    }


class Event(db.Model):
  """Retreats and other scheduled events."""
  __tablename__ = 'events'

  id = db.Column(db.String(32), primary_key=True, default=generate_id)
  title = db.Column(db.String(255), nullable=False)
  event_type = db.Column(db.String(100), nullable=False)  # retreat, camp, workshop, ...
  start_date = db.Column(db.DateTime, nullable=False, index=True)
  end_date = db.Column(db.DateTime)
  description = db.Column(db.Text)
  location = db.Column(db.String(255))
  image_url = db.Column(db.String(500))
  max_attendees = db.Column(db.Integer)
  current_attendees = db.Column(db.Integer, default=0)
  is_active = db.Column(db.Boolean, default=True)
  created_at = db.Column(db.DateTime, default=utcnow)
  updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

  @property
  def is_full(self):
    return bool(self.max_attendees) and (self.current_attendees or 0) >= self.max_attendees

  def to_dict(self):
    return {
      'id': self.id,
      'title': self.title,
      'type': self.event_type,
      'startDate': _iso(self.start_date),
      'endDate': _iso(self.end_date),
      'description': self.description or '',
      'location': self.location,
      'imageUrl': self.image_url,
      'maxAttendees': self.max_attendees,
      'currentAttendees': self.current_attendees or 0,
      'isActive': bool(self.is_active),
      'createdAt': _iso(self.created_at),
      'updatedAt': _iso(self.updated_at),
    }


class EventRegistration(db.Model):
  __tablename__ = 'registrations'

  id = db.Column(db.String(32), primary_key=True, default=generate_id)
  # Foreign key by convention only; registrations outlive deleted events
  event_id = db.Column(db.String(32), nullable=False, index=True)
  user_name = db.Column(db.String(255), nullable=False)
  user_email = db.Column(db.String(255), nullable=False)
  phone = db.Column(db.String(50), nullable=False)
  num_attendees = db.Column(db.Integer, default=1)
  special_requests = db.Column(db.Text)
  status = db.Column(db.String(50), default='confirmed')
  created_at = db.Column(db.DateTime, default=utcnow)
  updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

  def to_dict(self):
    return {
      'id': self.id,
      'eventId': self.event_id,
      'userName': self.user_name,
      'userEmail': self.user_email,
      'phone': self.phone,
      'numAttendees': self.num_attendees,
      'specialRequests': self.special_requests or '',
      'status': self.status,
      'createdAt': _iso(self.created_at),
      'updatedAt': _iso(self.updated_at),
    }


class BlockedDate(db.Model):
  """Date ranges when the retreat center is unavailable for booking."""
  __tablename__ = 'blocked_dates'

  id = db.Column(db.String(32), primary_key=True, default=generate_id)
  title = db.Column(db.String(255), nullable=False)
  start_date = db.Column(db.Date, nullable=False)
  end_date = db.Column(db.Date, nullable=False)
  reason = db.Column(db.Text)
  is_active = db.Column(db.Boolean, default=True)
  created_at = db.Column(db.DateTime, default=utcnow)
  updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

  def to_dict(self):
    return {
      'id': self.id,
      'title': self.title,
      'startDate': _iso(self.start_date),
      'endDate': _iso(self.end_date),
      'reason': self.reason or '',
      'isActive': bool(self.is_active),
      'createdAt': _iso(self.created_at),
      'updatedAt': _iso(self.updated_at),
    }


class GalleryImage(db.Model):
  __tablename__ = 'gallery_images'

  id = db.Column(db.String(32), primary_key=True, default=generate_id)
  gallery_type = db.Column(db.String(50), nullable=False, index=True)
  title = db.Column(db.String(255), nullable=False)
  description = db.Column(db.Text)
  url = db.Column(db.String(1000), nullable=False)
  thumbnail_url = db.Column(db.String(1000))
  category = db.Column(db.String(100))
  order_index = db.Column(db.Integer, default=0)
  is_active = db.Column(db.Boolean, default=True)
  created_at = db.Column(db.DateTime, default=utcnow)
  updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

  def to_dict(self):
    return {
      'id': self.id,
      'galleryType': self.gallery_type,
      'title': self.title,
      'description': self.description,
      'url': self.url,
      'thumbnailUrl': self.thumbnail_url,
      'category': self.category,
      'order': self.order_index,
      'isActive': bool(self.is_active),
      'createdAt': _iso(self.created_at),
      'updatedAt': _iso(self.updated_at),
    }


class StaffMember(db.Model):
  __tablename__ = 'staff_members'

  id = db.Column(db.String(32), primary_key=True, default=generate_id)
  name = db.Column(db.String(255), nullable=False)
  title = db.Column(db.String(255), nullable=False)
  email = db.Column(db.String(255))
  phone = db.Column(db.String(50))
  bio = db.Column(db.Text)
  image_url = db.Column(db.String(1000))
  order_index = db.Column(db.Integer, default=0)
  is_active = db.Column(db.Boolean, default=True)
  created_at = db.Column(db.DateTime, default=utcnow)
  updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

  def to_dict(self):
    return {
      'id': self.id,
      'name': self.name,
      'title': self.title,
      'email': self.email,
      'phone': self.phone,
      'bio': self.bio,
      'imageUrl': self.image_url,
      'order': self.order_index,
      'isActive': bool(self.is_active),
      'createdAt': _iso(self.created_at),
      'updatedAt': _iso(self.updated_at),
    }


class RegistrationType(db.Model):
  """A kind of registration offered on the events page, with its form and PDF links."""
  __tablename__ = 'registration_event_types'

  id = db.Column(db.String(32), primary_key=True, default=generate_id)
  name = db.Column(db.String(255), nullable=False)
  description = db.Column(db.Text)
  form_link = db.Column(db.String(1000))
  pdf_link = db.Column(db.String(1000))
  order_index = db.Column(db.Integer, default=0)
  is_active = db.Column(db.Boolean, default=True)
  created_at = db.Column(db.DateTime, default=utcnow)
  updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

  def to_dict(self):
    return {
      'id': self.id,
      'name': self.name,
      'description': self.description,
      'formLink': self.form_link,
      'pdfLink': self.pdf_link,
      'order': self.order_index,
      'isActive': bool(self.is_active),
      'createdAt': _iso(self.created_at),
      'updatedAt': _iso(self.updated_at),
    }


class NewsletterSubscriber(db.Model):
  __tablename__ = 'newsletter_subscribers'

  id = db.Column(db.String(32), primary_key=True, default=generate_id)
  email = db.Column(db.String(255), unique=True, nullable=False)
  first_name = db.Column(db.String(100))
  last_name = db.Column(db.String(100))
  source = db.Column(db.String(100), default='website')
  is_active = db.Column(db.Boolean, default=True)
  unsubscribed_at = db.Column(db.DateTime)
  created_at = db.Column(db.DateTime, default=utcnow)
  updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

  def to_dict(self):
    return {
      'id': self.id,
      'email': self.email,
      'firstName': self.first_name,
      'lastName': self.last_name,
      'source': self.source,
      'isActive': bool(self.is_active),
      'unsubscribedAt': _iso(self.unsubscribed_at),
      'createdAt': _iso(self.created_at),
      'updatedAt': _iso(self.updated_at),
    }


class ContactSubmission(db.Model):
  __tablename__ = 'contact_submissions'

  VALID_STATUSES = ['new', 'read', 'replied', 'archived']

  id = db.Column(db.String(32), primary_key=True, default=generate_id)
  first_name = db.Column(db.String(100), nullable=False)
  last_name = db.Column(db.String(100), nullable=False)
  email = db.Column(db.String(255), nullable=False)
  phone = db.Column(db.String(50))
  subject = db.Column(db.String(255), default='General Inquiry')
  message = db.Column(db.Text, nullable=False)
  newsletter_opt_in = db.Column(db.Boolean, default=False)
  status = db.Column(db.String(50), default='new', index=True)
  created_at = db.Column(db.DateTime, default=utcnow)
  updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

  def to_dict(self):
    return {
      'id': self.id,
      'firstName': self.first_name,
      'lastName': self.last_name,
      'email': self.email,
      'phone': self.phone,
      'subject': self.subject,
      'message': self.message,
      'newsletterOptIn': bool(self.newsletter_opt_in),
      'status': self.status,
      'createdAt': _iso(self.created_at),
      'updatedAt': _iso(self.updated_at),
    }


class EmailSettings(db.Model):
  """SMTP configuration edited from the admin area (single row, id 'main')."""
  __tablename__ = 'email_settings'

  MASK = '********'

  id = db.Column(db.String(32), primary_key=True, default='main')
  smtp_host = db.Column(db.String(255))
  smtp_port = db.Column(db.Integer, default=587)
  smtp_secure = db.Column(db.Boolean, default=False)
  smtp_user = db.Column(db.String(255))
  smtp_password = db.Column(db.String(255))
  from_email = db.Column(db.String(255))
  from_name = db.Column(db.String(255), default='Clear View Retreat')
  reply_to = db.Column(db.String(255))
  is_configured = db.Column(db.Boolean, default=False)
  created_at = db.Column(db.DateTime, default=utcnow)
  updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

  def to_dict(self, mask_password=True):
    password = self.smtp_password
    if mask_password:
      password = self.MASK if self.smtp_password else None
    return {
      'id': self.id,
      'smtp_host': self.smtp_host,
      'smtp_port': self.smtp_port,
      'smtp_secure': bool(self.smtp_secure),
      'smtp_user': self.smtp_user,
      'smtp_password': password,
      'from_email': self.from_email,
      'from_name': self.from_name,
      'reply_to': self.reply_to,
      'is_configured': bool(self.is_configured),
      'updated_at': _iso(self.updated_at),
    }


class EmailNotificationSetting(db.Model):
  __tablename__ = 'email_notification_settings'

  id = db.Column(db.String(32), primary_key=True, default=generate_id)
  notification_type = db.Column(db.String(50), unique=True, nullable=False)
  is_enabled = db.Column(db.Boolean, default=True)
  send_to_admin = db.Column(db.Boolean, default=True)
  send_to_user = db.Column(db.Boolean, default=False)
  admin_subject_template = db.Column(db.Text)
  user_subject_template = db.Column(db.Text)
  admin_body_template = db.Column(db.Text)
  user_body_template = db.Column(db.Text)
  created_at = db.Column(db.DateTime, default=utcnow)
  updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

  def to_dict(self):
    return {
      'id': self.id,
      'notification_type': self.notification_type,
      'is_enabled': bool(self.is_enabled),
      'send_to_admin': bool(self.send_to_admin),
      'send_to_user': bool(self.send_to_user),
      'admin_subject_template': self.admin_subject_template,
      'user_subject_template': self.user_subject_template,
      'admin_body_template': self.admin_body_template,
      'user_body_template': self.user_body_template,
    }


class EmailRecipient(db.Model):
  """Admin-side address that receives copies of selected notification types."""
  __tablename__ = 'email_recipients'

  id = db.Column(db.String(32), primary_key=True, default=generate_id)
  email = db.Column(db.String(255), nullable=False)
  name = db.Column(db.String(255))
  notification_types = db.Column(db.JSON)
  is_active = db.Column(db.Boolean, default=True)
  created_at = db.Column(db.DateTime, default=utcnow)
  updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

  def to_dict(self):
    return {
      'id': self.id,
      'email': self.email,
      'name': self.name,
      'notification_types': list(self.notification_types or []),
      'is_active': bool(self.is_active),
      'created_at': _iso(self.created_at),
    }


class Activity(db.Model):
  """Audit trail of admin edits shown on the dashboard."""
  __tablename__ = 'activities'

  id = db.Column(db.String(32), primary_key=True, default=generate_id)
  action = db.Column(db.String(255), nullable=False)
  item = db.Column(db.String(255), nullable=False)
  section = db.Column(db.String(100))
  user = db.Column(db.String(255), nullable=False)
  details = db.Column(db.Text)
  activity_type = db.Column(db.String(50), nullable=False, default='content', index=True)
  timestamp = db.Column(db.DateTime, default=utcnow, nullable=False, index=True)

  def to_dict(self):
    return {
      'id': self.id,
      'action': self.action,
      'item': self.item,
      'section': self.section,
      'user': self.user,
      'details': self.details,
      'type': self.activity_type,
      'timestamp': _iso(self.timestamp),
    }
