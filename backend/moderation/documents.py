"""
MongoDB documents for the moderation app using mongoengine.
"""
from mongoengine import DateTimeField, Document, StringField
from django.utils import timezone

MAX_DETAILS_LENGTH = 2000


class ActivityLog(Document):
    """
    Append-only audit entry for an administrative action: who did what to
    which record, and from where.
    """

    # Primary key of the acting Django user
    admin_id = StringField(required=True)
    admin_name = StringField(default='')

    # e.g. APPROVE_MOSQUE, REJECT_BUSINESS, UPDATE_USER_ROLE
    action = StringField(required=True, max_length=100)
    module = StringField(required=True, max_length=50)
    details = StringField(required=True, max_length=MAX_DETAILS_LENGTH)
    target_id = StringField(null=True)

    timestamp = DateTimeField(default=timezone.now)
    ip_address = StringField(default='')
    user_agent = StringField(default='')

    meta = {
        'collection': 'admin_activity_logs',
        'ordering': ['-timestamp'],
        'indexes': [
            '-timestamp',
            'module',
            'admin_id',
        ]
    }

    def __str__(self):
        return f"{self.action} by {self.admin_name or self.admin_id}"

    def to_dict(self):
        return {
            'id': str(self.id),
            'admin_id': self.admin_id,
            'admin_name': self.admin_name,
            'action': self.action,
            'module': self.module,
            'details': self.details,
            'target_id': self.target_id,
            'timestamp': self.timestamp.isoformat() if self.timestamp else None,
            'ip_address': self.ip_address,
            'user_agent': self.user_agent,
        }
