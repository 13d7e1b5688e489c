"""
Writes administrative actions to the MongoDB audit trail.
"""
import logging

from django.utils.text import Truncator
from mongoengine.errors import ValidationError as DocumentValidationError
from pymongo.errors import PyMongoError

from user.models import UserProfile
from .documents import MAX_DETAILS_LENGTH, ActivityLog

logger = logging.getLogger(__name__)


def client_ip(request):
    forwarded = request.META.get('HTTP_X_FORWARDED_FOR')
    if forwarded:
        return forwarded.split(',')[0].strip()
    return request.META.get('HTTP_X_REAL_IP') or request.META.get('REMOTE_ADDR', '')


class ActivityLogger:

    @staticmethod
    def record(request_or_actor, action, module, details, target_id=None):
        """
        Stores one ActivityLog entry. Accepts either the current request,
        from which the actor, IP and user agent are read, or a bare user.

        Details longer than the document allows are truncated. An entry the
        document store rejects or cannot reach is logged and never fails the
        caller.
        """
        request = request_or_actor if hasattr(request_or_actor, 'META') else None
        actor = request.user if request is not None else request_or_actor

        entry = ActivityLog(
            admin_id=str(actor.pk),
            admin_name=UserProfile.for_user(actor).name,
            action=action,
            module=module,
            details=Truncator(details).chars(MAX_DETAILS_LENGTH),
            target_id=str(target_id) if target_id is not None else None,
            ip_address=client_ip(request) if request is not None else '',
            user_agent=request.META.get('HTTP_USER_AGENT', '') if request is not None else '',
        )
        try:
            entry.save()
        except (PyMongoError, DocumentValidationError) as e:
            logger.error("Failed to record activity %s on %s: %s", action, target_id, e)
            return None

        logger.info("Activity %s recorded for %s by %s", action, target_id, actor.pk)
        return entry
