"""
Moderation workflow: the one place where the status of a moderated record
(mosque, business, volunteer registration, halal certification) changes.
"""
import logging

from django.db import transaction
from django.utils import timezone

from businesses.models import Business, HalalCertification
from core.exceptions import InvalidStatusTransition
from mosques.models import Mosque
from notifications.models import NotificationVerb
from notifications.services import notify
from volunteers.models import Volunteer
from .activity import ActivityLogger

logger = logging.getLogger(__name__)

# Spelling accepted for businesses alongside the stored value
BUSINESS_STATUS_ALIASES = {'approved': Business.VerificationStatus.VERIFIED}

APPROVED_STATUSES = ('approved', 'verified')


class ModerationService:
    """
    Validates the requested status against the record's own enum, stores
    it with the reviewer, timestamp and note, then writes an audit entry
    and notifies the owner of the record.
    """

    KINDS = {
        Mosque: ('mosque', 'Mosque', 'mosques'),
        Business: ('business', 'Business', 'businesses'),
        Volunteer: ('volunteer', 'Volunteer', 'volunteers'),
        HalalCertification: ('halal_certification', 'Halal certification', 'halal_certifications'),
    }

    @classmethod
    def set_status(cls, record, status, actor, note='', request=None):
        try:
            kind, label, module = cls.KINDS[type(record)]
        except KeyError:
            raise TypeError(f"{type(record).__name__} is not a moderated record")

        apply = getattr(cls, f'_apply_{kind}')
        now = timezone.now()
        with transaction.atomic():
            status = apply(record, status, actor, note or '', now)

        action = cls.action_name(kind, status)
        details = f"{label} {getattr(record, 'name', None) or getattr(record, 'business_name', record.pk)} set to {status}"
        if note:
            details += f": {note}"
        ActivityLogger.record(request if request is not None else actor, action, module, details, record.pk)

        cls._notify_owner(record, kind, label, status, note, actor)
        logger.info("%s %s set to %s by %s", label, record.pk, status, actor.pk)
        return record

    @staticmethod
    def action_name(kind, status):
        if status in APPROVED_STATUSES:
            return f"APPROVE_{kind.upper()}"
        if status == 'rejected':
            return f"REJECT_{kind.upper()}"
        return f"UPDATE_{kind.upper()}_STATUS"

    @staticmethod
    def _check(status, choices):
        if status not in choices:
            raise InvalidStatusTransition('Invalid status. Must be one of: ' + ', '.join(choices))

    @classmethod
    def _apply_mosque(cls, mosque, status, actor, note, now):
        cls._check(status, Mosque.Status.values)
        mosque.status = status
        mosque.verified = status == Mosque.Status.APPROVED
        mosque.verified_by = actor
        mosque.verified_at = now
        if note:
            mosque.verification_notes = note
        mosque.save()
        return status

    @classmethod
    def _apply_business(cls, business, status, actor, note, now):
        status = BUSINESS_STATUS_ALIASES.get(status, status)
        cls._check(status, Business.VerificationStatus.values)
        business.verification_status = status
        business.verified_by = actor
        business.verified_at = now
        if note:
            business.verification_notes = note
        business.save()
        return status

    @classmethod
    def _apply_volunteer(cls, volunteer, status, actor, note, now):
        cls._check(status, Volunteer.Status.values)
        volunteer.status = status
        volunteer.reviewed_by = actor
        volunteer.reviewed_at = now
        if note:
            volunteer.notes = note
        volunteer.save()
        return status

    @classmethod
    def _apply_halal_certification(cls, certification, status, actor, note, now):
        cls._check(status, HalalCertification.Status.values)
        certification.status = status
        if status != HalalCertification.Status.PENDING:
            certification.reviewer = actor
        if note:
            certification.review_notes = note

        business = certification.business
        if status == HalalCertification.Status.APPROVED:
            certification.expiry_date = now + HalalCertification.CERTIFICATE_VALIDITY
            certification.certificate_url = certification.certificate_path()
            business.is_halal_certified = True
        elif status == HalalCertification.Status.REJECTED:
            business.is_halal_certified = False
        certification.save()
        business.save(update_fields=['is_halal_certified', 'updated_at'])
        return status

    @staticmethod
    def _owner_of(record):
        if isinstance(record, Mosque):
            return record.imam
        if isinstance(record, Business):
            return record.owner
        if isinstance(record, Volunteer):
            return record.user
        return record.business.owner

    @classmethod
    def _notify_owner(cls, record, kind, label, status, note, actor):
        owner = cls._owner_of(record)
        if owner is None:
            return
        body = f"Your {label.lower()} request is now {status.replace('_', ' ')}."
        if note:
            body += f" Note: {note}"
        notify(
            owner,
            NotificationVerb.CERTIFICATION if kind == 'halal_certification' else NotificationVerb.MODERATION,
            f"{label} {status.replace('_', ' ')}",
            body,
            target_object_id=record.pk,
            actor=actor,
            data={'kind': kind, 'status': status},
        )
