import uuid

from django.conf import settings
from django.db import IntegrityError, models, transaction
from django.db.models import F
from django.utils import timezone

from core.exceptions import ConflictError, InvalidStatusTransition
from mosques.models import Mosque
from user.models import is_admin_user


class Category(models.TextChoices):
    CLEANING = 'cleaning', 'Cleaning'
    EDUCATION = 'education', 'Education'
    EVENTS = 'events', 'Events'
    TECHNICAL = 'technical', 'Technical'
    ADMINISTRATION = 'administration', 'Administration'
    OUTREACH = 'outreach', 'Outreach'
    OTHER = 'other', 'Other'


class Level(models.TextChoices):
    LOW = 'low', 'Low'
    MEDIUM = 'medium', 'Medium'
    HIGH = 'high', 'High'


class Volunteer(models.Model):
    """
    A user's registration as a volunteer. Administrators approve or reject
    it and may record the assignment the volunteer currently holds.
    """

    class Status(models.TextChoices):
        PENDING = 'pending', 'Pending'
        APPROVED = 'approved', 'Approved'
        REJECTED = 'rejected', 'Rejected'

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='volunteer')
    name = models.CharField(max_length=100)
    email = models.EmailField()
    phone = models.CharField(max_length=30, blank=True, default='')
    skills = models.JSONField(default=list, blank=True)
    availability = models.CharField(max_length=255, blank=True, default='')
    experience = models.TextField(blank=True, default='')
    interests = models.JSONField(default=list, blank=True)
    languages = models.JSONField(default=list, blank=True)
    mosque = models.ForeignKey(
        Mosque,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='volunteers'
    )
    emergency_contact = models.JSONField(default=dict, blank=True, help_text="{name, relation, phone}")

    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    notes = models.TextField(blank=True, default='')
    reviewed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='reviewed_volunteers'
    )
    reviewed_at = models.DateTimeField(null=True, blank=True)

    current_assignment = models.CharField(max_length=255, blank=True, default='')
    assignment_date = models.DateTimeField(null=True, blank=True)
    assigned_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='assigned_volunteers'
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status'], name='volunteer_status_idx'),
        ]

    def __str__(self):
        return f"{self.name} ({self.status})"

    def assign(self, assignment, actor):
        self.current_assignment = assignment
        self.assignment_date = timezone.now()
        self.assigned_by = actor

    def clear_assignment(self):
        self.current_assignment = ''
        self.assignment_date = None
        self.assigned_by = None


class VolunteerNeed(models.Model):
    """An imam's call for volunteers at one of their mosques."""

    class Status(models.TextChoices):
        ACTIVE = 'active', 'Active'
        FILLED = 'filled', 'Filled'
        EXPIRED = 'expired', 'Expired'
        CANCELLED = 'cancelled', 'Cancelled'

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    mosque = models.ForeignKey(Mosque, on_delete=models.CASCADE, related_name='volunteer_needs')
    posted_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='volunteer_needs')
    title = models.CharField(max_length=200)
    description = models.TextField()
    category = models.CharField(max_length=20, choices=Category.choices)
    skills_required = models.JSONField(default=list, blank=True)
    time_commitment = models.CharField(max_length=100)
    urgency = models.CharField(max_length=10, choices=Level.choices, default=Level.MEDIUM)
    start_date = models.DateTimeField(null=True, blank=True)
    end_date = models.DateTimeField(null=True, blank=True)
    volunteers_needed = models.PositiveIntegerField(default=1)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.ACTIVE)
    contact_email = models.EmailField(blank=True, default='')
    contact_phone = models.CharField(max_length=30, blank=True, default='')

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status', 'category'], name='need_status_category_idx'),
        ]

    def __str__(self):
        return self.title

    def can_manage(self, user):
        return user.is_authenticated and (self.posted_by_id == user.id or is_admin_user(user))

    def apply(self, user, message=''):
        if self.status != self.Status.ACTIVE:
            raise InvalidStatusTransition('This volunteer need is no longer accepting applications')
        if self.applicants.filter(user=user).exists():
            raise InvalidStatusTransition('You have already applied to this volunteer need')
        try:
            with transaction.atomic():
                return self.applicants.create(user=user, message=message)
        except IntegrityError:
            raise InvalidStatusTransition('You have already applied to this volunteer need')

    def review_applicant(self, applicant, status):
        """
        Accepts or rejects an applicant. Once accepted applicants reach
        volunteers_needed the need is marked filled.
        """
        if status not in (NeedApplicant.Status.ACCEPTED, NeedApplicant.Status.REJECTED):
            raise InvalidStatusTransition('Status must be accepted or rejected')

        with transaction.atomic():
            need = VolunteerNeed.objects.select_for_update().get(pk=self.pk)
            accepted = need.applicants.filter(status=NeedApplicant.Status.ACCEPTED)
            if (
                status == NeedApplicant.Status.ACCEPTED
                and applicant.status != NeedApplicant.Status.ACCEPTED
                and accepted.count() >= need.volunteers_needed
            ):
                raise ConflictError('All volunteer positions for this need are filled')

            applicant.status = status
            applicant.save(update_fields=['status', 'updated_at'])

            if accepted.count() >= need.volunteers_needed:
                need.status = self.Status.FILLED
            elif need.status == self.Status.FILLED:
                need.status = self.Status.ACTIVE
            need.save(update_fields=['status', 'updated_at'])
            self.status = need.status
        return applicant


class NeedApplicant(models.Model):

    class Status(models.TextChoices):
        PENDING = 'pending', 'Pending'
        ACCEPTED = 'accepted', 'Accepted'
        REJECTED = 'rejected', 'Rejected'

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    need = models.ForeignKey(VolunteerNeed, on_delete=models.CASCADE, related_name='applicants')
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='need_applications')
    message = models.TextField(blank=True, default='')
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    applied_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['applied_at']
        constraints = [
            models.UniqueConstraint(fields=['need', 'user'], name='unique_need_applicant'),
        ]

    def __str__(self):
        return f"{self.user} -> {self.need}"


class VolunteerOffer(models.Model):
    """A user offering their help, to one mosque or to any."""

    class Status(models.TextChoices):
        ACTIVE = 'active', 'Active'
        MATCHED = 'matched', 'Matched'
        INACTIVE = 'inactive', 'Inactive'

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='volunteer_offers')
    title = models.CharField(max_length=200)
    description = models.TextField()
    category = models.CharField(max_length=20, choices=Category.choices)
    skills_offered = models.JSONField(default=list, blank=True)
    availability = models.CharField(max_length=255)
    time_commitment = models.CharField(max_length=100)
    preferred_locations = models.JSONField(default=list, blank=True)
    experience = models.TextField(blank=True, default='')
    languages = models.JSONField(default=list, blank=True)
    contact_email = models.EmailField(blank=True, default='')
    contact_phone = models.CharField(max_length=30, blank=True, default='')
    target_mosque = models.ForeignKey(
        Mosque,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='volunteer_offers'
    )
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.ACTIVE)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return self.title

    @property
    def is_general_offer(self):
        return self.target_mosque_id is None


class VolunteerApplication(models.Model):
    """
    A user's application to volunteer at a specific mosque. The applicant
    can only withdraw; the mosque's imam or an administrator reviews it.
    """

    class Status(models.TextChoices):
        PENDING = 'pending', 'Pending'
        REVIEWED = 'reviewed', 'Reviewed'
        ACCEPTED = 'accepted', 'Accepted'
        REJECTED = 'rejected', 'Rejected'
        WITHDRAWN = 'withdrawn', 'Withdrawn'

    REVIEW_STATUSES = (Status.REVIEWED, Status.ACCEPTED, Status.REJECTED)

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='volunteer_applications')
    mosque = models.ForeignKey(Mosque, on_delete=models.CASCADE, related_name='volunteer_applications')
    title = models.CharField(max_length=200)
    description = models.TextField()
    motivation = models.TextField()
    category = models.CharField(max_length=20, choices=Category.choices)
    skills_offered = models.JSONField(default=list, blank=True)
    availability = models.CharField(max_length=255)
    time_commitment = models.CharField(max_length=100)
    experience = models.TextField(blank=True, default='')
    languages = models.JSONField(default=list, blank=True)
    contact_email = models.EmailField()
    contact_phone = models.CharField(max_length=30, blank=True, default='')
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)

    responded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='volunteer_application_responses'
    )
    responded_at = models.DateTimeField(null=True, blank=True)
    response_message = models.TextField(blank=True, default='')
    admin_notes = models.TextField(blank=True, default='')
    priority = models.CharField(max_length=10, choices=Level.choices, default=Level.MEDIUM)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['mosque', 'status'], name='application_mosque_idx'),
        ]

    def __str__(self):
        return f"{self.title} ({self.status})"

    def withdraw(self):
        if self.status in (self.Status.ACCEPTED, self.Status.REJECTED, self.Status.WITHDRAWN):
            raise InvalidStatusTransition(f'Cannot withdraw an application that is {self.status}')
        self.status = self.Status.WITHDRAWN
        self.save(update_fields=['status', 'updated_at'])

    def respond(self, status, actor, message=''):
        """
        Records the mosque's answer. The mosque's volunteer count follows
        the application into and out of the accepted state.
        """
        if status not in self.REVIEW_STATUSES:
            raise InvalidStatusTransition('Status must be one of: ' + ', '.join(self.REVIEW_STATUSES))
        if self.status == self.Status.WITHDRAWN:
            raise InvalidStatusTransition('The applicant has withdrawn this application')

        was_accepted = self.status == self.Status.ACCEPTED
        is_accepted = status == self.Status.ACCEPTED
        with transaction.atomic():
            self.status = status
            self.responded_by = actor
            self.responded_at = timezone.now()
            if message:
                self.response_message = message
            self.save()
            mosque = Mosque.objects.filter(pk=self.mosque_id)
            if is_accepted and not was_accepted:
                mosque.update(total_volunteers=F('total_volunteers') + 1)
            elif was_accepted and not is_accepted:
                mosque.filter(total_volunteers__gt=0).update(total_volunteers=F('total_volunteers') - 1)
