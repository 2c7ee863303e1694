"""
surveys/models.py
Stores, surveys, shopper responses and the per-survey rollup.

Every model exposes ``to_document()`` / ``from_document()`` so the pipeline can
work against the document-store capability instead of the ORM directly.
"""
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone


class DocumentMixin:
    """Maps model fields to the camelCase document shape used on the wire."""

    # (document key, model field)
    DOCUMENT_FIELDS = ()

    def to_document(self):
        document = {'id': self.pk}
        for key, field in self.DOCUMENT_FIELDS:
            document[key] = getattr(self, field)
        return document

    @classmethod
    def from_document(cls, document):
        values = {}
        for key, field in cls.DOCUMENT_FIELDS:
            if key in document and document[key] is not None:
                values[field] = document[key]
        return cls(**values)


class Store(DocumentMixin, models.Model):
    """Merchant account. Created by the OAuth callback, read-only here."""

    FREQUENCY_CHOICES = [
        ('daily', 'Daily'),
        ('weekly', 'Weekly'),
        ('monthly', 'Monthly'),
    ]

    shop_domain = models.CharField(max_length=255, unique=True)
    access_token = models.CharField(max_length=255)
    email = models.EmailField(blank=True)
    # defaultSurveyStyle, notificationEmail, analyticsFrequency
    settings = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(default=timezone.now)

    DOCUMENT_FIELDS = (
        ('shopDomain', 'shop_domain'),
        ('accessToken', 'access_token'),
        ('email', 'email'),
        ('settings', 'settings'),
        ('createdAt', 'created_at'),
    )

    def __str__(self):
        return self.shop_domain


class Survey(DocumentMixin, models.Model):
    STATUS_DRAFT = 'draft'
    STATUS_ACTIVE = 'active'
    STATUS_PAUSED = 'paused'
    STATUS_COMPLETED = 'completed'

    STATUS_CHOICES = [
        (STATUS_DRAFT, 'Draft'),
        (STATUS_ACTIVE, 'Active'),
        (STATUS_PAUSED, 'Paused'),
        (STATUS_COMPLETED, 'Completed'),
    ]

    QUESTION_TYPES = ('multiple_choice', 'text', 'rating', 'checkbox', 'nps')
    LEGACY_QUESTION_TYPES = ('single_choice', 'select', 'image_radio')

    store = models.ForeignKey(Store, on_delete=models.CASCADE, related_name='surveys')
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    questions = models.JSONField(default=list, blank=True)
    active = models.BooleanField(default=False)
    priority = models.IntegerField(default=0, db_index=True)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_DRAFT, db_index=True)
    target_audience = models.JSONField(default=dict, blank=True)
    display_rules = models.JSONField(default=dict, blank=True)
    style = models.JSONField(default=dict, blank=True)
    script_tag_id = models.CharField(max_length=64, blank=True)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    DOCUMENT_FIELDS = (
        ('storeId', 'store_id'),
        ('title', 'title'),
        ('description', 'description'),
        ('questions', 'questions'),
        ('active', 'active'),
        ('priority', 'priority'),
        ('status', 'status'),
        ('targetAudience', 'target_audience'),
        ('displayRules', 'display_rules'),
        ('style', 'style'),
        ('scriptTagId', 'script_tag_id'),
        ('createdAt', 'created_at'),
        ('updatedAt', 'updated_at'),
    )

    class Meta:
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['store', 'status', 'active'], name='surveys_sur_store_i_4f1c2e_idx'),
        ]

    def __str__(self):
        return self.title


ALLOWED_STATUS_TRANSITIONS = {
    Survey.STATUS_DRAFT: {Survey.STATUS_ACTIVE},
    Survey.STATUS_ACTIVE: {Survey.STATUS_PAUSED, Survey.STATUS_COMPLETED},
    Survey.STATUS_PAUSED: {Survey.STATUS_ACTIVE, Survey.STATUS_COMPLETED},
    Survey.STATUS_COMPLETED: set(),
}


def validate_status_transition(current, new_status):
    """Raise ValidationError unless ``current -> new_status`` is allowed."""
    if new_status not in ALLOWED_STATUS_TRANSITIONS:
        raise ValidationError(f"Unknown status '{new_status}'")
    if new_status == current:
        return
    if new_status not in ALLOWED_STATUS_TRANSITIONS.get(current, set()):
        raise ValidationError(f"Transition not allowed: {current} -> {new_status}")


class SurveyResponse(DocumentMixin, models.Model):
    """One shopper submission. Never updated after insert."""

    CUSTOMER_NEW = 'new'
    CUSTOMER_RETURNING = 'returning'
    CUSTOMER_TYPE_CHOICES = [
        (CUSTOMER_NEW, 'New'),
        (CUSTOMER_RETURNING, 'Returning'),
    ]

    survey = models.ForeignKey(Survey, on_delete=models.CASCADE, related_name='responses')
    # [{questionId, answer, timeSpent}]
    responses = models.JSONField(default=list)
    customer_email = models.EmailField(blank=True)
    customer_type = models.CharField(max_length=10, choices=CUSTOMER_TYPE_CHOICES)
    total_time_spent = models.FloatField(default=0)
    # userAgent, deviceType, location, pageUrl, cartValue
    metadata = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(default=timezone.now)

    DOCUMENT_FIELDS = (
        ('surveyId', 'survey_id'),
        ('responses', 'responses'),
        ('customerEmail', 'customer_email'),
        ('customerType', 'customer_type'),
        ('totalTimeSpent', 'total_time_spent'),
        ('metadata', 'metadata'),
        ('createdAt', 'created_at'),
    )

    class Meta:
        ordering = ['created_at', 'id']
        indexes = [
            models.Index(fields=['survey', 'created_at'], name='surveys_sur_survey__8d2a7b_idx'),
        ]

    def __str__(self):
        return f"Response {self.pk} to survey {self.survey_id}"


class SurveyAnalytics(DocumentMixin, models.Model):
    """Rollup kept in step with the survey's responses."""

    survey = models.OneToOneField(Survey, on_delete=models.CASCADE, related_name='analytics')
    views = models.PositiveIntegerField(default=0)
    completions = models.PositiveIntegerField(default=0)
    average_time_spent = models.FloatField(default=0)
    completion_rate = models.FloatField(default=0)
    # [{questionId, responses, skips, averageTimeSpent, responseDistribution}]
    question_analytics = models.JSONField(default=list, blank=True)
    new_customers = models.PositiveIntegerField(default=0)
    returning_customers = models.PositiveIntegerField(default=0)
    average_cart_value = models.FloatField(default=0)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(default=timezone.now)

    DOCUMENT_FIELDS = (
        ('surveyId', 'survey_id'),
        ('views', 'views'),
        ('completions', 'completions'),
        ('averageTimeSpent', 'average_time_spent'),
        ('completionRate', 'completion_rate'),
        ('questionAnalytics', 'question_analytics'),
        ('createdAt', 'created_at'),
        ('updatedAt', 'updated_at'),
    )

    DEMOGRAPHIC_FIELDS = (
        ('newCustomers', 'new_customers'),
        ('returningCustomers', 'returning_customers'),
        ('averageCartValue', 'average_cart_value'),
    )

    class Meta:
        verbose_name_plural = 'survey analytics'

    def __str__(self):
        return f"Analytics for survey {self.survey_id}"

    def to_document(self):
        document = super().to_document()
        document['demographicData'] = {
            key: getattr(self, field) for key, field in self.DEMOGRAPHIC_FIELDS
        }
        return document

    @classmethod
    def from_document(cls, document):
        instance = super().from_document(document)
        demographics = document.get('demographicData') or {}
        for key, field in cls.DEMOGRAPHIC_FIELDS:
            if demographics.get(key) is not None:
                setattr(instance, field, demographics[key])
        return instance
