# surveys/signals.py
import logging

from django.core.cache import cache
from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from core.services.survey_analysis import bump_report_version, report_cache_prefix
from .models import Survey, SurveyResponse

logger = logging.getLogger('surveys')


def invalidate_pattern(pattern):
    """Drops matching keys on backends that support it (django-redis)."""
    if hasattr(cache, 'delete_pattern'):
        cache.delete_pattern(pattern)


def invalidate_survey_reports(survey_id):
    # Version bump works on every backend; the pattern delete frees Redis memory
    bump_report_version(survey_id)
    invalidate_pattern(f"{report_cache_prefix(survey_id)}_*_v*")


@receiver(post_save, sender=Survey)
@receiver(post_delete, sender=Survey)
def invalidate_survey_cache(sender, instance, created=False, **kwargs):
    invalidate_survey_reports(instance.pk)
    action = "created" if created else "updated"
    if kwargs.get('signal') is post_delete:
        action = "deleted"
    logger.info(f"Survey {instance.pk} {action} - report cache invalidated")


@receiver(post_save, sender=SurveyResponse)
@receiver(post_delete, sender=SurveyResponse)
def invalidate_response_cache(sender, instance, created=False, **kwargs):
    invalidate_survey_reports(instance.survey_id)
    logger.debug(f"Response {instance.pk} changed - survey {instance.survey_id} report cache invalidated")
