import logging

from asgiref.sync import async_to_sync
from celery import shared_task

logger = logging.getLogger(__name__)


@shared_task(bind=True)
def recompute_survey_rollup(self, survey_id: int) -> dict:
    """
    Rebuild one survey's rollup from its stored responses.
    Safe to run repeatedly; the result only depends on the response set.
    """
    from surveys.services import get_services

    logger.info(f"[TASK][ROLLUP] Recomputing survey {survey_id}")
    try:
        analytics = async_to_sync(get_services().aggregator.recompute_rollup)(survey_id)
    except Exception as e:
        logger.error(f"[TASK][ROLLUP] Survey {survey_id} failed: {e}", exc_info=True)
        raise

    return {
        'status': 'SUCCESS',
        'surveyId': analytics['surveyId'],
        'completions': analytics['completions'],
        'completionRate': analytics['completionRate'],
    }


@shared_task
def recompute_all_rollups() -> dict:
    """Nightly pass over every survey; one broken survey does not stop the rest."""
    from surveys.models import Survey

    survey_ids = list(Survey.objects.values_list('id', flat=True))
    logger.info(f"[TASK][ROLLUP] Recomputing {len(survey_ids)} surveys")

    failed = []
    for survey_id in survey_ids:
        try:
            recompute_survey_rollup.apply(args=[survey_id], throw=True)
        except Exception:
            failed.append(survey_id)

    if failed:
        logger.warning(f"[TASK][ROLLUP] {len(failed)} surveys failed: {failed}")
    return {
        'status': 'SUCCESS' if not failed else 'PARTIAL',
        'processed': len(survey_ids) - len(failed),
        'failed': failed,
    }
