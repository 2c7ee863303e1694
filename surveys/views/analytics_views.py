# surveys/views/analytics_views.py
import logging

from asgiref.sync import sync_to_async
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_POST

from core.utils.helpers import api_view
from surveys.services import get_services
from surveys.tasks import recompute_survey_rollup

logger = logging.getLogger("surveys")


def _window(request):
    return request.GET.get('startDate'), request.GET.get('endDate')


@require_GET
@api_view
async def survey_analytics(request, survey_id):
    start, end = _window(request)
    report = await get_services().analytics.analytics_report(survey_id, start, end)
    return JsonResponse(report)


@csrf_exempt
@require_POST
@api_view
async def recompute_analytics(request, survey_id):
    survey = await get_services().surveys.get_survey(survey_id)
    result = await sync_to_async(recompute_survey_rollup.delay)(survey['id'])
    logger.info(f"[ANALYTICS] Rollup recompute queued for survey {survey['id']} (task {result.id})")
    return JsonResponse({'taskId': result.id, 'surveyId': survey['id']}, status=202)


@require_GET
@api_view
async def sentiment_analysis(request, survey_id):
    start, end = _window(request)
    return JsonResponse(await get_services().analytics.sentiment(survey_id, start, end))


@require_GET
@api_view
async def correlation_analysis(request, survey_id):
    start, end = _window(request)
    return JsonResponse(await get_services().analytics.correlation(survey_id, start, end))


@require_GET
@api_view
async def completion_prediction(request, survey_id):
    start, end = _window(request)
    return JsonResponse(await get_services().analytics.completion_prediction(survey_id, start, end))


@require_GET
@api_view
async def user_journey(request, survey_id):
    start, end = _window(request)
    return JsonResponse(await get_services().analytics.user_journey(survey_id, start, end))
