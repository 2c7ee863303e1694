# surveys/views/api_views.py
import logging

from django.conf import settings
from django.core.exceptions import ValidationError
from django.http import JsonResponse
from django.urls import reverse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_http_methods, require_POST
from django_ratelimit.core import is_ratelimited

from core.utils.helpers import absolute_url, api_view, parse_json_body
from core.validators import ResponsePayloadValidator, SurveyPayloadValidator
from core.views_ratelimit import ratelimit_error
from surveys.services import get_services
from surveys.targeting import ShopperContext

logger = logging.getLogger("surveys")

RESPONSE_RATE_GROUP = 'surveys.responses'


def response_rate(group, request):
    return getattr(settings, 'SURVEY_RESPONSE_RATE_LIMIT', '60/h')


def script_url_for(request, survey_id):
    return absolute_url(request, reverse('surveys:embed_script', args=[survey_id]))


@require_GET
@api_view
async def active_surveys(request):
    """Top eligible survey for the shopper, or an empty list."""
    store_id = SurveyPayloadValidator.validate_id(request.GET.get('storeId'), 'storeId')
    context = ShopperContext.from_query(request.GET)
    survey = await get_services().targeting.select_survey(store_id, context)
    return JsonResponse(survey if survey is not None else [], safe=False)


@csrf_exempt
@require_http_methods(["GET", "POST"])
@api_view
async def surveys_collection(request):
    services = get_services()
    if request.method == "POST":
        survey = await services.surveys.create_survey(parse_json_body(request))
        logger.info(f"[CREATE_SURVEY] Survey {survey['id']} created for store {survey['storeId']}")
        return JsonResponse(survey, status=201)

    surveys = await services.surveys.list_surveys(request.GET.get('storeId'))
    return JsonResponse(surveys, safe=False)


@csrf_exempt
@require_http_methods(["GET", "DELETE"])
@api_view
async def survey_detail(request, survey_id):
    services = get_services()
    if request.method == "DELETE":
        result = await services.surveys.delete_survey(survey_id)
        return JsonResponse(result)
    return JsonResponse(await services.surveys.get_survey(survey_id))


@csrf_exempt
@require_http_methods(["PATCH"])
@api_view
async def survey_status(request, survey_id):
    data = parse_json_body(request)
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    survey = await get_services().surveys.change_status(
        survey_id, data.get('status'), active=data.get('active'),
    )
    return JsonResponse(survey)


@csrf_exempt
@require_POST
@api_view
async def survey_views(request, survey_id):
    analytics = await get_services().aggregator.record_view(survey_id)
    return JsonResponse(analytics)


@csrf_exempt
@require_POST
@api_view
async def survey_responses(request):
    """Shopper submission from the embed script or a native checkout shell."""
    # the decorator form only wraps sync views
    if is_ratelimited(request, group=RESPONSE_RATE_GROUP, key='ip', rate=response_rate,
                      method='POST', increment=True):
        return ratelimit_error(request)

    data = parse_json_body(request)
    survey_id = ResponsePayloadValidator.validate(data)
    response = await get_services().aggregator.record_response(
        survey_id,
        data['responses'],
        {
            'customerType': data['customerType'],
            'customerEmail': data.get('customerEmail'),
            'totalTimeSpent': data.get('totalTimeSpent'),
            'metadata': data.get('metadata'),
        },
    )
    return JsonResponse(response, status=201)


@csrf_exempt
@require_POST
@api_view
async def survey_publish(request, survey_id):
    result = await get_services().surveys.publish_survey(survey_id, script_url_for(request, survey_id))
    return JsonResponse(result)
