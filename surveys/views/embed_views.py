# surveys/views/embed_views.py
from django.http import HttpResponse, JsonResponse
from django.urls import reverse
from django.views.decorators.http import require_GET

from core.utils.helpers import absolute_url, api_view
from surveys.compiler import compile_survey
from surveys.rendering import build_embed_script, render_block
from surveys.services import get_services


def submit_url_for(request):
    return absolute_url(request, reverse('surveys:survey_responses'))


async def _compiled(request, survey_id):
    survey = await get_services().surveys.get_survey(survey_id)
    return compile_survey(survey, submit_url_for(request))


@require_GET
@api_view
async def survey_form(request, survey_id):
    """Presentation-neutral form for native UI shells."""
    form = await _compiled(request, survey_id)
    return JsonResponse(form.as_dict())


@require_GET
@api_view
async def survey_block(request, survey_id):
    form = await _compiled(request, survey_id)
    return JsonResponse({'containerId': form.container_id, 'code': render_block(form)})


@require_GET
@api_view
async def survey_script(request, survey_id):
    form = await _compiled(request, survey_id)
    response = HttpResponse(build_embed_script(form), content_type='application/javascript')
    response['Cache-Control'] = 'public, max-age=300'
    return response
