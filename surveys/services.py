"""
Survey lifecycle and the composition root that wires the pipeline together.

``SurveyServices`` is built once in ``SurveysConfig.ready``; views, tasks and
commands reach it through ``get_services()``.
"""
import secrets

from django.apps import apps
from django.conf import settings
from django.core.exceptions import ValidationError
from django.utils import timezone

from core.exceptions import NotFoundError
from core.services.document_store import DjangoDocumentStore
from core.services.survey_analysis import AnalyticsEngine
from core.utils.helpers import parse_id
from core.utils.logging_utils import StructuredLogger, log_data_change_async
from core.validators import SurveyPayloadValidator
from surveys.aggregator import ResponseAggregator
from surveys.models import Survey, validate_status_transition
from surveys.platform import ScriptTagPublisher
from surveys.targeting import TargetingEvaluator

logger = StructuredLogger('surveys')

ALLOWED_QUESTION_TYPES = Survey.QUESTION_TYPES + Survey.LEGACY_QUESTION_TYPES


def new_question_id():
    return secrets.token_hex(6)


def prepare_questions(questions):
    prepared = []
    for question in questions:
        question = dict(question)
        question['id'] = str(question.get('id') or new_question_id())
        question['required'] = bool(question.get('required', False))
        question.setdefault('options', [])
        prepared.append(question)
    return prepared


class SurveyService:
    def __init__(self, store, publisher):
        self.store = store
        self.publisher = publisher

    async def _get_store(self, store_id):
        store = await self.store.find_one('stores', {'pk': parse_id(store_id, 'Store')})
        if store is None:
            raise NotFoundError('Store not found', storeId=store_id)
        return store

    async def get_survey(self, survey_id):
        survey = await self.store.find_one('surveys', {'pk': parse_id(survey_id)})
        if survey is None:
            raise NotFoundError('Survey not found', surveyId=survey_id)
        return survey

    async def list_surveys(self, store_id):
        store_id = SurveyPayloadValidator.validate_id(store_id, 'storeId')
        return await self.store.find('surveys', {'store_id': store_id}, order_by=['-created_at', '-id'])

    async def create_survey(self, payload):
        store_id, title = SurveyPayloadValidator.validate_create(payload, ALLOWED_QUESTION_TYPES)
        store = await self._get_store(store_id)

        status = payload.get('status') or Survey.STATUS_DRAFT
        validate_status_transition(Survey.STATUS_DRAFT, status)

        # the survey's own style wins over the store default
        default_style = (store.get('settings') or {}).get('defaultSurveyStyle') or {}
        style = {**default_style, **(payload.get('style') or {})}

        survey = await self.store.insert_related('surveys', {
            'storeId': store['id'],
            'title': title,
            'description': payload.get('description') or '',
            'questions': prepare_questions(payload['questions']),
            'active': bool(payload.get('active', False)),
            'priority': int(payload.get('priority') or 0),
            'status': status,
            'targetAudience': payload.get('targetAudience') or {},
            'displayRules': payload.get('displayRules') or {},
            'style': style,
        }, link_key='surveyId', children={'survey_analytics': {}})
        await log_data_change_async('Survey', 'create', survey['id'], store_id=store['id'], title=title)
        return survey

    async def change_status(self, survey_id, status, active=None):
        survey = await self.get_survey(survey_id)
        if not status:
            raise ValidationError('status is required')
        validate_status_transition(survey['status'], status)
        changes = {'status': status, 'updated_at': timezone.now()}
        if active is not None:
            if not isinstance(active, bool):
                raise ValidationError('active must be a boolean')
            changes['active'] = active
        updated = await self.store.update_one('surveys', {'pk': survey['id']}, set=changes)
        await log_data_change_async(
            'Survey', 'status', survey['id'], old=survey['status'], new=status, active=updated['active'],
        )
        return updated

    async def delete_survey(self, survey_id):
        survey = await self.get_survey(survey_id)
        deleted = await self.store.delete_cascade('surveys', {'pk': survey['id']})
        responses = deleted['survey_responses']
        await log_data_change_async('Survey', 'delete', survey['id'], responses=responses)
        return {'message': 'Survey and related data deleted successfully', 'deletedResponses': responses}

    async def publish_survey(self, survey_id, script_url):
        survey = await self.get_survey(survey_id)
        store = await self._get_store(survey['storeId'])
        script_tag = await self.publisher.publish(store, script_url)
        updated = await self.store.update_one('surveys', {'pk': survey['id']}, set={
            'script_tag_id': str(script_tag.get('id') or ''),
            'updated_at': timezone.now(),
        })
        logger.info("Survey published", survey_id=survey['id'], script_tag_id=updated['scriptTagId'])
        return {'survey': updated, 'scriptTag': script_tag}


class SurveyServices:
    """Composition root: one document store shared by every component."""

    def __init__(self, store=None, publisher=None):
        self.store = store or DjangoDocumentStore()
        self.publisher = publisher or ScriptTagPublisher()
        self.targeting = TargetingEvaluator(self.store)
        self.aggregator = ResponseAggregator(self.store)
        self.analytics = AnalyticsEngine(
            self.store, cache_timeout=getattr(settings, 'SURVEY_ANALYTICS_CACHE_TIMEOUT', None),
        )
        self.surveys = SurveyService(self.store, self.publisher)


def get_services() -> SurveyServices:
    return apps.get_app_config('surveys').services
