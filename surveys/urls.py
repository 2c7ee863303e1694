# surveys/urls.py
from django.urls import path

from .views import analytics_views, api_views, embed_views

app_name = 'surveys'

urlpatterns = [
    # --- Targeting & submissions (public widget) ---
    path('api/active-surveys', api_views.active_surveys, name='active_surveys'),
    path('api/survey-responses', api_views.survey_responses, name='survey_responses'),

    # --- Survey lifecycle ---
    path('api/surveys', api_views.surveys_collection, name='surveys'),
    path('api/surveys/<str:survey_id>', api_views.survey_detail, name='survey_detail'),
    path('api/surveys/<str:survey_id>/status', api_views.survey_status, name='survey_status'),
    path('api/surveys/<str:survey_id>/views', api_views.survey_views, name='survey_views'),
    path('api/surveys/<str:survey_id>/publish', api_views.survey_publish, name='survey_publish'),

    # --- Analytics ---
    path('api/surveys/<str:survey_id>/analytics', analytics_views.survey_analytics, name='survey_analytics'),
    path('api/surveys/<str:survey_id>/analytics/recompute', analytics_views.recompute_analytics, name='recompute_analytics'),
    path('api/surveys/<str:survey_id>/sentiment-analysis', analytics_views.sentiment_analysis, name='sentiment_analysis'),
    path('api/surveys/<str:survey_id>/correlation-analysis', analytics_views.correlation_analysis, name='correlation_analysis'),
    path('api/surveys/<str:survey_id>/completion-prediction', analytics_views.completion_prediction, name='completion_prediction'),
    path('api/surveys/<str:survey_id>/user-journey', analytics_views.user_journey, name='user_journey'),

    # --- Embeddable widget ---
    path('api/surveys/<str:survey_id>/form', embed_views.survey_form, name='survey_form'),
    path('api/surveys/<str:survey_id>/block', embed_views.survey_block, name='survey_block'),
    path('surveys/<str:survey_id>/script.js', embed_views.survey_script, name='embed_script'),
]
