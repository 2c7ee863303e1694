# surveys/apps.py
from django.apps import AppConfig


class SurveysConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'surveys'
    services = None

    def ready(self):
        from surveys.services import SurveyServices

        self.services = SurveyServices()
        # signal handlers register on import
        import surveys.signals  # noqa: F401
