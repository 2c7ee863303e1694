"""Rebuild survey rollups from stored responses."""

from django.core.management.base import BaseCommand, CommandError

from surveys.models import Survey
from surveys.tasks import recompute_all_rollups, recompute_survey_rollup


class Command(BaseCommand):
    help = 'Recompute analytics rollups for one survey (--survey) or for all of them.'

    def add_arguments(self, parser):
        parser.add_argument('--survey', type=int, help='Survey id to recompute. Defaults to all surveys.')

    def handle(self, *args, **options):
        survey_id = options.get('survey')

        if survey_id is None:
            result = recompute_all_rollups.apply().get()
            self.stdout.write(
                self.style.SUCCESS(f"Recomputed {result['processed']} surveys")
            )
            if result['failed']:
                self.stdout.write(self.style.WARNING(f"Failed: {result['failed']}"))
            return

        if not Survey.objects.filter(pk=survey_id).exists():
            raise CommandError(f'Survey {survey_id} not found')
        result = recompute_survey_rollup.apply(args=[survey_id], throw=True).get()
        self.stdout.write(self.style.SUCCESS(
            f"Survey {survey_id}: {result['completions']} completions, "
            f"completion rate {result['completionRate']:.2%}"
        ))
