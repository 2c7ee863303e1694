"""Seed a demo store with template surveys for local development."""

import random
from datetime import timedelta

from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from surveys.models import Store, Survey, SurveyAnalytics
from surveys.services import new_question_id

MULTIPLE_CHOICE_QUESTIONS = [
    'How satisfied are you with our product quality?',
    'Which feature do you use most frequently?',
    'How likely are you to recommend us to others?',
    'What is your preferred shopping time?',
    'Which category interests you the most?',
]

TEXT_QUESTIONS = [
    'What improvements would you suggest for our service?',
    'Please describe your recent shopping experience.',
    'What additional products would you like to see?',
    'How can we better serve your needs?',
    'What made you choose our store?',
]

RATING_QUESTIONS = [
    'Rate our customer service',
    'How would you rate the checkout experience?',
    'Rate the ease of navigation on our website',
    'Rate our delivery service',
    'How would you rate our price competitiveness?',
]

OPTION_WORDS = ['Excellent', 'Good', 'Average', 'Poor', 'Morning', 'Evening', 'Apparel', 'Home', 'Electronics']

CATEGORIES = ['Apparel', 'Home', 'Electronics', 'Beauty', 'Sports', 'Toys']

# (title prefix, (min questions, max questions), {question type: probability})
SURVEY_TEMPLATES = [
    ('Customer Satisfaction', (3, 5), {'multiple_choice': 0.4, 'rating': 0.4, 'text': 0.2}),
    ('Product Feedback', (4, 6), {'multiple_choice': 0.5, 'rating': 0.3, 'text': 0.2}),
    ('Website Experience', (3, 4), {'multiple_choice': 0.0, 'rating': 0.6, 'text': 0.4}),
    ('Post-Purchase', (2, 4), {'multiple_choice': 0.3, 'rating': 0.4, 'text': 0.3}),
]


def build_question(rng, distribution):
    roll = rng.random()
    question = {'id': new_question_id(), 'required': rng.random() < 0.5, 'options': []}
    if roll < distribution['multiple_choice']:
        question['questionType'] = 'multiple_choice'
        question['questionText'] = rng.choice(MULTIPLE_CHOICE_QUESTIONS)
        question['options'] = rng.sample(OPTION_WORDS, rng.randint(3, 5))
    elif roll < distribution['multiple_choice'] + distribution['rating']:
        question['questionType'] = 'rating'
        question['questionText'] = rng.choice(RATING_QUESTIONS)
    else:
        question['questionType'] = 'text'
        question['questionText'] = rng.choice(TEXT_QUESTIONS)
    return question


class Command(BaseCommand):
    help = 'Create a demo store with template surveys (Customer Satisfaction, Product Feedback, ...).'

    def add_arguments(self, parser):
        parser.add_argument('--count', type=int, default=20, help='Number of surveys to create (default: 20).')
        parser.add_argument('--shop', default='test-store.myshopify.com', help='Shop domain of the demo store.')
        parser.add_argument('--seed', type=int, default=None, help='Random seed for repeatable output.')
        parser.add_argument('--clear', action='store_true', help="Delete the store's existing surveys first.")

    def handle(self, *args, **options):
        rng = random.Random(options['seed'])
        now = timezone.now()

        with transaction.atomic():
            store, created = Store.objects.get_or_create(
                shop_domain=options['shop'],
                defaults={'access_token': 'test_token', 'email': 'store@example.com'},
            )
            if created:
                self.stdout.write(self.style.SUCCESS(f'Created store: {store.shop_domain}'))
            else:
                self.stdout.write(self.style.WARNING(f'Using existing store: {store.shop_domain}'))

            if options['clear']:
                deleted, _ = Survey.objects.filter(store=store).delete()
                self.stdout.write(f'Deleted {deleted} existing rows')

            type_counts = {}
            for index in range(options['count']):
                prefix, (low, high), distribution = rng.choice(SURVEY_TEMPLATES)
                questions = [build_question(rng, distribution) for _ in range(rng.randint(low, high))]
                for question in questions:
                    type_counts[question['questionType']] = type_counts.get(question['questionType'], 0) + 1

                active = rng.random() < 0.8
                cart_min = rng.randint(0, 100)
                survey = Survey.objects.create(
                    store=store,
                    title=f'{prefix}: {rng.choice(CATEGORIES)} Survey #{index + 1}',
                    questions=questions,
                    active=active,
                    status=Survey.STATUS_ACTIVE if active else Survey.STATUS_DRAFT,
                    priority=rng.randint(0, 5),
                    created_at=now - timedelta(days=rng.randint(0, 365)),
                    target_audience={
                        'newCustomers': rng.random() < 0.5,
                        'returningCustomers': rng.random() < 0.5,
                        'cartValue': {'min': cart_min, 'max': rng.randint(100, 500)},
                        'productCategories': rng.sample(CATEGORIES, 2),
                    },
                    display_rules={
                        'displayDelay': rng.randint(0, 10),
                        'displayLocation': ['homepage', 'checkout'],
                        'maxDisplaysPerUser': rng.randint(1, 5),
                        'startDate': (now - timedelta(days=rng.randint(1, 365))).isoformat(),
                        'endDate': (now + timedelta(days=rng.randint(1, 365))).isoformat(),
                    },
                    style={'primaryColor': rng.choice(['#008060', '#5c6ac4', '#de3618'])},
                )
                SurveyAnalytics.objects.create(survey=survey)

        self.stdout.write(self.style.SUCCESS(f"Seeded {options['count']} surveys for {store.shop_domain}"))
        self.stdout.write('\nQuestion type distribution:')
        for question_type, count in sorted(type_counts.items()):
            self.stdout.write(f'- {question_type}: {count}')
