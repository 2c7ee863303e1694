"""
Targeting: picks at most one active survey for a shopper context.

The store query narrows candidates to the store's live surveys; the display
window and audience predicates are evaluated here so that a missing bound or
missing rule behaves the same on every backend.
"""
import logging
import math
from dataclasses import dataclass
from datetime import datetime, timezone as dt_timezone
from typing import Optional

from django.core.exceptions import ValidationError
from django.utils import timezone
from django.utils.dateparse import parse_datetime, parse_date

logger = logging.getLogger('surveys')

CUSTOMER_TYPES = ('new', 'returning')


@dataclass(frozen=True)
class ShopperContext:
    customer_type: Optional[str] = None
    cart_value: Optional[float] = None
    product_category: Optional[str] = None
    current_url: Optional[str] = None
    order_count: Optional[int] = None

    @classmethod
    def from_query(cls, params):
        """Build a context from query parameters; blank values are ignored."""
        def _get(name):
            value = params.get(name)
            if value is None:
                return None
            value = str(value).strip()
            return value or None

        customer_type = _get('customerType')
        if customer_type is not None and customer_type not in CUSTOMER_TYPES:
            raise ValidationError(f"Invalid customerType '{customer_type}'")

        cart_value = _get('cartValue')
        if cart_value is not None:
            try:
                cart_value = float(cart_value)
                if not math.isfinite(cart_value):
                    raise ValueError(cart_value)
            except ValueError:
                raise ValidationError(f"Invalid cartValue '{cart_value}'")

        order_count = _get('orderCount')
        if order_count is not None:
            try:
                order_count = int(order_count)
            except ValueError:
                raise ValidationError(f"Invalid orderCount '{order_count}'")

        return cls(
            customer_type=customer_type,
            cart_value=cart_value,
            product_category=_get('productCategory'),
            current_url=_get('currentUrl'),
            order_count=order_count,
        )


def _as_datetime(value):
    """Parse a stored date bound; ``None`` when it is missing or unusable."""
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = parse_datetime(str(value)) or _start_of_day(parse_date(str(value)))
        except ValueError:
            return None
        if parsed is None:
            return None
    if timezone.is_naive(parsed):
        parsed = timezone.make_aware(parsed, dt_timezone.utc)
    return parsed


def _start_of_day(day):
    return datetime(day.year, day.month, day.day) if day else None


def within_display_window(display_rules, now) -> bool:
    rules = display_rules if isinstance(display_rules, dict) else {}
    for key in ('startDate', 'endDate'):
        raw = rules.get(key)
        if raw is None or raw == '':
            continue
        bound = _as_datetime(raw)
        # an unreadable bound never matches
        if bound is None:
            return False
        if key == 'startDate' and now < bound:
            return False
        if key == 'endDate' and now > bound:
            return False
    return True


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _within_range(value, bounds) -> bool:
    if bounds is None:
        return True
    if not isinstance(bounds, dict):
        return False
    for side in ('min', 'max'):
        limit = bounds.get(side)
        if limit is None:
            continue
        if not _is_number(limit):
            return False
        if side == 'min' and value < limit:
            return False
        if side == 'max' and value > limit:
            return False
    return True


def _as_list(value):
    return value if isinstance(value, list) else []


def matches_context(survey, context: ShopperContext) -> bool:
    audience = survey.get('targetAudience') or {}
    rules = survey.get('displayRules') or {}

    if context.customer_type is not None:
        flag = 'newCustomers' if context.customer_type == 'new' else 'returningCustomers'
        if audience.get(flag) is not True:
            return False
    if context.cart_value is not None:
        if not _within_range(context.cart_value, audience.get('cartValue')):
            return False
    if context.product_category is not None:
        if context.product_category not in _as_list(audience.get('productCategories')):
            return False
    if context.current_url is not None:
        if context.current_url not in _as_list(rules.get('displayLocation')):
            return False
    if context.order_count is not None:
        if not _within_range(context.order_count, audience.get('orderCount')):
            return False
    return True


def _ranking_key(survey):
    created = _as_datetime(survey.get('createdAt'))
    return (survey.get('priority') or 0, created.timestamp() if created else 0.0)


def pick_survey(candidates, context: ShopperContext, now=None):
    """Highest priority, then newest, among candidates eligible right now."""
    now = now or timezone.now()
    eligible = [
        s for s in candidates
        if s.get('status') == 'active' and s.get('active') is True
        and within_display_window(s.get('displayRules'), now)
        and matches_context(s, context)
    ]
    if not eligible:
        return None
    return max(eligible, key=_ranking_key)


class TargetingEvaluator:
    def __init__(self, store):
        self.store = store

    async def select_survey(self, store_id, context: ShopperContext, now=None):
        candidates = await self.store.find(
            'surveys',
            {'store_id': store_id, 'status': 'active', 'active': True},
        )
        chosen = pick_survey(candidates, context, now=now)
        logger.debug(
            f"Targeting store={store_id} candidates={len(candidates)} "
            f"chosen={chosen['id'] if chosen else None}"
        )
        return chosen
