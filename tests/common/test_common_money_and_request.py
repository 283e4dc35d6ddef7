"""
Tests for shared money helpers, UUID parsing and request correlation.
"""

import logging
import uuid
from decimal import Decimal

from django.http import HttpResponse
from django.test import RequestFactory, SimpleTestCase

from apps.common.logging import RequestIDFilter, get_request_context
from apps.common.middleware import RequestIDMiddleware
from apps.common.types import Err, Ok, parse_uuid
from apps.common.utils import clamp_non_negative, round_money, sum_money


class MoneyHelperTests(SimpleTestCase):
    def test_round_money_half_up(self):
        self.assertEqual(round_money(Decimal('2.345')), Decimal('2.35'))
        self.assertEqual(round_money(Decimal('2.344')), Decimal('2.34'))
        self.assertEqual(round_money(Decimal('0.005')), Decimal('0.01'))

    def test_clamp_non_negative(self):
        self.assertEqual(clamp_non_negative(Decimal('-3.00')), Decimal('0.00'))
        self.assertEqual(clamp_non_negative(Decimal('3.00')), Decimal('3.00'))

    def test_sum_money(self):
        self.assertEqual(sum_money([Decimal('1.10'), Decimal('2.205')]), Decimal('3.31'))
        self.assertEqual(sum_money([]), Decimal('0.00'))


class ParseUUIDTests(SimpleTestCase):
    def test_valid(self):
        value = uuid.uuid4()
        self.assertEqual(parse_uuid(str(value)), Ok(value))
        self.assertEqual(parse_uuid(value), Ok(value))

    def test_missing_and_invalid(self):
        self.assertEqual(parse_uuid(None, field='tenant'), Err('tenant is required'))
        self.assertEqual(parse_uuid('abc', field='tenant'), Err('tenant is not a valid UUID'))


class RequestIDMiddlewareTests(SimpleTestCase):
    """Request correlation header and log context."""

    def setUp(self):
        """Middleware around a view that records the log context."""
        self.factory = RequestFactory()
        self.seen_context = {}

        def view(request):
            self.seen_context.update(get_request_context())
            return HttpResponse('ok')

        self.middleware = RequestIDMiddleware(view)

    def test_generates_request_id(self):
        response = self.middleware(self.factory.get('/'))
        request_id = response['X-Request-ID']
        self.assertEqual(str(uuid.UUID(request_id)), request_id)
        self.assertEqual(self.seen_context['request_id'], request_id)

    def test_honours_incoming_request_id(self):
        response = self.middleware(self.factory.get('/', HTTP_X_REQUEST_ID='till-7-0001'))
        self.assertEqual(response['X-Request-ID'], 'till-7-0001')

    def test_context_cleared_after_request(self):
        self.middleware(self.factory.get('/'))
        self.assertEqual(get_request_context(), {'request_id': '-', 'tenant_id': None})

    def test_filter_adds_context_to_records(self):
        record = logging.LogRecord('apps', logging.INFO, __file__, 1, 'message', None, None)
        self.assertTrue(RequestIDFilter().filter(record))
        self.assertEqual(record.request_id, '-')
        self.assertIsNone(record.tenant_id)
