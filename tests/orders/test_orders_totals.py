"""
Tests for order totals recalculation and the order read model.
"""

import uuid
from decimal import Decimal

from django.test import TestCase

from apps.common.types import NotFoundError
from apps.orders.services import OrderQueryService, OrderTotalsService
from tests.factories.restaurant import add_item, create_order, create_product, create_tenant


class OrderTotalsServiceTests(TestCase):
    """OrderTotalsService.recalculate"""

    def setUp(self):
        """Order with two taxed lines and one void line."""
        self.tenant = create_tenant()
        self.product = create_product(self.tenant, price='12.50')
        self.order = create_order(self.tenant)
        add_item(self.order, self.product, quantity=2, tax='3.00')
        add_item(self.order, self.product, quantity=1, tax='1.50')
        add_item(self.order, self.product, quantity=4, tax='6.00', is_void=True)

    def test_sums_non_void_items(self):
        order = OrderTotalsService.recalculate(self.order, Decimal('5.00'))

        self.assertEqual(order.subtotal, Decimal('37.50'))
        self.assertEqual(order.tax_amount, Decimal('4.50'))
        self.assertEqual(order.discount_amount, Decimal('5.00'))
        self.assertEqual(order.total, Decimal('37.00'))

        self.order.refresh_from_db()
        self.assertEqual(self.order.total, Decimal('37.00'))

    def test_total_never_negative(self):
        order = OrderTotalsService.recalculate(self.order, Decimal('500.00'))
        self.assertEqual(order.total, Decimal('0.00'))
        self.assertEqual(order.discount_amount, Decimal('500.00'))

    def test_empty_order(self):
        order = OrderTotalsService.recalculate(create_order(self.tenant), Decimal('0'))
        self.assertEqual(order.subtotal, Decimal('0.00'))
        self.assertEqual(order.total, Decimal('0.00'))

    def test_discount_rounded(self):
        order = OrderTotalsService.recalculate(self.order, Decimal('1.005'))
        self.assertEqual(order.discount_amount, Decimal('1.01'))


class OrderQueryServiceTests(TestCase):
    """Tenant-scoped order loading."""

    def setUp(self):
        """Create tenant and order."""
        self.tenant = create_tenant()
        self.product = create_product(self.tenant)
        self.order = create_order(self.tenant, [(self.product, 1)])

    def test_get_order_scoped_to_tenant(self):
        self.assertEqual(OrderQueryService.get_order(self.tenant.id, self.order.id), self.order)
        with self.assertRaises(NotFoundError):
            OrderQueryService.get_order(create_tenant('Otro', 'otro').id, self.order.id)
        with self.assertRaises(NotFoundError):
            OrderQueryService.get_order(self.tenant.id, uuid.uuid4())

    def test_active_items_in_line_order(self):
        void = add_item(self.order, self.product, is_void=True)
        second = add_item(self.order, self.product, quantity=3)

        items = OrderQueryService.get_active_items(self.order)

        self.assertEqual([item.line_number for item in items], [1, 3])
        self.assertEqual(items[1], second)
        self.assertNotIn(void, items)

    def test_order_numbers_are_sequential_per_tenant(self):
        second = create_order(self.tenant)
        self.assertTrue(self.order.order_number.startswith('ORD-'))
        self.assertEqual(int(second.order_number[-6:]), int(self.order.order_number[-6:]) + 1)
