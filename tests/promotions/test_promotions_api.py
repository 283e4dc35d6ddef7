"""
Tests for the promotions REST API: tenant header, authentication, catalog
endpoints and order promotion endpoints.
"""

import uuid
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from apps.orders.models import Order
from apps.promotions.models import AppliedPromotion, Promotion
from tests.factories.restaurant import create_coupon, create_order, create_product, create_promotion, create_tenant

User = get_user_model()


class PromotionAPITestCase(TestCase):
    """Authenticated client bound to one restaurant."""

    def setUp(self):
        """Create user, tenant and a $40.00 order."""
        self.user = User.objects.create_user(username='cashier', password='testpass123')
        self.tenant = create_tenant()
        steak = create_product(self.tenant, name='Lomo', price='30.00')
        salad = create_product(self.tenant, name='Ensalada', price='10.00')
        self.order = create_order(self.tenant, [(steak, 1), (salad, 1)])

        self.client = APIClient()
        self.client.force_authenticate(user=self.user)
        self.headers = {'HTTP_X_TENANT_ID': str(self.tenant.id)}


class TenantHeaderTests(PromotionAPITestCase):
    def test_requires_authentication(self):
        response = APIClient().get(reverse('promotions:promotion_list'), **self.headers)
        self.assertIn(response.status_code, (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN))

    def test_missing_or_invalid_header(self):
        for headers in ({}, {'HTTP_X_TENANT_ID': 'not-a-uuid'}, {'HTTP_X_TENANT_ID': str(uuid.uuid4())}):
            with self.subTest(headers=headers):
                response = self.client.get(reverse('promotions:promotion_list'), **headers)
                self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
                self.assertIn('error', response.data)

    def test_inactive_tenant_rejected(self):
        self.tenant.is_active = False
        self.tenant.save()
        response = self.client.get(reverse('promotions:promotion_list'), **self.headers)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class PromotionCatalogAPITests(PromotionAPITestCase):
    """CRUD endpoints."""

    def test_create_and_get(self):
        payload = {
            'name': 'Happy hour',
            'promo_type': 'happy_hour',
            'discount_value': '30.00',
            'start_time': '17:00',
            'end_time': '19:00',
            'days_of_week': [4, 5],
            'product_ids': [str(uuid.uuid4())],
            'scope': 'product',
        }
        response = self.client.post(reverse('promotions:promotion_list'), payload, format='json', **self.headers)

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['discount_value'], '30.00')
        self.assertEqual(response.data['days_of_week'], [4, 5])
        self.assertEqual(response.data['product_ids'], payload['product_ids'])

        detail = self.client.get(
            reverse('promotions:promotion_detail', args=[response.data['id']]), **self.headers
        )
        self.assertEqual(detail.status_code, status.HTTP_200_OK)
        self.assertEqual(detail.data['name'], 'Happy hour')

    def test_create_invalid_input(self):
        response = self.client.post(
            reverse('promotions:promotion_list'),
            {'name': 'Broken', 'promo_type': 'percentage', 'discount_value': '10', 'start_time': '7pm'},
            format='json',
            **self.headers,
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('start_time', response.data['details'])

    def test_create_business_validation_error(self):
        response = self.client.post(
            reverse('promotions:promotion_list'),
            {'name': 'Too much', 'promo_type': 'percentage', 'discount_value': '150'},
            format='json',
            **self.headers,
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'invalid_promotion')

    def test_duplicate_coupon(self):
        create_coupon(self.tenant, code='SAVE10')
        response = self.client.post(
            reverse('promotions:promotion_list'),
            {'name': 'Dup', 'promo_type': 'coupon', 'discount_value': '5', 'coupon_code': 'save10'},
            format='json',
            **self.headers,
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'invalid_coupon')

    def test_list_with_filters(self):
        create_promotion(self.tenant, name='Active', priority=2)
        create_promotion(self.tenant, name='Inactive', is_active=False)

        response = self.client.get(
            reverse('promotions:promotion_list'), {'status': 'active', 'limit': 10}, **self.headers
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([row['name'] for row in response.data['data']], ['Active'])
        self.assertEqual(response.data['total'], 1)
        self.assertEqual(response.data['limit'], 10)
        self.assertEqual(response.data['total_pages'], 1)

    def test_update_toggle_delete(self):
        promotion = create_promotion(self.tenant, name='Lunch')
        url = reverse('promotions:promotion_detail', args=[promotion.id])

        response = self.client.put(url, {'priority': 7}, format='json', **self.headers)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['priority'], 7)
        self.assertEqual(response.data['name'], 'Lunch')

        response = self.client.patch(reverse('promotions:promotion_toggle', args=[promotion.id]), **self.headers)
        self.assertFalse(response.data['is_active'])

        response = self.client.delete(url, **self.headers)
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Promotion.objects.filter(id=promotion.id).exists())

    def test_update_with_null_start_date(self):
        promotion = create_promotion(self.tenant, name='Lunch')
        url = reverse('promotions:promotion_detail', args=[promotion.id])

        response = self.client.put(url, {'start_date': None, 'priority': 2}, format='json', **self.headers)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['priority'], 2)
        promotion.refresh_from_db()
        self.assertIsNotNone(promotion.start_date)

    def test_other_tenant_promotion_not_found(self):
        promotion = create_promotion(create_tenant('Otro', 'otro'))
        response = self.client.get(reverse('promotions:promotion_detail', args=[promotion.id]), **self.headers)
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class OrderPromotionAPITests(PromotionAPITestCase):
    """Apply, coupon, list, preview and remove endpoints."""

    def test_apply_automatic(self):
        promotion = create_promotion(self.tenant, name='10%')

        response = self.client.post(reverse('promotions:apply_automatic', args=[self.order.id]), **self.headers)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_discount'], '4.00')
        self.assertEqual(len(response.data['discounts']), 2)
        self.assertEqual(response.data['discounts'][0]['promotion_id'], str(promotion.id))
        self.order.refresh_from_db()
        self.assertEqual(self.order.total, Decimal('36.00'))

    def test_apply_coupon_and_list(self):
        create_coupon(self.tenant, code='SAVE10')

        response = self.client.post(
            reverse('promotions:apply_coupon', args=[self.order.id]), {'coupon_code': 'save10'}, format='json', **self.headers
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {'promo_name': 'Coupon SAVE10', 'discount_amount': '4.00', 'coupon_code': 'SAVE10'})

        listing = self.client.get(reverse('promotions:order_promotions', args=[self.order.id]), **self.headers)
        self.assertEqual(len(listing.data), 1)
        self.assertEqual(listing.data[0]['discount_amount'], '4.00')
        self.assertEqual(listing.data[0]['promotion']['coupon_code'], 'SAVE10')

    def test_coupon_errors(self):
        create_coupon(self.tenant, code='MIN50', min_order_amount=Decimal('50.00'))
        url = reverse('promotions:apply_coupon', args=[self.order.id])

        response = self.client.post(url, {'coupon_code': 'MIN50'}, format='json', **self.headers)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'below_minimum_order_amount')

        response = self.client.post(url, {'coupon_code': 'UNKNOWN'}, format='json', **self.headers)
        self.assertEqual(response.data['error'], 'invalid_coupon')

        response = self.client.post(url, {}, format='json', **self.headers)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('coupon_code', response.data['details'])

    def test_unknown_order(self):
        response = self.client.post(reverse('promotions:apply_automatic', args=[uuid.uuid4()]), **self.headers)
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_applicable_preview(self):
        promotion = create_promotion(self.tenant)
        response = self.client.get(reverse('promotions:order_applicable', args=[self.order.id]), **self.headers)
        self.assertEqual([row['id'] for row in response.data], [str(promotion.id)])
        self.assertFalse(AppliedPromotion.objects.exists())

    def test_remove(self):
        coupon = create_coupon(self.tenant, code='SAVE10')
        self.client.post(
            reverse('promotions:apply_coupon', args=[self.order.id]), {'coupon_code': 'SAVE10'}, format='json', **self.headers
        )
        url = reverse('promotions:remove_promotion', args=[self.order.id, coupon.id])

        response = self.client.delete(url, **self.headers)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {'removed_discount': '4.00'})
        self.assertEqual(Order.objects.get(id=self.order.id).discount_amount, Decimal('0.00'))

        response = self.client.delete(url, **self.headers)
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
