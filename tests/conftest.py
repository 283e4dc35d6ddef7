# ===============================================================================
# PYTEST CONFIGURATION FOR MESA POS PROMOTIONS
# ===============================================================================
"""
Global test configuration for the Mesa POS promotions engine.

Test Structure:
- tests/ mirrors apps/ structure for app-specific tests
- tests/factories/ holds plain create_* helpers shared by all apps
- Naming convention: test_{app}_{feature}.py

Test Discovery:
- Run specific app tests: pytest tests/promotions/
- Run all tests: pytest tests/
"""

import os

import django


def pytest_configure():
    """Configure Django settings for pytest"""
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings.test')

    # Configure Django
    django.setup()

# ===============================================================================
# PYTEST FIXTURES
# ===============================================================================

import pytest  # noqa: E402
from django.contrib.auth import get_user_model  # noqa: E402

from tests.factories.restaurant import create_order, create_product, create_tenant  # noqa: E402

User = get_user_model()


@pytest.fixture
def staff_user():
    """Create a staff user for API tests"""
    return User.objects.create_user(
        username='cashier',
        email='cashier@mesa.test',
        password='testpass123',
        is_staff=True,
    )


@pytest.fixture
def tenant():
    """Create an active restaurant"""
    return create_tenant()


@pytest.fixture
def two_item_order(tenant):
    """Order with a $30.00 and a $10.00 line (subtotal $40.00)"""
    steak = create_product(tenant, name='Lomo', price='30.00')
    salad = create_product(tenant, name='Ensalada', price='10.00')
    return create_order(tenant, [(steak, 1), (salad, 1)])
