"""
Tests for discount calculation: rule variants, eligibility and apportionment.
Pure calculations over DiscountLine snapshots, no database.
"""

import uuid
from decimal import Decimal
from types import SimpleNamespace

from django.test import SimpleTestCase

from apps.promotions.calculators import (
    DiscountCalculator,
    DiscountResult,
    ItemDiscount,
    cap_discount,
    distribute_proportionally,
)
from apps.promotions.exceptions import PromotionValidationError
from apps.promotions.rules import (
    BuyXGetYDiscount,
    DiscountLine,
    EligibilityScope,
    FixedAmountDiscount,
    FlatOrderDiscount,
    PercentageDiscount,
    build_discount_rule,
)


def make_line(subtotal, quantity=1, unit_price=None, product_id=None, category_id=None):
    subtotal = Decimal(subtotal)
    return DiscountLine(
        item_id=uuid.uuid4(),
        product_id=product_id or uuid.uuid4(),
        category_id=category_id,
        quantity=quantity,
        unit_price=Decimal(unit_price) if unit_price is not None else subtotal / quantity,
        subtotal=subtotal,
    )


def make_promotion(promo_type='percentage', discount_value='10', scope='order', **extra):
    values = {
        'promo_type': promo_type,
        'discount_value': Decimal(discount_value),
        'scope': scope,
        'product_ids': [],
        'category_ids': [],
        'buy_quantity': None,
        'get_quantity': None,
    }
    values.update(extra)
    return SimpleNamespace(**values)


class BuildDiscountRuleTests(SimpleTestCase):
    """Promo type to rule variant conversion."""

    def test_percentage_and_happy_hour(self):
        self.assertEqual(build_discount_rule(make_promotion('percentage', '15')), PercentageDiscount(Decimal('15')))
        self.assertEqual(build_discount_rule(make_promotion('happy_hour', '50')), PercentageDiscount(Decimal('50')))

    def test_fixed_amount_shares_only_for_order_scope(self):
        self.assertEqual(
            build_discount_rule(make_promotion('fixed_amount', '5')),
            FixedAmountDiscount(amount=Decimal('5'), per_item=False),
        )
        self.assertEqual(
            build_discount_rule(make_promotion('fixed_amount', '5', scope='product')),
            FixedAmountDiscount(amount=Decimal('5'), per_item=True),
        )

    def test_buy_x_get_y_defaults_to_buy_two_get_one(self):
        rule = build_discount_rule(make_promotion('buy_x_get_y', '0'))
        self.assertEqual(rule, BuyXGetYDiscount(buy_quantity=2, get_quantity=1))
        self.assertEqual(rule.group_size, 3)

    def test_coupon_threshold(self):
        """A coupon value of 100 is a percent, 100.01 is a currency amount."""
        self.assertEqual(build_discount_rule(make_promotion('coupon', '100')), PercentageDiscount(Decimal('100')))
        self.assertEqual(build_discount_rule(make_promotion('coupon', '100.01')), FlatOrderDiscount(Decimal('100.01')))

    def test_unknown_type_rejected(self):
        with self.assertRaises(PromotionValidationError):
            build_discount_rule(make_promotion('loyalty'))


class EligibilityScopeTests(SimpleTestCase):
    """Which lines a promotion may touch."""

    def setUp(self):
        """Two lines in different categories."""
        self.drinks = uuid.uuid4()
        self.coffee = make_line('2.00', category_id=self.drinks)
        self.burger = make_line('8.00', category_id=uuid.uuid4())

    def test_order_scope_allows_everything(self):
        scope = EligibilityScope(scope='order')
        self.assertEqual(scope.filter([self.coffee, self.burger]), [self.coffee, self.burger])

    def test_product_scope_filters_by_product(self):
        scope = EligibilityScope(scope='product', product_ids=frozenset({str(self.coffee.product_id)}))
        self.assertEqual(scope.filter([self.coffee, self.burger]), [self.coffee])

    def test_category_scope_filters_by_category(self):
        scope = EligibilityScope(scope='category', category_ids=frozenset({str(self.drinks)}))
        self.assertEqual(scope.filter([self.coffee, self.burger]), [self.coffee])

    def test_category_scope_skips_uncategorized_lines(self):
        uncategorized = make_line('3.00')
        scope = EligibilityScope(scope='category', category_ids=frozenset({str(self.drinks)}))
        self.assertEqual(scope.filter([uncategorized]), [])

    def test_empty_id_list_allows_every_line(self):
        """Product or category scope without ids does not restrict."""
        self.assertEqual(EligibilityScope(scope='product').filter([self.coffee, self.burger]), [self.coffee, self.burger])
        self.assertEqual(EligibilityScope(scope='category').filter([self.coffee, self.burger]), [self.coffee, self.burger])

    def test_for_promotion_normalizes_ids_to_strings(self):
        promotion = make_promotion(scope='product', product_ids=[self.coffee.product_id])
        scope = EligibilityScope.for_promotion(promotion)
        self.assertTrue(scope.allows(self.coffee))
        self.assertFalse(scope.allows(self.burger))


class DistributeProportionallyTests(SimpleTestCase):
    """Remainder-to-last apportionment."""

    def test_scenario_b_split(self):
        """$5.00 over $30 + $10 lines gives $3.75 and $1.25."""
        first, second = uuid.uuid4(), uuid.uuid4()
        shares = distribute_proportionally(Decimal('5.00'), [(first, Decimal('30.00')), (second, Decimal('10.00'))])
        self.assertEqual(shares, [ItemDiscount(first, Decimal('3.75')), ItemDiscount(second, Decimal('1.25'))])

    def test_last_entry_absorbs_rounding(self):
        ids = [uuid.uuid4() for _ in range(3)]
        shares = distribute_proportionally(Decimal('10.00'), [(item_id, Decimal('1.00')) for item_id in ids])
        self.assertEqual([share.discount for share in shares], [Decimal('3.33'), Decimal('3.33'), Decimal('3.34')])
        self.assertEqual(sum(share.discount for share in shares), Decimal('10.00'))

    def test_zero_weights_give_nothing(self):
        self.assertEqual(distribute_proportionally(Decimal('5.00'), [(uuid.uuid4(), Decimal('0.00'))]), [])
        self.assertEqual(distribute_proportionally(Decimal('5.00'), []), [])


class CapDiscountTests(SimpleTestCase):
    """max_discount_amount capping."""

    def test_no_cap_or_under_cap_is_unchanged(self):
        result = DiscountResult(total_discount=Decimal('4.00'))
        self.assertIs(cap_discount(result, None), result)
        self.assertIs(cap_discount(result, Decimal('4.00')), result)

    def test_order_level_result_is_capped(self):
        self.assertEqual(
            cap_discount(DiscountResult(total_discount=Decimal('50.00')), Decimal('20.00')),
            DiscountResult(total_discount=Decimal('20.00')),
        )

    def test_breakdown_is_scaled_to_cap(self):
        """Per-item discounts keep summing to the capped aggregate."""
        first, second = uuid.uuid4(), uuid.uuid4()
        result = DiscountResult.from_items([ItemDiscount(first, Decimal('3.00')), ItemDiscount(second, Decimal('1.00'))])
        capped = cap_discount(result, Decimal('2.00'))
        self.assertEqual(capped.total_discount, Decimal('2.00'))
        self.assertEqual(
            capped.item_discounts,
            (ItemDiscount(first, Decimal('1.50')), ItemDiscount(second, Decimal('0.50'))),
        )


class DiscountCalculatorTests(SimpleTestCase):
    """Per-type discount algorithms."""

    def setUp(self):
        """Scenario lines: $30.00 and $10.00."""
        self.steak = make_line('30.00')
        self.salad = make_line('10.00')
        self.lines = [self.steak, self.salad]

    def test_percentage_scenario_a(self):
        result = DiscountCalculator.calculate(make_promotion('percentage', '10'), self.lines)
        self.assertEqual(result.total_discount, Decimal('4.00'))
        self.assertEqual(
            result.item_discounts,
            (ItemDiscount(self.steak.item_id, Decimal('3.00')), ItemDiscount(self.salad.item_id, Decimal('1.00'))),
        )

    def test_percentage_rounds_half_up(self):
        line = make_line('0.25')
        result = DiscountCalculator.calculate(make_promotion('percentage', '10'), [line])
        self.assertEqual(result.total_discount, Decimal('0.03'))

    def test_fixed_amount_order_scope_scenario_b(self):
        result = DiscountCalculator.calculate(make_promotion('fixed_amount', '5'), self.lines)
        self.assertEqual(result.total_discount, Decimal('5.00'))
        self.assertEqual(
            result.item_discounts,
            (ItemDiscount(self.steak.item_id, Decimal('3.75')), ItemDiscount(self.salad.item_id, Decimal('1.25'))),
        )

    def test_fixed_amount_order_scope_limited_to_eligible_subtotal(self):
        """Shares sum exactly to min(value, eligible subtotal)."""
        result = DiscountCalculator.calculate(make_promotion('fixed_amount', '100'), self.lines)
        self.assertEqual(result.total_discount, Decimal('40.00'))
        self.assertEqual(sum(entry.discount for entry in result.item_discounts), Decimal('40.00'))

    def test_fixed_amount_per_item_capped_at_line_subtotal(self):
        promotion = make_promotion('fixed_amount', '12', scope='product')
        result = DiscountCalculator.calculate(promotion, self.lines)
        self.assertEqual(
            result.item_discounts,
            (ItemDiscount(self.steak.item_id, Decimal('12.00')), ItemDiscount(self.salad.item_id, Decimal('10.00'))),
        )
        self.assertEqual(result.total_discount, Decimal('22.00'))

    def test_buy_x_get_y_scenario_c(self):
        """3 units at $2.00 with buy 2 get 1 gives one free unit."""
        line = make_line('6.00', quantity=3, unit_price='2.00')
        promotion = make_promotion('buy_x_get_y', '0', buy_quantity=2, get_quantity=1)
        result = DiscountCalculator.calculate(promotion, [line])
        self.assertEqual(result.total_discount, Decimal('2.00'))
        self.assertEqual(result.item_discounts, (ItemDiscount(line.item_id, Decimal('2.00')),))

    def test_buy_x_get_y_consumes_cheapest_lines_first(self):
        product_id = uuid.uuid4()
        dear = make_line('10.00', quantity=2, unit_price='5.00', product_id=product_id)
        cheap = make_line('12.00', quantity=4, unit_price='3.00', product_id=product_id)
        promotion = make_promotion('buy_x_get_y', '0', buy_quantity=1, get_quantity=1)
        result = DiscountCalculator.calculate(promotion, [dear, cheap])
        # 6 units, 3 free: all from the $3.00 line
        self.assertEqual(result.item_discounts, (ItemDiscount(cheap.item_id, Decimal('9.00')),))

    def test_buy_x_get_y_groups_by_product(self):
        """Units of different products never combine into one group."""
        first = make_line('4.00', quantity=2, unit_price='2.00')
        second = make_line('2.00', quantity=1, unit_price='2.00')
        promotion = make_promotion('buy_x_get_y', '0', buy_quantity=2, get_quantity=1)
        self.assertEqual(DiscountCalculator.calculate(promotion, [first, second]).total_discount, Decimal('0.00'))

    def test_coupon_percent_and_flat(self):
        percent = DiscountCalculator.calculate(make_promotion('coupon', '100'), self.lines)
        self.assertEqual(percent.total_discount, Decimal('40.00'))
        self.assertTrue(percent.has_breakdown)

        flat = DiscountCalculator.calculate(make_promotion('coupon', '100.01'), self.lines)
        self.assertEqual(flat.total_discount, Decimal('40.00'))
        self.assertFalse(flat.has_breakdown)

        small_order = DiscountCalculator.calculate(make_promotion('coupon', '100.01'), [make_line('500.00')])
        self.assertEqual(small_order.total_discount, Decimal('100.01'))

    def test_no_eligible_lines_gives_zero(self):
        promotion = make_promotion(scope='product', product_ids=[str(uuid.uuid4())])
        result = DiscountCalculator.calculate(promotion, self.lines)
        self.assertEqual(result, DiscountResult())
        self.assertEqual(DiscountCalculator.calculate(make_promotion(), []), DiscountResult())
