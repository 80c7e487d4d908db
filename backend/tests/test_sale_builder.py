"""
Sale builder tests: which lines are accepted and how the total is computed.
"""

import pytest

from medsupply.services.sale_builder import SaleBuilder


PRODUCTS = [
    {"id": 1, "name": "Gauze", "price_cents": 250, "quantity": 50},
    {"id": 2, "name": "Gloves", "price_cents": 900, "quantity": 0},
    {"id": 3, "name": "Syringe", "price_cents": 75, "quantity": 10},
]


@pytest.fixture
def builder():
    return SaleBuilder(PRODUCTS)


class TestAddLine:
    def test_accepts_valid_line_with_price_snapshot(self, builder):
        assert builder.add_line(1, 5) is True

        line = builder.lines[0]
        assert (line.product_id, line.quantity, line.unit_price_cents) == (1, 5, 250)
        assert line.line_total_cents == 1250

    def test_accepts_exact_stock(self, builder):
        assert builder.add_line(3, 10) is True

    @pytest.mark.parametrize(
        "product_id,quantity",
        [
            (1, 0),
            (1, -3),
            (1, 51),
            (2, 1),
            (99, 1),
            (1, 2.5),
            (1, "5"),
            (1, True),
            (1, None),
        ],
    )
    def test_rejects_invalid_lines_silently(self, builder, product_id, quantity):
        assert builder.add_line(product_id, quantity) is False
        assert builder.lines == []

    def test_same_product_twice_makes_two_lines(self, builder):
        builder.add_line(1, 30)
        builder.add_line(1, 30)

        # each line is checked against the snapshot on its own
        assert len(builder.lines) == 2

    def test_snapshot_refresh(self, builder):
        builder.refresh_products([{"id": 1, "name": "Gauze", "price_cents": 300, "quantity": 2}])

        assert builder.add_line(1, 5) is False
        assert builder.add_line(1, 2) is True
        assert builder.lines[0].unit_price_cents == 300


class TestTotals:
    def test_total_sums_lines(self, builder):
        builder.add_line(1, 4)
        builder.add_line(3, 2)

        assert builder.total() == 4 * 250 + 2 * 75

    def test_empty_total_is_zero(self, builder):
        assert builder.total() == 0

    def test_remove_line(self, builder):
        builder.add_line(1, 4)
        builder.add_line(3, 2)

        assert builder.remove_line(0) is True
        assert [line.product_id for line in builder.lines] == [3]
        assert builder.remove_line(5) is False
        assert builder.remove_line(-1) is False


class TestCanSubmit:
    def test_requires_client_and_line(self, builder):
        assert builder.can_submit is False

        builder.select_client(7)
        assert builder.can_submit is False

        builder.add_line(1, 1)
        assert builder.can_submit is True

        builder.select_client(None)
        assert builder.can_submit is False
