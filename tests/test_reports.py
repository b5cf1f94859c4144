from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from core.extensions import db
from models.catalogModels import Products
from models.orderModels import Order, OrderItem
from services import reportService
from tests.conftest import make_user

NOW = datetime(2026, 10, 18, 12, 0, 0)


def make_order(user, lines, created_at):
    total = sum((Decimal(price) * quantity for _, quantity, price in lines), Decimal("0.00"))
    order = Order(
        user_id=user.id,
        total_amount=total,
        payment_method="cash_on_delivery",
        delivery_method="standard",
        delivery_address="1 Test Road",
        delivery_phone="555-0100",
        created_at=created_at,
    )
    db.session.add(order)
    db.session.flush()
    for product, quantity, price in lines:
        db.session.add(OrderItem(order_id=order.id, product_id=product.id, quantity=quantity, unit_price=Decimal(price)))
    db.session.commit()
    return order


class TestSalesReport:

    def test_totals_and_ranking(self, customer, otc_product, rx_product):
        make_order(customer, [(otc_product, 2, "5.00")], datetime(2026, 10, 5))
        make_order(customer, [(rx_product, 1, "11.98"), (otc_product, 1, "5.00")], datetime(2026, 10, 6))
        make_order(customer, [(rx_product, 9, "25.50")], datetime(2026, 9, 1))

        report = reportService.get_sales_report(datetime(2026, 10, 1), datetime(2026, 10, 31))

        assert report["total_revenue"] == 26.98
        assert report["total_orders"] == 2
        assert report["total_products_sold"] == 4
        assert report["period"] == "2026-10-01T00:00:00 to 2026-10-31T00:00:00"
        assert report["top_products"] == [
            {"product_id": otc_product.id, "product_name": "Ibuprofen", "quantity_sold": 3, "revenue": 15.0},
            {"product_id": rx_product.id, "product_name": "Amoxicillin", "quantity_sold": 1, "revenue": 11.98},
        ]

    def test_uses_order_time_prices(self, customer, otc_product):
        make_order(customer, [(otc_product, 1, "15.99")], datetime(2026, 10, 5))
        otc_product.price = Decimal("99.00")
        db.session.commit()

        report = reportService.get_sales_report(datetime(2026, 10, 1), datetime(2026, 10, 31))

        assert report["top_products"][0]["revenue"] == 15.99

    def test_empty_period(self, app):
        report = reportService.get_sales_report(datetime(2026, 1, 1), datetime(2026, 1, 31))

        assert report["total_revenue"] == 0
        assert report["total_orders"] == 0
        assert report["total_products_sold"] == 0
        assert report["top_products"] == []

    def test_top_products_capped_at_ten(self, customer, category):
        products = []
        for i in range(12):
            product = Products(name=f"Item {i}", manufacturer="M", price=Decimal("1.00"),
                               stock_quantity=10, category_id=category.id)
            db.session.add(product)
            products.append(product)
        db.session.commit()
        make_order(customer, [(p, i + 1, "1.00") for i, p in enumerate(products)], datetime(2026, 10, 5))

        report = reportService.get_sales_report(datetime(2026, 10, 1), datetime(2026, 10, 31))

        assert len(report["top_products"]) == 10
        assert report["top_products"][0]["product_name"] == "Item 11"


class TestInventoryReport:

    def test_buckets(self, category, otc_product, rx_product):
        otc_product.stock_quantity = 10
        rx_product.stock_quantity = 0
        plenty = Products(name="Vitamin C", manufacturer="M", price=Decimal("4.00"),
                          stock_quantity=11, category_id=category.id)
        hidden = Products(name="Old Syrup", manufacturer="M", price=Decimal("4.00"),
                          stock_quantity=0, category_id=category.id, is_active=False)
        db.session.add_all([plenty, hidden])
        db.session.commit()

        report = reportService.get_inventory_report()

        assert report["total_products"] == 3
        assert report["low_stock_products"] == [{
            "product_id": otc_product.id,
            "product_name": "Ibuprofen",
            "current_stock": 10,
            "category": "Pain Relief",
        }]
        assert report["out_of_stock_products"] == [{
            "product_id": rx_product.id,
            "product_name": "Amoxicillin",
            "category": "Antibiotics",
        }]

    def test_threshold_comes_from_config(self, app, otc_product):
        app.config["LOW_STOCK_THRESHOLD"] = 100

        report = reportService.get_inventory_report()

        assert [p["product_id"] for p in report["low_stock_products"]] == [otc_product.id]


class TestCustomerReport:

    def test_counts_and_retention(self, customer, other_customer, admin, otc_product):
        third = make_user("third@test.com")
        customer.created_at = datetime(2026, 10, 2)
        other_customer.created_at = datetime(2026, 3, 1)
        third.created_at = datetime(2026, 9, 30)
        admin.created_at = datetime(2026, 10, 3)
        db.session.commit()

        make_order(customer, [(otc_product, 1, "15.99")], NOW - timedelta(days=10))
        make_order(customer, [(otc_product, 1, "15.99")], NOW - timedelta(days=20))
        make_order(other_customer, [(otc_product, 1, "15.99")], NOW - timedelta(days=100))
        make_order(admin, [(otc_product, 1, "15.99")], NOW - timedelta(days=1))

        report = reportService.get_customer_report(now=NOW)

        assert report == {
            "total_customers": 3,
            "new_customers_this_month": 1,
            "active_customers": 1,
            "customer_retention_rate": 33.33,
        }

    def test_half_active(self, customer, other_customer, otc_product):
        make_order(customer, [(otc_product, 1, "15.99")], NOW - timedelta(days=1))

        assert reportService.get_customer_report(now=NOW)["customer_retention_rate"] == 50.0

    def test_no_customers(self, admin):
        report = reportService.get_customer_report(now=NOW)

        assert report["total_customers"] == 0
        assert report["active_customers"] == 0
        assert report["customer_retention_rate"] == 0
