from decimal import Decimal

import pytest
from sqlalchemy.exc import IntegrityError

from core.errors import InvalidParent, NotFound, ValidationFailed
from core.extensions import db
from models.catalogModels import Category, Products
from services import catalogService


class TestCategories:

    def test_create_root_and_child(self, app):
        root = catalogService.create_category("Medicines")
        child = catalogService.create_category("Cold & Flu", parent_id=root.id)

        assert child.parent_id == root.id
        assert [c.id for c in root.children] == [child.id]
        assert [c.id for c in catalogService.get_categories()] == [root.id, child.id]

    def test_create_with_missing_parent(self, app):
        with pytest.raises(InvalidParent, match="Parent category with ID 42 does not exist"):
            catalogService.create_category("Orphan", parent_id=42)
        assert Category.query.count() == 0

    def test_create_requires_name(self, app):
        with pytest.raises(ValidationFailed):
            catalogService.create_category("")

    def test_ancestors_walk_to_root(self, app):
        root = catalogService.create_category("Medicines")
        mid = catalogService.create_category("Pain", parent_id=root.id)
        leaf = catalogService.create_category("Headache", parent_id=mid.id)

        assert [c.id for c in catalogService.get_category_ancestors(leaf.id)] == [mid.id, root.id]
        assert catalogService.get_category_ancestors(root.id) == []

    def test_ancestors_stop_on_cycle(self, app):
        a = catalogService.create_category("A")
        b = catalogService.create_category("B", parent_id=a.id)
        a.parent_id = b.id
        db.session.commit()

        assert [c.id for c in catalogService.get_category_ancestors(a.id)] == [b.id]

    def test_ancestors_of_unknown_category(self, app):
        with pytest.raises(NotFound):
            catalogService.get_category_ancestors(123)


class TestProducts:

    def test_create_product_inherits_category_flag(self, rx_category):
        product = catalogService.create_product(
            name="Azithromycin", manufacturer="PharmaCo", price="12.5",
            stock_quantity=10, category_id=rx_category.id,
        )

        assert product.requires_prescription is True
        assert product.price == Decimal("12.50")
        assert product.is_active is True

    def test_explicit_flag_overrides_category(self, rx_category):
        product = catalogService.create_product(
            name="Saline", manufacturer="PharmaCo", price=3,
            stock_quantity=10, category_id=rx_category.id, requires_prescription=False,
        )
        assert product.requires_prescription is False

    @pytest.mark.parametrize("overrides,message", [
        ({"category_id": 999}, "Category with ID 999 does not exist"),
        ({"price": 0}, "Price must be positive"),
        ({"price": "abc"}, "Price must be a number"),
        ({"stock_quantity": -1}, "Stock quantity cannot be negative"),
        ({"name": ""}, "name and manufacturer are required"),
    ])
    def test_create_product_validation(self, category, overrides, message):
        kwargs = dict(name="Aspirin", manufacturer="PharmaCo", price=5, stock_quantity=1, category_id=category.id)
        kwargs.update(overrides)

        with pytest.raises(ValidationFailed, match=message):
            catalogService.create_product(**kwargs)
        assert Products.query.count() == 0

    def test_inactive_products_are_hidden(self, otc_product, rx_product):
        catalogService.update_product(rx_product.id, {"is_active": False})

        assert [p.id for p in catalogService.get_products()] == [otc_product.id]
        assert catalogService.get_product_by_id(rx_product.id) is None
        assert catalogService.get_product_by_id(otc_product.id).id == otc_product.id

    def test_partial_update_only_touches_given_fields(self, otc_product):
        product = catalogService.update_product(otc_product.id, {"price": 17.25, "dosage": "200mg"})

        assert product.price == Decimal("17.25")
        assert product.dosage == "200mg"
        assert product.name == "Ibuprofen"
        assert product.stock_quantity == 100

    def test_update_unknown_product(self, app):
        with pytest.raises(NotFound, match="Product with ID 5 does not exist"):
            catalogService.update_product(5, {"price": 1})

    def test_update_rejects_unknown_fields(self, otc_product):
        with pytest.raises(ValidationFailed, match="Unknown product fields: colour"):
            catalogService.update_product(otc_product.id, {"colour": "red"})

    def test_update_rejects_empty_name(self, otc_product):
        with pytest.raises(ValidationFailed):
            catalogService.update_product(otc_product.id, {"name": "  "})

    def test_update_stock(self, otc_product):
        assert catalogService.update_product_stock(otc_product.id, 0).stock_quantity == 0
        with pytest.raises(ValidationFailed):
            catalogService.update_product_stock(otc_product.id, -3)
        with pytest.raises(NotFound):
            catalogService.update_product_stock(999, 1)

    def test_database_rejects_negative_stock(self, otc_product):
        otc_product.stock_quantity = -1
        with pytest.raises(IntegrityError):
            db.session.commit()
        db.session.rollback()
        assert db.session.get(Products, otc_product.id).stock_quantity == 100


class TestSearch:

    @pytest.fixture
    def catalog(self, category, rx_category):
        rows = [
            ("Ibuprofen 200mg", "TestPharma", "5.00", category.id, False),
            ("Ibuprofen 400mg", "Generico", "8.00", category.id, False),
            ("Paracetamol", "TestPharma", "3.00", category.id, False),
            ("Amoxicillin", "Generico", "25.50", rx_category.id, True),
        ]
        for name, manufacturer, price, category_id, rx in rows:
            db.session.add(Products(
                name=name, manufacturer=manufacturer, price=Decimal(price),
                stock_quantity=10, category_id=category_id, requires_prescription=rx,
            ))
        db.session.commit()

    def names(self, result):
        return [p.name for p in result["products"]]

    def test_name_is_case_insensitive_substring(self, catalog):
        result = catalogService.search_products(query="ibu")
        assert self.names(result) == ["Ibuprofen 200mg", "Ibuprofen 400mg"]
        assert result["total"] == 2

    def test_filters_combine(self, catalog, category):
        result = catalogService.search_products(
            category_id=category.id, manufacturer="pharma", max_price=4,
        )
        assert self.names(result) == ["Paracetamol"]

    def test_prescription_and_price_filters(self, catalog):
        assert self.names(catalogService.search_products(requires_prescription=True)) == ["Amoxicillin"]
        assert self.names(catalogService.search_products(min_price=8)) == ["Ibuprofen 400mg", "Amoxicillin"]

    def test_total_ignores_pagination(self, catalog):
        result = catalogService.search_products(limit=2, offset=1)
        assert result["total"] == 4
        assert self.names(result) == ["Ibuprofen 400mg", "Paracetamol"]

    def test_excludes_inactive(self, catalog):
        Products.query.filter_by(name="Paracetamol").first().is_active = False
        db.session.commit()
        assert catalogService.search_products()["total"] == 3

    def test_wildcards_are_matched_literally(self, catalog, category):
        for name, manufacturer in [("Vitamin C 50%", "Acme_Labs"), ("Vitamin C 500mg", "AcmeXLabs")]:
            db.session.add(Products(name=name, manufacturer=manufacturer, price=Decimal("2.00"),
                                    stock_quantity=5, category_id=category.id))
        db.session.commit()

        assert self.names(catalogService.search_products(query="50%")) == ["Vitamin C 50%"]
        assert self.names(catalogService.search_products(manufacturer="acme_")) == ["Vitamin C 50%"]
        assert catalogService.search_products(query="_")["total"] == 0

    def test_rejects_bad_pagination(self, catalog):
        with pytest.raises(ValidationFailed):
            catalogService.search_products(limit=0)
        with pytest.raises(ValidationFailed):
            catalogService.search_products(offset=-1)
