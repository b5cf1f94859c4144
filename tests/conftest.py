from datetime import datetime
from decimal import Decimal

import pytest
from flask_jwt_extended import create_access_token

from core.config import TestConfig
from core.extensions import db
from main import create_app
from models.cartModels import CartItem
from models.catalogModels import Category, Products
from models.prescriptionModels import Prescription
from models.userModel import Users


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def make_user(email, role="customer", **kwargs):
    user = Users(
        email=email,
        password_hash="not-a-real-hash",
        first_name=kwargs.pop("first_name", "Test"),
        last_name=kwargs.pop("last_name", "User"),
        role=role,
        **kwargs
    )
    db.session.add(user)
    db.session.commit()
    return user


def make_prescription(user, status="pending"):
    prescription = Prescription(
        user_id=user.id,
        doctor_name="Dr. Smith",
        doctor_license="LIC123456",
        prescription_date=datetime(2026, 10, 1),
        image_url="http://example.com/prescription.jpg",
        status=status,
    )
    db.session.add(prescription)
    db.session.commit()
    return prescription


def make_cart_line(user, product, quantity, prescription=None):
    # written directly so tests can build carts the cart service would refuse
    line = CartItem(
        user_id=user.id,
        product_id=product.id,
        quantity=quantity,
        prescription_id=prescription.id if prescription else None,
    )
    db.session.add(line)
    db.session.commit()
    return line


@pytest.fixture
def customer(app):
    return make_user("customer@test.com", first_name="John", last_name="Doe")


@pytest.fixture
def other_customer(app):
    return make_user("other@test.com", first_name="Other", last_name="Customer")


@pytest.fixture
def admin(app):
    return make_user("admin@test.com", role="admin")


@pytest.fixture
def pharmacist(app):
    return make_user("pharmacist@test.com", role="pharmacist", first_name="Jane", last_name="Smith")


@pytest.fixture
def category(app):
    category = Category(name="Pain Relief", description="Over-the-counter pain medications")
    db.session.add(category)
    db.session.commit()
    return category


@pytest.fixture
def rx_category(app):
    category = Category(name="Antibiotics", description="Prescription antibiotics", is_prescription_required=True)
    db.session.add(category)
    db.session.commit()
    return category


@pytest.fixture
def otc_product(category):
    product = Products(
        name="Ibuprofen",
        description="Pain reliever",
        generic_name="Ibuprofen",
        manufacturer="TestPharma",
        price=Decimal("15.99"),
        stock_quantity=100,
        category_id=category.id,
        requires_prescription=False,
    )
    db.session.add(product)
    db.session.commit()
    return product


@pytest.fixture
def rx_product(rx_category):
    product = Products(
        name="Amoxicillin",
        description="Antibiotic medication",
        generic_name="Amoxicillin",
        manufacturer="TestPharma",
        price=Decimal("25.50"),
        stock_quantity=50,
        category_id=rx_category.id,
        requires_prescription=True,
    )
    db.session.add(product)
    db.session.commit()
    return product


@pytest.fixture
def auth_headers(app):
    def _headers(user):
        token = create_access_token(identity=str(user.id), additional_claims={"role": user.role})
        return {"Authorization": f"Bearer {token}"}
    return _headers
