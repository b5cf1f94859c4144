"""
Cart lines: one row per (user, product), checked against live stock.

Stock is only checked here at call time; create_order checks it again and
decrements it with a guarded UPDATE. Adds for one user are serialised on the
owner's row so the lookup-then-insert cannot leave two lines for a product.
"""
from core.imports import current_app, update
from core.extensions import db
from core.errors import NotFound, ValidationFailed, InsufficientStock, PrescriptionRequired, InvalidPrescription
from models.cartModels import CartItem
from models.catalogModels import Products
from models.prescriptionModels import Prescription
from models.userModel import Users


def _validate_quantity(quantity):
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
        raise ValidationFailed("Quantity must be a positive integer")


def _get_owned_item(user_id, cart_item_id):
    # absent and foreign lines look the same to the caller
    cart_item = CartItem.query.filter_by(id=cart_item_id, user_id=user_id).first()
    if not cart_item:
        raise NotFound("Cart item not found")
    return cart_item


def _lock_cart_owner(user_id):
    # no-op write: a row lock on server databases, the write lock on SQLite
    result = db.session.execute(
        update(Users)
        .where(Users.id == user_id)
        .values(updated_at=Users.updated_at)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        raise NotFound("User not found")


def get_cart_items(user_id):
    return CartItem.query.filter_by(user_id=user_id).order_by(CartItem.id).all()


def add_to_cart(user_id, product_id, quantity, prescription_id=None):
    _validate_quantity(quantity)

    _lock_cart_owner(user_id)

    product = Products.query.filter_by(id=product_id, is_active=True).first()
    if not product:
        raise NotFound("Product not found")

    if product.requires_prescription and prescription_id is None:
        raise PrescriptionRequired(f"Prescription required for '{product.name}'")

    if prescription_id is not None:
        prescription = Prescription.query.filter_by(id=prescription_id, user_id=user_id).first()
        if not prescription:
            raise InvalidPrescription("Invalid prescription")

    cart_item = CartItem.query.filter_by(user_id=user_id, product_id=product_id).first()
    existing = cart_item.quantity if cart_item else 0

    if existing + quantity > product.stock_quantity:
        raise InsufficientStock(
            f"Insufficient stock for '{product.name}': {product.stock_quantity} available"
        )

    if cart_item:
        cart_item.quantity += quantity
        if prescription_id is not None:
            cart_item.prescription_id = prescription_id
    else:
        cart_item = CartItem(
            user_id=user_id,
            product_id=product_id,
            quantity=quantity,
            prescription_id=prescription_id
        )
        db.session.add(cart_item)

    db.session.commit()
    current_app.logger.info("User %s cart: product %s quantity now %s", user_id, product_id, cart_item.quantity)
    return cart_item


def update_cart_item(user_id, cart_item_id, quantity):
    _validate_quantity(quantity)
    cart_item = _get_owned_item(user_id, cart_item_id)

    product = db.session.get(Products, cart_item.product_id)
    if quantity > product.stock_quantity:
        raise InsufficientStock(
            f"Insufficient stock for '{product.name}': {product.stock_quantity} available"
        )

    cart_item.quantity = quantity
    db.session.commit()
    return cart_item


def remove_from_cart(user_id, cart_item_id):
    cart_item = _get_owned_item(user_id, cart_item_id)
    db.session.delete(cart_item)
    db.session.commit()


def clear_cart(user_id):
    deleted = CartItem.query.filter_by(user_id=user_id).delete()
    db.session.commit()
    current_app.logger.info("Cleared %s cart item(s) for user %s", deleted, user_id)
    return deleted
