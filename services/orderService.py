"""
Order workflow: turns a customer's cart into an order in one transaction.

create_order reads the cart, locks the touched product rows, validates
stock and prescriptions, decrements stock once per product, snapshots prices
into order lines and empties the cart. Each decrement is a single guarded
UPDATE, so two checkouts racing for the last units cannot both succeed even
where the database ignores row locks (SQLite). Any failure rolls the whole
session back, leaving cart, stock and orders untouched.
"""
from core.imports import current_app, Decimal, update
from core.extensions import db
from core.errors import NotFound, ValidationFailed, InsufficientStock, PrescriptionRequired, InvalidPrescription, EmptyCart
from models.cartModels import CartItem
from models.catalogModels import Products
from models.orderModels import Order, OrderItem
from models.prescriptionModels import Prescription

ORDER_STATUSES = ("pending", "confirmed", "processing", "shipped", "delivered", "cancelled")
PAYMENT_METHODS = ("cash_on_delivery", "credit_card", "debit_card", "digital_wallet")
DELIVERY_METHODS = ("standard", "express", "same_day", "pickup")


def _validate_delivery_info(payment_method, delivery_method, delivery_address, delivery_phone):
    if payment_method not in PAYMENT_METHODS:
        raise ValidationFailed(f"payment_method must be one of: {', '.join(PAYMENT_METHODS)}")
    if delivery_method not in DELIVERY_METHODS:
        raise ValidationFailed(f"delivery_method must be one of: {', '.join(DELIVERY_METHODS)}")
    if not delivery_address or not delivery_phone:
        raise ValidationFailed("delivery_address and delivery_phone are required")


def _lock_products(product_ids):
    # ascending id order so concurrent checkouts lock rows in the same sequence;
    # a no-op on SQLite, where _take_stock is the only guard
    products = (
        Products.query
        .filter(Products.id.in_(sorted(product_ids)))
        .order_by(Products.id)
        .with_for_update()
        .populate_existing()
        .all()
    )
    return {product.id: product for product in products}


def _check_lines(user_id, product, requested, lines):
    if product is None or not product.is_active:
        raise InsufficientStock("Insufficient stock: product is no longer available")

    if requested > product.stock_quantity:
        raise InsufficientStock(
            f"Insufficient stock for '{product.name}': requested {requested}, available {product.stock_quantity}"
        )

    for line in lines:
        if product.requires_prescription and line.prescription_id is None:
            raise PrescriptionRequired(f"Prescription required for '{product.name}'")

        if line.prescription_id is not None:
            prescription = Prescription.query.filter_by(
                id=line.prescription_id,
                user_id=user_id,
                status="verified"
            ).first()
            if not prescription:
                raise InvalidPrescription(f"Invalid or unverified prescription for '{product.name}'")


def _take_stock(product, quantity):
    result = db.session.execute(
        update(Products)
        .where(Products.id == product.id, Products.stock_quantity >= quantity)
        .values(stock_quantity=Products.stock_quantity - quantity)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        raise InsufficientStock(
            f"Insufficient stock for '{product.name}': another order consumed the remaining units"
        )


def create_order(user_id, payment_method, delivery_method, delivery_address, delivery_phone, notes=None):
    _validate_delivery_info(payment_method, delivery_method, delivery_address, delivery_phone)

    try:
        cart_items = CartItem.query.filter_by(user_id=user_id).order_by(CartItem.id).all()
        if not cart_items:
            raise EmptyCart("Cart is empty")

        # legacy data may hold several lines for one product; stock is checked on the sum
        requested = {}
        lines_by_product = {}
        for item in cart_items:
            requested[item.product_id] = requested.get(item.product_id, 0) + item.quantity
            lines_by_product.setdefault(item.product_id, []).append(item)

        products = _lock_products(requested.keys())

        for product_id in sorted(requested):
            _check_lines(user_id, products.get(product_id), requested[product_id], lines_by_product[product_id])

        for product_id in sorted(requested):
            _take_stock(products[product_id], requested[product_id])

        total_amount = sum(
            (products[item.product_id].price * item.quantity for item in cart_items),
            Decimal("0.00")
        )

        new_order = Order(
            user_id=user_id,
            total_amount=total_amount,
            status="pending",
            payment_method=payment_method,
            delivery_method=delivery_method,
            delivery_address=delivery_address,
            delivery_phone=delivery_phone,
            notes=notes
        )
        db.session.add(new_order)
        db.session.flush()

        for item in cart_items:
            db.session.add(OrderItem(
                order_id=new_order.id,
                product_id=item.product_id,
                quantity=item.quantity,
                unit_price=products[item.product_id].price,
                prescription_id=item.prescription_id
            ))

        CartItem.query.filter_by(user_id=user_id).delete()

        db.session.commit()

    except Exception:
        db.session.rollback()
        raise

    current_app.logger.info(
        "Order %s created for user %s: %s line(s), total %s",
        new_order.id, user_id, len(cart_items), new_order.total_amount
    )
    return new_order


def get_user_orders(user_id):
    return (
        Order.query
        .filter_by(user_id=user_id)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .all()
    )


def get_order_by_id(order_id, user_id=None):
    query = Order.query.filter(Order.id == order_id)
    if user_id is not None:
        query = query.filter(Order.user_id == user_id)
    return query.first()


def get_order_items(order_id):
    return OrderItem.query.filter_by(order_id=order_id).order_by(OrderItem.id).all()


def get_all_orders():
    return Order.query.order_by(Order.created_at.desc(), Order.id.desc()).all()


def get_orders_by_status(status):
    if status not in ORDER_STATUSES:
        raise ValidationFailed(f"status must be one of: {', '.join(ORDER_STATUSES)}")
    return (
        Order.query
        .filter_by(status=status)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .all()
    )


def update_order_status(order_id, status):
    # any status may follow any other; there is no transition table
    if status not in ORDER_STATUSES:
        raise ValidationFailed(f"status must be one of: {', '.join(ORDER_STATUSES)}")

    order = db.session.get(Order, order_id)
    if order is None:
        raise NotFound("Order not found")

    previous = order.status
    order.status = status
    db.session.commit()
    current_app.logger.info("Order %s status %s -> %s", order.id, previous, status)
    return order
