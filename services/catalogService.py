"""
Catalog reads and writes: categories and products.

Products are never hard deleted; ``is_active`` hides them from every
customer-facing read. Partial product updates go through
``UPDATABLE_PRODUCT_FIELDS`` so only keys present in the request are applied.
"""
from core.imports import current_app, Decimal, InvalidOperation
from core.extensions import db
from core.errors import NotFound, ValidationFailed, InvalidParent
from models.catalogModels import Category, Products


def _to_price(value):
    try:
        price = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationFailed("Price must be a number")
    if not price.is_finite() or price <= 0:
        raise ValidationFailed("Price must be positive")
    return price.quantize(Decimal("0.01"))


def _to_stock(value):
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationFailed("Stock quantity must be an integer")
    if value < 0:
        raise ValidationFailed("Stock quantity cannot be negative")
    return value


def _to_text(value):
    if value is None or not str(value).strip():
        raise ValidationFailed("Value cannot be empty")
    return str(value)


def _to_optional_text(value):
    return None if value is None else str(value)


def _to_bool(value):
    if not isinstance(value, bool):
        raise ValidationFailed("Expected a boolean value")
    return value


def _to_category_id(value):
    if db.session.get(Category, value) is None:
        raise ValidationFailed(f"Category with ID {value} does not exist")
    return value


UPDATABLE_PRODUCT_FIELDS = {
    "name": _to_text,
    "description": _to_optional_text,
    "generic_name": _to_optional_text,
    "manufacturer": _to_text,
    "price": _to_price,
    "stock_quantity": _to_stock,
    "category_id": _to_category_id,
    "requires_prescription": _to_bool,
    "dosage": _to_optional_text,
    "active_ingredients": _to_optional_text,
    "side_effects": _to_optional_text,
    "warnings": _to_optional_text,
    "image_url": _to_optional_text,
    "is_active": _to_bool,
}


# =========================
# Categories
# =========================
def get_categories():
    return Category.query.order_by(Category.id).all()


def get_category_by_id(category_id):
    return db.session.get(Category, category_id)


def get_category_ancestors(category_id):
    """Parent chain from the direct parent up to the root.

    The tree is not guaranteed acyclic, so the walk stops at the first
    repeated id.
    """
    category = db.session.get(Category, category_id)
    if category is None:
        raise NotFound(f"Category with ID {category_id} does not exist")

    ancestors = []
    seen = {category.id}
    parent_id = category.parent_id
    while parent_id is not None and parent_id not in seen:
        parent = db.session.get(Category, parent_id)
        if parent is None:
            break
        ancestors.append(parent)
        seen.add(parent.id)
        parent_id = parent.parent_id
    return ancestors


def create_category(name, description=None, parent_id=None, is_prescription_required=False):
    if not name:
        raise ValidationFailed("Category name is required")

    if parent_id is not None and db.session.get(Category, parent_id) is None:
        raise InvalidParent(f"Parent category with ID {parent_id} does not exist")

    category = Category(
        name=name,
        description=description,
        parent_id=parent_id,
        is_prescription_required=bool(is_prescription_required),
    )
    db.session.add(category)
    db.session.commit()
    current_app.logger.info("Created category %s (%s)", category.id, category.name)
    return category


# =========================
# Products
# =========================
def _contains(text):
    # match the text literally; % and _ are not wildcards
    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def get_products():
    return Products.query.filter_by(is_active=True).order_by(Products.id).all()


def get_product_by_id(product_id):
    return Products.query.filter_by(id=product_id, is_active=True).first()


def search_products(query=None, category_id=None, requires_prescription=None,
                    min_price=None, max_price=None, manufacturer=None,
                    limit=20, offset=0):
    if limit is None or limit < 1:
        raise ValidationFailed("limit must be a positive integer")
    if offset is None or offset < 0:
        raise ValidationFailed("offset cannot be negative")

    conditions = [Products.is_active.is_(True)]
    if query:
        conditions.append(Products.name.ilike(_contains(query), escape="\\"))
    if category_id is not None:
        conditions.append(Products.category_id == category_id)
    if requires_prescription is not None:
        conditions.append(Products.requires_prescription.is_(requires_prescription))
    if min_price is not None:
        conditions.append(Products.price >= min_price)
    if max_price is not None:
        conditions.append(Products.price <= max_price)
    if manufacturer:
        conditions.append(Products.manufacturer.ilike(_contains(manufacturer), escape="\\"))

    total = Products.query.filter(*conditions).count()
    products = (
        Products.query
        .filter(*conditions)
        .order_by(Products.id)
        .limit(limit)
        .offset(offset)
        .all()
    )
    return {"products": products, "total": total}


def create_product(name, manufacturer, price, stock_quantity, category_id,
                   requires_prescription=None, description=None, generic_name=None,
                   dosage=None, active_ingredients=None, side_effects=None,
                   warnings=None, image_url=None):
    if not name or not manufacturer:
        raise ValidationFailed("name and manufacturer are required")

    category = db.session.get(Category, category_id) if category_id is not None else None
    if category is None:
        raise ValidationFailed(f"Category with ID {category_id} does not exist")

    if requires_prescription is None:
        requires_prescription = category.is_prescription_required

    product = Products(
        name=name,
        description=description,
        generic_name=generic_name,
        manufacturer=manufacturer,
        price=_to_price(price),
        stock_quantity=_to_stock(stock_quantity),
        category_id=category.id,
        requires_prescription=_to_bool(requires_prescription),
        dosage=dosage,
        active_ingredients=active_ingredients,
        side_effects=side_effects,
        warnings=warnings,
        image_url=image_url,
    )
    db.session.add(product)
    db.session.commit()
    current_app.logger.info("Created product %s (%s)", product.id, product.name)
    return product


def update_product(product_id, fields):
    product = db.session.get(Products, product_id)
    if product is None:
        raise NotFound(f"Product with ID {product_id} does not exist")

    unknown = set(fields) - set(UPDATABLE_PRODUCT_FIELDS) - {"id"}
    if unknown:
        raise ValidationFailed(f"Unknown product fields: {', '.join(sorted(unknown))}")

    for field, coerce in UPDATABLE_PRODUCT_FIELDS.items():
        if field in fields:
            setattr(product, field, coerce(fields[field]))

    db.session.commit()
    current_app.logger.info("Updated product %s fields=%s", product.id, sorted(k for k in fields if k != "id"))
    return product


def update_product_stock(product_id, new_stock):
    product = db.session.get(Products, product_id)
    if product is None:
        raise NotFound(f"Product with ID {product_id} does not exist")

    old_stock = product.stock_quantity
    product.stock_quantity = _to_stock(new_stock)
    db.session.commit()
    current_app.logger.info("Stock for product %s changed %s -> %s", product.id, old_stock, product.stock_quantity)
    return product
