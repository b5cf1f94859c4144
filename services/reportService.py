"""
Read-only aggregates over orders, products and users for the admin panel.

Nothing here writes to the database.
"""
from core.imports import current_app, datetime, timedelta, func
from core.extensions import db
from models.catalogModels import Category, Products
from models.orderModels import Order, OrderItem
from models.userModel import Users

TOP_PRODUCTS_LIMIT = 10
ACTIVE_CUSTOMER_WINDOW = timedelta(days=90)


def _money(value):
    return round(float(value or 0), 2)


def get_sales_report(start_date, end_date):
    in_period = [Order.created_at >= start_date, Order.created_at <= end_date]

    total_revenue, total_orders = (
        db.session.query(func.sum(Order.total_amount), func.count(Order.id))
        .filter(*in_period)
        .one()
    )

    total_products_sold = (
        db.session.query(func.sum(OrderItem.quantity))
        .join(Order, OrderItem.order_id == Order.id)
        .filter(*in_period)
        .scalar()
    )

    revenue = func.sum(OrderItem.quantity * OrderItem.unit_price)
    top_rows = (
        db.session.query(
            Products.id,
            Products.name,
            func.sum(OrderItem.quantity).label("quantity_sold"),
            revenue.label("revenue"),
        )
        .join(OrderItem, OrderItem.product_id == Products.id)
        .join(Order, OrderItem.order_id == Order.id)
        .filter(*in_period)
        .group_by(Products.id, Products.name)
        .order_by(revenue.desc(), Products.id)
        .limit(TOP_PRODUCTS_LIMIT)
        .all()
    )

    return {
        "total_revenue": _money(total_revenue),
        "total_orders": int(total_orders or 0),
        "total_products_sold": int(total_products_sold or 0),
        "period": f"{start_date.isoformat()} to {end_date.isoformat()}",
        "top_products": [
            {
                "product_id": row.id,
                "product_name": row.name,
                "quantity_sold": int(row.quantity_sold),
                "revenue": _money(row.revenue),
            }
            for row in top_rows
        ],
    }


def get_inventory_report():
    threshold = current_app.config.get("LOW_STOCK_THRESHOLD", 10)

    rows = (
        db.session.query(Products, Category.name)
        .outerjoin(Category, Products.category_id == Category.id)
        .filter(Products.is_active.is_(True))
        .order_by(Products.stock_quantity, Products.id)
        .all()
    )

    low_stock = []
    out_of_stock = []
    for product, category_name in rows:
        if product.stock_quantity == 0:
            out_of_stock.append({
                "product_id": product.id,
                "product_name": product.name,
                "category": category_name,
            })
        elif product.stock_quantity <= threshold:
            low_stock.append({
                "product_id": product.id,
                "product_name": product.name,
                "current_stock": product.stock_quantity,
                "category": category_name,
            })

    return {
        "total_products": len(rows),
        "low_stock_products": low_stock,
        "out_of_stock_products": out_of_stock,
    }


def get_customer_report(now=None):
    now = now or datetime.utcnow()
    month_start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)

    customers = Users.query.filter(Users.role == "customer")
    total_customers = customers.count()
    new_this_month = customers.filter(Users.created_at >= month_start).count()

    active_customers = (
        db.session.query(func.count(func.distinct(Order.user_id)))
        .join(Users, Order.user_id == Users.id)
        .filter(Users.role == "customer", Order.created_at >= now - ACTIVE_CUSTOMER_WINDOW)
        .scalar()
    ) or 0

    retention_rate = round(active_customers / total_customers * 100, 2) if total_customers else 0

    return {
        "total_customers": total_customers,
        "new_customers_this_month": new_this_month,
        "active_customers": active_customers,
        "customer_retention_rate": retention_rate,
    }
