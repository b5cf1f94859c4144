from core.imports import Blueprint, jsonify, request
from core.auth import roles_required
from core.errors import ValidationFailed
from core.parsing import require_fields, parse_datetime
from services import reportService

reports_bp = Blueprint('reports', __name__)


# =========================
# /api/reports/sales (GET)
# =========================
@reports_bp.route('/api/reports/sales', methods=['GET'])
@roles_required("admin")
def sales_report():
    """
    Admin: Sales report for a date range
    ---
    tags:
      - Reports
    security:
      - Bearer: []
    parameters:
      - name: start_date
        in: query
        type: string
        required: true
        example: "2026-10-01T00:00:00"
      - name: end_date
        in: query
        type: string
        required: true
        example: "2026-10-31T23:59:59"
    responses:
      200:
        description: Revenue, order count, units sold and top 10 products by revenue
        schema:
          type: object
          properties:
            total_revenue: { type: number, example: 1520.75 }
            total_orders: { type: integer, example: 42 }
            total_products_sold: { type: integer, example: 130 }
            period: { type: string }
            top_products:
              type: array
              items:
                type: object
                properties:
                  product_id: { type: integer, example: 1 }
                  product_name: { type: string, example: Ibuprofen 200mg }
                  quantity_sold: { type: integer, example: 30 }
                  revenue: { type: number, example: 479.7 }
      400:
        description: Missing or invalid dates
      403:
        description: Forbidden (not admin)
    """
    args = request.args
    require_fields(args, 'start_date', 'end_date')
    start_date = parse_datetime(args['start_date'], 'start_date')
    end_date = parse_datetime(args['end_date'], 'end_date')
    if start_date > end_date:
        raise ValidationFailed("start_date must not be after end_date")

    return jsonify(reportService.get_sales_report(start_date, end_date)), 200


# =========================
# /api/reports/inventory (GET)
# =========================
@reports_bp.route('/api/reports/inventory', methods=['GET'])
@roles_required("admin")
def inventory_report():
    """
    Admin: Stock levels of active products
    ---
    tags:
      - Reports
    security:
      - Bearer: []
    responses:
      200:
        description: Product count plus low stock (1-10 units) and out of stock lists
    """
    return jsonify(reportService.get_inventory_report()), 200


# =========================
# /api/reports/customers (GET)
# =========================
@reports_bp.route('/api/reports/customers', methods=['GET'])
@roles_required("admin")
def customer_report():
    """
    Admin: Customer growth and retention
    ---
    tags:
      - Reports
    security:
      - Bearer: []
    responses:
      200:
        description: Customer totals and retention rate
        schema:
          type: object
          properties:
            total_customers: { type: integer, example: 3 }
            new_customers_this_month: { type: integer, example: 1 }
            active_customers: { type: integer, example: 1 }
            customer_retention_rate: { type: number, example: 33.33 }
    """
    return jsonify(reportService.get_customer_report()), 200
