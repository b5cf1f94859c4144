from core.imports import Blueprint, jwt_required, jsonify, request
from core.auth import current_user_id, is_staff, roles_required, STAFF_ROLES
from core.errors import NotFound
from core.parsing import get_json_body, require_fields
from services import orderService

orders_bp = Blueprint('orders', __name__)


def _order_with_items(order):
    data = order.to_dict()
    data["items"] = [item.to_dict() for item in order.order_items]
    return data


@orders_bp.route('/api/orders', methods=['POST'])
@jwt_required()
def create_order():
    """
    Place an order from the logged-in user's cart
    ---
    tags:
      - Orders
    summary: Check out the cart
    description: >
      Converts every cart line into an order line in a single transaction.
      Prices are captured at order time, stock is decremented and the cart
      is emptied. Nothing is written if any check fails.
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - name: body
        in: body
        required: true
        schema:
          type: object
          required:
            - payment_method
            - delivery_method
            - delivery_address
            - delivery_phone
          properties:
            payment_method:
              type: string
              enum: [cash_on_delivery, credit_card, debit_card, digital_wallet]
              example: credit_card
            delivery_method:
              type: string
              enum: [standard, express, same_day, pickup]
              example: standard
            delivery_address:
              type: string
              example: "123 Main Street, Ikeja, Lagos"
            delivery_phone:
              type: string
              example: "08012345678"
            notes:
              type: string
              example: "Leave at the front desk"
    responses:
      201:
        description: Order created successfully
        schema:
          type: object
          properties:
            message:
              type: string
              example: "Order created successfully"
            order:
              type: object
              properties:
                id:
                  type: integer
                  example: 10
                total_amount:
                  type: number
                  example: 47.97
                status:
                  type: string
                  example: pending
                items:
                  type: array
                  items:
                    type: object
                    properties:
                      product_id:
                        type: integer
                        example: 2
                      quantity:
                        type: integer
                        example: 3
                      unit_price:
                        type: number
                        example: 15.99
      400:
        description: Empty cart, missing/invalid prescription or invalid delivery info
      409:
        description: Insufficient stock
    """
    data = get_json_body(request)
    require_fields(data, 'payment_method', 'delivery_method', 'delivery_address', 'delivery_phone')

    order = orderService.create_order(
        current_user_id(),
        payment_method=data['payment_method'],
        delivery_method=data['delivery_method'],
        delivery_address=data['delivery_address'],
        delivery_phone=data['delivery_phone'],
        notes=data.get('notes')
    )

    return jsonify({
        "message": "Order created successfully",
        "order": _order_with_items(order)
    }), 201


@orders_bp.route('/api/orders', methods=['GET'])
@jwt_required()
def get_user_orders():
    """
    Get all orders of the logged-in user, newest first
    ---
    tags:
      - Orders
    security:
      - Bearer: []
    responses:
      200:
        description: List of the user's orders
    """
    orders = orderService.get_user_orders(current_user_id())
    return jsonify({"orders": [o.to_dict() for o in orders]}), 200


@orders_bp.route('/api/orders/<int:order_id>', methods=['GET'])
@jwt_required()
def get_order_details(order_id):
    """
    Get Order Details
    ---
    tags:
      - Orders
    description: Customers only see their own orders; staff see any order.
    security:
      - Bearer: []
    parameters:
      - name: order_id
        in: path
        required: true
        type: integer
        example: 1
    responses:
      200:
        description: Order details with its lines
      404:
        description: Order not found
    """
    owner_id = None if is_staff() else current_user_id()
    order = orderService.get_order_by_id(order_id, owner_id)
    if not order:
        raise NotFound("Order not found")

    return jsonify({"order": _order_with_items(order)}), 200


@orders_bp.route('/api/orders/<int:order_id>/items', methods=['GET'])
@jwt_required()
def get_order_items(order_id):
    owner_id = None if is_staff() else current_user_id()
    if not orderService.get_order_by_id(order_id, owner_id):
        raise NotFound("Order not found")

    items = orderService.get_order_items(order_id)
    return jsonify({"items": [item.to_dict() for item in items]}), 200


@orders_bp.route('/api/orders/<int:order_id>/status', methods=['PATCH'])
@roles_required(*STAFF_ROLES)
def update_order_status(order_id):
    """
    Staff: Update Order Status
    ---
    tags:
      - Orders
    description: >
      Overwrites the order status. Any status may follow any other.
      Valid statuses: pending, confirmed, processing, shipped, delivered, cancelled.
    security:
      - Bearer: []
    parameters:
      - name: order_id
        in: path
        required: true
        type: integer
        example: 1
      - in: body
        name: body
        required: true
        schema:
          type: object
          properties:
            status:
              type: string
              example: shipped
    responses:
      200:
        description: Status updated successfully
      400:
        description: Invalid status
      404:
        description: Order not found
    """
    data = get_json_body(request)
    require_fields(data, 'status')

    order = orderService.update_order_status(order_id, data['status'])

    return jsonify({"message": f"Order status updated to {order.status}", "order": order.to_dict()}), 200


@orders_bp.route('/api/admin/orders', methods=['GET'])
@roles_required(*STAFF_ROLES)
def get_all_orders():
    """
    Staff: List all orders, optionally filtered by status
    ---
    tags:
      - Orders
    security:
      - Bearer: []
    parameters:
      - name: status
        in: query
        type: string
        required: false
        enum: [pending, confirmed, processing, shipped, delivered, cancelled]
    responses:
      200:
        description: Orders, newest first
      400:
        description: Invalid status filter
    """
    status = request.args.get('status')
    if status:
        orders = orderService.get_orders_by_status(status)
    else:
        orders = orderService.get_all_orders()

    return jsonify({"orders": [o.to_dict() for o in orders], "count": len(orders)}), 200
