from core.imports import Blueprint, jsonify, jwt_required, request
from core.auth import current_user_id
from core.parsing import get_json_body, require_fields, parse_int, parse_optional_int
from services import cartService

cart_bp = Blueprint("cart", __name__)


@cart_bp.route('/api/cart', methods=['GET'])
@jwt_required()
def get_cart():
    """
    Get the current user's shopping cart
    ---
    tags:
      - Cart
    security:
      - Bearer: []
    responses:
      200:
        description: Cart retrieved successfully
        schema:
          type: object
          properties:
            cart_items:
              type: array
              items:
                type: object
                properties:
                  id:
                    type: integer
                    example: 1
                  product_id:
                    type: integer
                    example: 3
                  quantity:
                    type: integer
                    example: 2
                  prescription_id:
                    type: integer
                    example: null
                  product:
                    type: object
                    properties:
                      name:
                        type: string
                        example: "Ibuprofen 200mg"
                      price:
                        type: number
                        example: 15.99
                      available_stock:
                        type: integer
                        example: 100
    """
    cart_items = cartService.get_cart_items(current_user_id())
    return jsonify({"cart_items": [item.to_dict() for item in cart_items]}), 200


@cart_bp.route('/api/cart/items', methods=['POST'])
@jwt_required()
def add_to_cart():
    """
    Add a product to the cart
    ---
    tags:
      - Cart
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
            - product_id
            - quantity
          properties:
            product_id:
              type: integer
              example: 10
            quantity:
              type: integer
              example: 2
            prescription_id:
              type: integer
              description: Required for prescription-only products
              example: 4
    responses:
      201:
        description: Product added, or quantity increased on the existing line
      400:
        description: Invalid quantity, missing or invalid prescription
      404:
        description: Product not found
      409:
        description: Insufficient stock
    """
    data = get_json_body(request)
    require_fields(data, 'product_id', 'quantity')

    cart_item = cartService.add_to_cart(
        current_user_id(),
        product_id=parse_int(data['product_id'], 'product_id'),
        quantity=parse_int(data['quantity'], 'quantity', minimum=1),
        prescription_id=parse_optional_int(data.get('prescription_id'), 'prescription_id')
    )

    return jsonify({"message": "Product added to cart", "cart_item": cart_item.to_dict()}), 201


@cart_bp.route('/api/cart/items/<int:item_id>', methods=['PUT'])
@jwt_required()
def update_cart_item(item_id):
    """
    Update quantity of a cart item
    ---
    tags:
      - Cart
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - name: item_id
        in: path
        type: integer
        required: true
      - name: body
        in: body
        required: true
        schema:
          type: object
          required:
            - quantity
          properties:
            quantity:
              type: integer
              example: 3
    responses:
      200:
        description: Cart item updated successfully
      404:
        description: Cart item not found
      409:
        description: Insufficient stock
    """
    data = get_json_body(request)
    require_fields(data, 'quantity')

    cart_item = cartService.update_cart_item(
        current_user_id(),
        item_id,
        parse_int(data['quantity'], 'quantity', minimum=1)
    )

    return jsonify({"message": "Cart item updated successfully", "cart_item": cart_item.to_dict()}), 200


@cart_bp.route('/api/cart/items/<int:item_id>', methods=['DELETE'])
@jwt_required()
def delete_cart_item(item_id):
    cartService.remove_from_cart(current_user_id(), item_id)
    return jsonify({"message": "Cart item deleted successfully"}), 200


@cart_bp.route('/api/cart', methods=['DELETE'])
@jwt_required()
def clear_cart():
    cartService.clear_cart(current_user_id())
    return jsonify({"message": "Cart cleared successfully"}), 200
