from core.imports import Blueprint, jsonify, request
from core.auth import roles_required
from core.parsing import get_json_body, require_fields, parse_optional_int
from services import catalogService

categories_bp = Blueprint('categories', __name__)


@categories_bp.route('/api/categories', methods=['GET'])
def list_categories():
    """
    List all product categories
    ---
    tags:
      - Categories
    responses:
      200:
        description: Flat list of categories; use parent_id to rebuild the tree
    """
    categories = catalogService.get_categories()
    return jsonify({"categories": [c.to_dict() for c in categories]}), 200


@categories_bp.route('/api/categories/<int:category_id>', methods=['GET'])
def category_details(category_id):
    """
    Get a category with its parent chain and direct children
    ---
    tags:
      - Categories
    parameters:
      - name: category_id
        in: path
        type: integer
        required: true
    responses:
      200:
        description: Category details, or null when the category does not exist
    """
    category = catalogService.get_category_by_id(category_id)
    if not category:
        return jsonify({"category": None}), 200

    data = category.to_dict()
    data["children"] = [child.id for child in category.children]
    data["ancestors"] = [parent.id for parent in catalogService.get_category_ancestors(category.id)]
    return jsonify({"category": data}), 200


@categories_bp.route('/api/categories', methods=['POST'])
@roles_required("admin")
def create_category():
    """
    Admin: Create a category
    ---
    tags:
      - Categories
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
            - name
          properties:
            name:
              type: string
              example: "Antibiotics"
            description:
              type: string
              example: "Prescription antibiotics"
            parent_id:
              type: integer
              example: 1
            is_prescription_required:
              type: boolean
              example: true
    responses:
      201:
        description: Category created
      400:
        description: Missing name or parent category does not exist
      403:
        description: Forbidden (not admin)
    """
    data = get_json_body(request)
    require_fields(data, 'name')

    category = catalogService.create_category(
        name=data['name'],
        description=data.get('description'),
        parent_id=parse_optional_int(data.get('parent_id'), 'parent_id'),
        is_prescription_required=bool(data.get('is_prescription_required', False))
    )

    return jsonify({"message": "Category created", "category": category.to_dict()}), 201
