from core.imports import Blueprint, jsonify, request
from core.extensions import db
from core.auth import roles_required
from core.errors import ValidationFailed
from core.parsing import get_json_body, require_fields, parse_int, parse_optional_int, parse_bool_arg, parse_float_arg
from models.catalogModels import Category, Products
from services import catalogService

products_bp = Blueprint('products', __name__)


def seed_categories():
    categories = [
        {"name": "Pain Relief", "description": "Over-the-counter pain medication", "is_prescription_required": False},
        {"name": "Antibiotics", "description": "Prescription antibiotics", "is_prescription_required": True},
        {"name": "Vitamins & Supplements", "description": "Daily vitamins and supplements", "is_prescription_required": False},
    ]
    created = []
    for data in categories:
        if not Category.query.filter_by(name=data["name"]).first():
            db.session.add(Category(**data))
            created.append(data["name"])
    db.session.commit()
    if created:
        print(f"✅ Categories created: {', '.join(created)}")
    else:
        print("ℹ️ Categories already exist.")


def seed_products():
    sample_products = [
        {
            "name": "Ibuprofen 200mg",
            "generic_name": "Ibuprofen",
            "manufacturer": "TestPharma",
            "price": "15.99",
            "stock_quantity": 100,
            "category": "Pain Relief",
            "dosage": "1-2 tablets every 4-6 hours",
        },
        {
            "name": "Amoxicillin 500mg",
            "generic_name": "Amoxicillin",
            "manufacturer": "TestPharma",
            "price": "25.50",
            "stock_quantity": 50,
            "category": "Antibiotics",
            "dosage": "1 capsule every 8 hours",
        },
        {
            "name": "Vitamin D3 1000IU",
            "generic_name": "Cholecalciferol",
            "manufacturer": "HealthCo",
            "price": "9.75",
            "stock_quantity": 8,
            "category": "Vitamins & Supplements",
            "dosage": "1 tablet daily",
        },
    ]

    for prod in sample_products:
        if Products.query.filter_by(name=prod["name"]).first():
            print(f"ℹ️ Product already exists: {prod['name']}")
            continue

        category = Category.query.filter_by(name=prod["category"]).first()
        if not category:
            print(f"⚠️ Category {prod['category']} not found. Run seed_categories() first.")
            continue

        catalogService.create_product(
            name=prod["name"],
            generic_name=prod["generic_name"],
            manufacturer=prod["manufacturer"],
            price=prod["price"],
            stock_quantity=prod["stock_quantity"],
            category_id=category.id,
            dosage=prod["dosage"],
        )
        print(f"✅ Product added: {prod['name']}")


@products_bp.route('/api/products', methods=['GET'])
def list_products():
    """
    List all active products
    ---
    tags:
      - Products
    responses:
      200:
        description: Active products
        schema:
          type: object
          properties:
            products:
              type: array
              items:
                type: object
            count:
              type: integer
              example: 10
    """
    products = catalogService.get_products()
    return jsonify({
        "products": [p.to_dict() for p in products],
        "count": len(products)
    }), 200


@products_bp.route('/api/products/search', methods=['GET'])
def search_products():
    """
    Search and filter active products
    ---
    tags:
      - Products
    parameters:
      - name: query
        in: query
        type: string
        description: Case-insensitive substring of the product name
      - name: category_id
        in: query
        type: integer
      - name: requires_prescription
        in: query
        type: boolean
      - name: min_price
        in: query
        type: number
      - name: max_price
        in: query
        type: number
      - name: manufacturer
        in: query
        type: string
      - name: limit
        in: query
        type: integer
        default: 20
      - name: offset
        in: query
        type: integer
        default: 0
    responses:
      200:
        description: One page of matches plus the total match count
        schema:
          type: object
          properties:
            products:
              type: array
              items:
                type: object
            total:
              type: integer
              example: 42
      400:
        description: Invalid filter value
    """
    args = request.args

    result = catalogService.search_products(
        query=args.get('query') or None,
        category_id=parse_optional_int(args.get('category_id'), 'category_id'),
        requires_prescription=parse_bool_arg(args.get('requires_prescription'), 'requires_prescription'),
        min_price=parse_float_arg(args.get('min_price'), 'min_price'),
        max_price=parse_float_arg(args.get('max_price'), 'max_price'),
        manufacturer=args.get('manufacturer') or None,
        limit=parse_int(args.get('limit', 20), 'limit', minimum=1),
        offset=parse_int(args.get('offset', 0), 'offset', minimum=0)
    )

    return jsonify({
        "products": [p.to_dict() for p in result["products"]],
        "total": result["total"]
    }), 200


@products_bp.route('/api/products/<int:product_id>', methods=['GET'])
def product_details(product_id):
    """
    Get an active product by ID
    ---
    tags:
      - Products
    parameters:
      - name: product_id
        in: path
        type: integer
        required: true
    responses:
      200:
        description: Product details, or null if absent or deactivated
    """
    product = catalogService.get_product_by_id(product_id)
    return jsonify({"product": product.to_dict() if product else None}), 200


@products_bp.route('/api/products', methods=['POST'])
@roles_required("admin")
def create_product():
    """
    Admin: Add a product to the catalog
    ---
    tags:
      - Products
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
            - manufacturer
            - price
            - stock_quantity
            - category_id
          properties:
            name:
              type: string
              example: "Amoxicillin 500mg"
            manufacturer:
              type: string
              example: "TestPharma"
            price:
              type: number
              example: 25.50
            stock_quantity:
              type: integer
              example: 50
            category_id:
              type: integer
              example: 2
            requires_prescription:
              type: boolean
              description: Defaults to the category's is_prescription_required
            description:
              type: string
            generic_name:
              type: string
            dosage:
              type: string
            active_ingredients:
              type: string
            side_effects:
              type: string
            warnings:
              type: string
            image_url:
              type: string
    responses:
      201:
        description: Product created
      400:
        description: Missing fields, invalid values or unknown category
      403:
        description: Forbidden (not admin)
    """
    data = get_json_body(request)
    require_fields(data, 'name', 'manufacturer', 'price', 'stock_quantity', 'category_id')

    product = catalogService.create_product(
        name=data['name'],
        manufacturer=data['manufacturer'],
        price=data['price'],
        stock_quantity=data['stock_quantity'],
        category_id=parse_int(data['category_id'], 'category_id'),
        requires_prescription=data.get('requires_prescription'),
        description=data.get('description'),
        generic_name=data.get('generic_name'),
        dosage=data.get('dosage'),
        active_ingredients=data.get('active_ingredients'),
        side_effects=data.get('side_effects'),
        warnings=data.get('warnings'),
        image_url=data.get('image_url')
    )

    return jsonify({"message": "Product added successfully", "product": product.to_dict()}), 201


@products_bp.route('/api/products/<int:product_id>', methods=['PATCH'])
@roles_required("admin")
def update_product(product_id):
    """
    Admin: Partially update a product
    ---
    tags:
      - Products
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - name: product_id
        in: path
        type: integer
        required: true
      - name: body
        in: body
        required: true
        description: Only the keys present are changed. Send is_active=false to deactivate.
        schema:
          type: object
          properties:
            price:
              type: number
              example: 19.99
            is_active:
              type: boolean
              example: false
    responses:
      200:
        description: Product updated
      400:
        description: Invalid field value or unknown category
      404:
        description: Product not found
    """
    data = get_json_body(request)
    if not data:
        raise ValidationFailed("No fields to update")

    product = catalogService.update_product(product_id, data)

    return jsonify({"message": "Product updated successfully", "product": product.to_dict()}), 200


@products_bp.route('/api/products/<int:product_id>/stock', methods=['PUT'])
@roles_required("admin")
def update_stock(product_id):
    """
    Admin: Set a product's stock level
    ---
    tags:
      - Products
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - name: product_id
        in: path
        type: integer
        required: true
      - name: body
        in: body
        required: true
        schema:
          type: object
          required:
            - stock_quantity
          properties:
            stock_quantity:
              type: integer
              example: 120
    responses:
      200:
        description: Stock updated
      400:
        description: Negative or non-integer stock
      404:
        description: Product not found
    """
    data = get_json_body(request)
    require_fields(data, 'stock_quantity')

    product = catalogService.update_product_stock(product_id, data['stock_quantity'])

    return jsonify({"message": "Stock updated", "product": product.to_dict()}), 200
