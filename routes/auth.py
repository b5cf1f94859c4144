from core.imports import Blueprint, jsonify, request, jwt_required
from core.extensions import db, bcrypt
from core.auth import current_user_id
from core.errors import NotFound
from core.parsing import get_json_body
from models.userModel import Users
from services import authService

auth_bp = Blueprint('auth', __name__)


def seed_demo_users():
    demo_users = [
        {"email": "admin@pharmacy.com", "first_name": "Ada", "last_name": "Admin", "role": "admin"},
        {"email": "pharmacist@pharmacy.com", "first_name": "Phil", "last_name": "Pharmacist", "role": "pharmacist"},
        {"email": "customer@pharmacy.com", "first_name": "Jane", "last_name": "Doe", "role": "customer"},
    ]
    raw_password = "password123"  # demo login password

    for data in demo_users:
        if Users.query.filter_by(email=data["email"]).first():
            print(f"ℹ️ Demo {data['role']} already exists.")
            continue

        user = Users(
            email=data["email"],
            password_hash=bcrypt.generate_password_hash(raw_password).decode('utf-8'),
            first_name=data["first_name"],
            last_name=data["last_name"],
            role=data["role"],
            is_verified=True
        )
        db.session.add(user)
        print(f"✅ Demo {data['role']} created (email={data['email']}, password={raw_password})")

    db.session.commit()


@auth_bp.route('/api/auth/register', methods=['POST'])
def register():
    """
    Register a new customer account
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      - name: body
        in: body
        required: true
        schema:
          type: object
          required:
            - email
            - password
            - first_name
            - last_name
          properties:
            email:
              type: string
              example: "jane@example.com"
            password:
              type: string
              example: "s3cretpass"
            first_name:
              type: string
              example: "Jane"
            last_name:
              type: string
              example: "Doe"
            phone:
              type: string
              example: "08012345678"
    responses:
      201:
        description: User registered
      400:
        description: Missing fields, invalid email, short password or duplicate email
    """
    data = get_json_body(request)

    user = authService.register_user(
        email=data.get('email'),
        password=data.get('password'),
        first_name=data.get('first_name'),
        last_name=data.get('last_name'),
        phone=data.get('phone')
    )

    return jsonify({"message": "Registration successful", "user": user.to_dict()}), 201


@auth_bp.route('/api/auth/login', methods=['POST'])
def login():
    """
    Log in and receive a JWT access token
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      - name: body
        in: body
        required: true
        schema:
          type: object
          required:
            - email
            - password
          properties:
            email:
              type: string
              example: "customer@pharmacy.com"
            password:
              type: string
              example: "password123"
    responses:
      200:
        description: Login successful
        schema:
          type: object
          properties:
            token:
              type: string
            user:
              type: object
      401:
        description: Invalid email or password
    """
    data = get_json_body(request)

    result = authService.login_user(data.get('email'), data.get('password'))

    return jsonify({
        "message": "Login successful",
        "token": result["token"],
        "user": result["user"].to_dict()
    }), 200


@auth_bp.route('/api/auth/me', methods=['GET'])
@jwt_required()
def me():
    """
    Get the logged-in user's profile
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      200:
        description: Current user
      404:
        description: User not found
    """
    user = authService.get_current_user(current_user_id())
    if not user:
        raise NotFound("User not found")

    return jsonify({"user": user.to_dict()}), 200
