from core.imports import create_access_token, current_app, re
from core.extensions import db, bcrypt
from core.errors import ValidationFailed, AuthenticationFailed
from models.userModel import Users

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MIN_PASSWORD_LENGTH = 8


def register_user(email, password, first_name, last_name, phone=None):
    if not all([email, password, first_name, last_name]):
        raise ValidationFailed("email, password, first_name and last_name are required")

    email = email.strip().lower()
    if not EMAIL_PATTERN.match(email):
        raise ValidationFailed("Invalid email address")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationFailed(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

    if Users.query.filter_by(email=email).first():
        raise ValidationFailed("User with this email already exists")

    user = Users(
        email=email,
        password_hash=bcrypt.generate_password_hash(password).decode("utf-8"),
        first_name=first_name,
        last_name=last_name,
        phone=phone,
        role="customer",
    )
    db.session.add(user)
    db.session.commit()

    current_app.logger.info("Registered user %s", user.id)
    return user


def login_user(email, password):
    if not email or not password:
        raise ValidationFailed("Email and password are required")

    user = Users.query.filter_by(email=email.strip().lower()).first()

    # same message for unknown email and wrong password
    if not user or not bcrypt.check_password_hash(user.password_hash, password):
        raise AuthenticationFailed("Invalid email or password")

    token = create_access_token(
        identity=str(user.id),
        additional_claims={"role": user.role}
    )
    return {"user": user, "token": token}


def get_current_user(user_id):
    if user_id is None:
        return None
    return db.session.get(Users, user_id)
