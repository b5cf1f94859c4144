from core.imports import Flask, cloudinary
from core.config import Config
from core.extensions import db, jwt, swagger, cors, bcrypt, migrate
from core.errors import register_error_handlers
from routes.auth import auth_bp, seed_demo_users
from routes.categories import categories_bp
from routes.products import products_bp, seed_categories, seed_products
from routes.prescriptions import prescriptions_bp
from routes.cart import cart_bp
from routes.orders import orders_bp
from routes.consultations import consultations_bp
from routes.reports import reports_bp

def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)
    app.logger.setLevel(app.config["LOG_LEVEL"])

    db.init_app(app)
    jwt.init_app(app)
    swagger.init_app(app)
    cors.init_app(app)
    bcrypt.init_app(app)
    migrate.init_app(app, db)

    if app.config.get("CLOUDINARY_CLOUD_NAME"):
        cloudinary.config(
            cloud_name=app.config["CLOUDINARY_CLOUD_NAME"],
            api_key=app.config["CLOUDINARY_API_KEY"],
            api_secret=app.config["CLOUDINARY_API_SECRET"],
            secure=True
        )

    register_error_handlers(app)

    app.register_blueprint(auth_bp)
    app.register_blueprint(categories_bp)
    app.register_blueprint(products_bp)
    app.register_blueprint(prescriptions_bp)
    app.register_blueprint(cart_bp)
    app.register_blueprint(orders_bp)
    app.register_blueprint(consultations_bp)
    app.register_blueprint(reports_bp)

    @app.route('/ping')
    def ping():
        return "Ping received", 200

    return app


if __name__ == "__main__":
    app = create_app()
    with app.app_context():
        db.create_all()

        seed_demo_users()
        seed_categories()
        seed_products()

    app.run(debug=True)
