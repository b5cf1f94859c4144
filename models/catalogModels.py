from core.extensions import db
from core.imports import datetime, CheckConstraint


class Category(db.Model):
    __tablename__ = "categories"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text, nullable=True)
    # adjacency list; the tree is not checked for cycles
    parent_id = db.Column(db.Integer, db.ForeignKey("categories.id"), nullable=True)
    is_prescription_required = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    parent = db.relationship("Category", remote_side=[id], backref="children")

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "parent_id": self.parent_id,
            "is_prescription_required": self.is_prescription_required,
            "created_at": self.created_at.isoformat(),
        }


class Products(db.Model):
    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("stock_quantity >= 0", name="ck_products_stock_non_negative"),
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), nullable=False, index=True)
    description = db.Column(db.Text, nullable=True)
    generic_name = db.Column(db.String(200), nullable=True)
    manufacturer = db.Column(db.String(200), nullable=False)
    price = db.Column(db.Numeric(10, 2), nullable=False)
    stock_quantity = db.Column(db.Integer, nullable=False, default=0)
    requires_prescription = db.Column(db.Boolean, nullable=False, default=False)
    dosage = db.Column(db.String(200), nullable=True)
    active_ingredients = db.Column(db.Text, nullable=True)
    side_effects = db.Column(db.Text, nullable=True)
    warnings = db.Column(db.Text, nullable=True)
    image_url = db.Column(db.String(500), nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)  # soft delete flag

    category_id = db.Column(db.Integer, db.ForeignKey("categories.id"), nullable=False)
    category = db.relationship("Category", backref="products")

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "generic_name": self.generic_name,
            "manufacturer": self.manufacturer,
            "price": float(self.price),
            "stock_quantity": self.stock_quantity,
            "category_id": self.category_id,
            "requires_prescription": self.requires_prescription,
            "dosage": self.dosage,
            "active_ingredients": self.active_ingredients,
            "side_effects": self.side_effects,
            "warnings": self.warnings,
            "image_url": self.image_url,
            "is_active": self.is_active,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }
