from flask import Flask, request, jsonify, Blueprint, current_app
from flask_jwt_extended import create_access_token, get_jwt_identity, jwt_required, JWTManager, get_jwt, verify_jwt_in_request
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy.exc import SQLAlchemyError, IntegrityError
from flask_migrate import Migrate
from flask_bcrypt import Bcrypt
from flasgger import Swagger
from flask_cors import CORS
from sqlalchemy import func, update, CheckConstraint
from datetime import datetime, timedelta
from decimal import Decimal, InvalidOperation
from functools import wraps
import cloudinary
import cloudinary.uploader
import re
