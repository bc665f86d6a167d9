# catalog_app/models/user.py

import enum

from flask_login import UserMixin
from sqlalchemy import Enum

from .base import BaseModel, db


class UserRole(str, enum.Enum):
    """Roles recognised by the catalog backend."""

    ADMIN = "admin"
    USER = "user"


class User(BaseModel, UserMixin):
    """Catalog user. Account creation and login flows live outside this service."""

    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    role = db.Column(
        Enum(UserRole, name="user_role_enum"),
        default=UserRole.USER,
        nullable=False,
        index=True,
    )
    is_active = db.Column(db.Boolean, default=True, nullable=False)

    def __repr__(self):
        return f"<User {self.email}>"
