# catalog_app/models/catalog.py

import enum

from sqlalchemy import Enum, Index, func

from .base import BaseModel, db

REFERENCE_NAME_MAX_LENGTH = 50
NAME_MAX_LENGTH = 255


class Gender(str, enum.Enum):
    """Canonical gender values stored on a name."""

    MALE = "male"
    FEMALE = "female"
    UNISEX = "unisex"


class ReferenceEntityMixin:
    """Shared behaviour for soft-deletable lookup tables (religions, origins)."""

    def __repr__(self):
        return f"<{type(self).__name__} {self.name}>"

    @classmethod
    def list_active(cls):
        return cls.query.filter_by(is_active=True).order_by(cls.name).all()

    def reactivate(self):
        self.is_active = True


class Religion(ReferenceEntityMixin, BaseModel):
    """Religion a name is associated with"""

    __tablename__ = "religions"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(REFERENCE_NAME_MAX_LENGTH), nullable=False)
    is_active = db.Column(db.Boolean, default=True, nullable=False, index=True)
    created_by_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True)


class Origin(ReferenceEntityMixin, BaseModel):
    """Geographic or cultural origin of a name"""

    __tablename__ = "origins"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(REFERENCE_NAME_MAX_LENGTH), nullable=False)
    is_active = db.Column(db.Boolean, default=True, nullable=False, index=True)
    created_by_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True)


class Name(BaseModel):
    """A catalog entry for a baby name"""

    __tablename__ = "names"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(NAME_MAX_LENGTH), nullable=False)
    description = db.Column(db.Text, nullable=False, default="")
    religion_id = db.Column(db.Integer, db.ForeignKey("religions.id", ondelete="SET NULL"), nullable=True, index=True)
    origin_id = db.Column(db.Integer, db.ForeignKey("origins.id", ondelete="SET NULL"), nullable=True, index=True)
    gender = db.Column(
        Enum(Gender, name="name_gender_enum"),
        default=Gender.UNISEX,
        nullable=False,
        index=True,
    )

    religion = db.relationship("Religion")
    origin = db.relationship("Origin")

    def __repr__(self):
        return f"<Name {self.name} ({self.gender.value if self.gender else 'unknown'})>"


# Uniqueness is case-insensitive for every catalog table.
Index("uq_religions_name_lower", func.lower(Religion.name), unique=True)
Index("uq_origins_name_lower", func.lower(Origin.name), unique=True)
Index("uq_names_name_lower", func.lower(Name.name), unique=True)
