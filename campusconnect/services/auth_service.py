import re

from sqlalchemy.exc import IntegrityError

from campusconnect.errors import BadRequestError, UnauthenticatedError
from campusconnect.extensions import bcrypt, db
from campusconnect.models import User
from campusconnect.services.helpers import clean_text

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class AuthService:
    @staticmethod
    def _normalize_email(email):
        normalized = clean_text(email, "Email").lower()
        if not EMAIL_PATTERN.match(normalized):
            raise BadRequestError("Please provide valid email")
        return normalized

    @staticmethod
    def _check_password_type(*passwords):
        if any(not isinstance(password, str) for password in passwords):
            raise BadRequestError("Password must be text.")

    @staticmethod
    def _hash(password):
        AuthService._check_password_type(password)
        if len(password) < 6:
            raise BadRequestError("Password must be at least 6 characters long")
        return bcrypt.generate_password_hash(password).decode("utf-8")

    @staticmethod
    def register_user(name, email, password, university, major=None, year=None):
        name = clean_text(name, "Name")
        university = clean_text(university, "University")
        if not name or not email or not password or not university:
            raise BadRequestError("Please provide name, email, password and university")
        if not 3 <= len(name) <= 50:
            raise BadRequestError("Name must be between 3 and 50 characters")
        if year and year not in User.YEARS:
            raise BadRequestError("Invalid year.")

        normalized_email = AuthService._normalize_email(email)
        if User.query.filter_by(email=normalized_email).first():
            raise BadRequestError("Email already exists")

        user = User(
            name=name,
            email=normalized_email,
            password_hash=AuthService._hash(password),
            role="student",
            university=university,
            major=clean_text(major, "Major") or None,
            year=year or None,
        )
        try:
            db.session.add(user)
            db.session.commit()
        except IntegrityError as exc:
            db.session.rollback()
            raise BadRequestError("Email already exists") from exc
        return user

    @staticmethod
    def authenticate_user(email, password):
        if not email or not password:
            raise BadRequestError("Please provide email and password")
        AuthService._check_password_type(password)
        user = User.query.filter_by(email=clean_text(email, "Email").lower()).first()
        if not user:
            raise UnauthenticatedError("Invalid Credentials")
        try:
            is_valid = bcrypt.check_password_hash(user.password_hash, password)
        except ValueError:
            is_valid = False
        if not is_valid:
            raise UnauthenticatedError("Invalid Credentials")
        if not user.is_active_user:
            raise UnauthenticatedError("User account is inactive.")
        return user

    @staticmethod
    def change_password(user, old_password, new_password):
        if not old_password or not new_password:
            raise BadRequestError("Please provide both values")
        AuthService._check_password_type(old_password, new_password)
        if not bcrypt.check_password_hash(user.password_hash, old_password):
            raise UnauthenticatedError("Invalid Credentials")
        user.password_hash = AuthService._hash(new_password)
        db.session.commit()
