import logging

from flask import Blueprint, current_app, g, jsonify, request
from werkzeug.security import check_password_hash

from errors import AuthenticationError, ValidationError
from models import db
from models.user_model import User
from services import get_attendance_service
from utils.jwt_utils import create_auth_token, login_required

logger = logging.getLogger(__name__)

auth_bp = Blueprint("auth", __name__)


@auth_bp.route("/auth/login", methods=["POST"])
def login():
    data = request.get_json(silent=True) or {}
    user_id = (data.get("id") or "").strip()
    password = data.get("password") or ""
    if not user_id or not password:
        raise ValidationError("id and password are required")

    user = db.session.get(User, user_id)
    if user is None or not check_password_hash(user.password, password):
        logger.warning("Failed login for %s", user_id)
        raise AuthenticationError()

    token = create_auth_token(
        user.id, user.role,
        current_app.config["JWT_SECRET"],
        current_app.config["JWT_EXPIRY_SECONDS"],
    )
    logger.info("%s %s logged in", user.role, user.id)
    return jsonify({"success": True, "token": token, "user": user.to_dict()})


@auth_bp.route("/subjects")
@login_required()
def subjects():
    service = get_attendance_service()
    return jsonify({"subjects": service.list_subjects(g.user["id"], g.user["role"])})
