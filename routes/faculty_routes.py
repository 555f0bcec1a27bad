from flask import Blueprint, g, jsonify, request

from models.user_model import ROLE_FACULTY
from services import get_attendance_service
from utils.jwt_utils import login_required
from utils.qr_utils import render_qr_png

faculty_bp = Blueprint("faculty", __name__)


@faculty_bp.route("/faculty/session", methods=["POST"])
@login_required(ROLE_FACULTY)
def create_session():
    data = request.get_json(silent=True) or {}
    session, in_token = get_attendance_service().create_session(
        g.user["id"],
        data.get("subject_id"),
        data.get("date"),
        data.get("start_time"),
    )
    return jsonify({
        "success": True,
        "session_id": session.id,
        "in_qr_data": in_token,
        "qr": render_qr_png(in_token),
        "session": session.to_dict(),
    }), 201


@faculty_bp.route("/faculty/session/<session_id>/generate-out", methods=["POST"])
@login_required(ROLE_FACULTY)
def generate_out(session_id):
    session, out_token = get_attendance_service().generate_out_token(session_id, faculty_id=g.user["id"])
    return jsonify({
        "success": True,
        "out_qr_data": out_token,
        "qr": render_qr_png(out_token),
        "session": session.to_dict(),
    })


@faculty_bp.route("/faculty/dashboard")
@login_required(ROLE_FACULTY)
def dashboard():
    return jsonify(get_attendance_service().get_faculty_dashboard(g.user["id"]))


@faculty_bp.route("/session/<session_id>/attendance")
@login_required(ROLE_FACULTY)
def session_attendance(session_id):
    return jsonify(get_attendance_service().get_session_attendance(session_id, faculty_id=g.user["id"]))
