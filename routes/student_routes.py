from flask import Blueprint, g, jsonify, request

from models.user_model import ROLE_STUDENT
from services import get_attendance_service
from utils.jwt_utils import login_required

student_bp = Blueprint("student", __name__)


@student_bp.route("/attendance/scan", methods=["POST"])
@login_required(ROLE_STUDENT)
def scan_qr():
    data = request.get_json(silent=True) or {}
    result = get_attendance_service().submit_scan(
        g.user["id"],
        data.get("qr_data"),
        data.get("lat"),
        data.get("lng"),
    )
    return jsonify({"success": True, "msg": result.message, "attendance": result.record.to_dict()})


@student_bp.route("/student/profile")
@login_required(ROLE_STUDENT)
def profile():
    return jsonify(get_attendance_service().get_student_profile(g.user["id"]))
