# app.py
import logging

from flask import Flask, jsonify

from config import Config
from errors import AttendanceError
from models import db
from models.attendance_model import AttendanceStore
from models.kv_model import KeyValueStore
from models.session_model import SessionStore
from routes.auth_routes import auth_bp
from routes.faculty_routes import faculty_bp
from routes.student_routes import student_bp
from seed_data import seed_command, seed_sample_data
from services.attendance_service import AttendanceService
from utils.geo_utils import CampusBoundary
from utils.qr_utils import TokenCodec, now_millis

logger = logging.getLogger(__name__)


def build_service(app, clock=now_millis):
    """Wire the attendance core from app.config. The QR secret stays inside the codec."""
    cfg = app.config
    kv = KeyValueStore(lock_timeout=cfg["OPERATION_TIMEOUT_SECONDS"])
    return AttendanceService(
        codec=TokenCodec(cfg["QR_SECRET"], ttl_ms=cfg["QR_TOKEN_TTL_MS"], clock=clock),
        sessions=SessionStore(kv),
        attendance=AttendanceStore(kv),
        boundary=CampusBoundary(cfg["CAMPUS_LAT"], cfg["CAMPUS_LNG"], cfg["CAMPUS_RADIUS_METERS"]),
        clock=clock,
        timeout=cfg["OPERATION_TIMEOUT_SECONDS"],
    )


def create_app(config_object=Config, clock=now_millis):
    app = Flask(__name__)
    app.config.from_object(config_object)

    logging.basicConfig(
        level=getattr(logging, app.config["LOG_LEVEL"], logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    db.init_app(app)
    app.extensions["attendance_service"] = build_service(app, clock)

    app.register_blueprint(auth_bp)
    app.register_blueprint(faculty_bp)
    app.register_blueprint(student_bp)
    app.cli.add_command(seed_command)

    @app.errorhandler(AttendanceError)
    def handle_attendance_error(error):
        return jsonify(error.to_dict()), error.status

    with app.app_context():
        db.create_all()
        if app.config["SEED_SAMPLE_DATA"]:
            seed_sample_data()

    logger.debug("App created with database %s", app.config["SQLALCHEMY_DATABASE_URI"])
    return app


# -------------------- Run --------------------
if __name__ == '__main__':
    create_app().run(debug=True)
