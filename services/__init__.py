from flask import current_app


def get_attendance_service():
    return current_app.extensions["attendance_service"]
