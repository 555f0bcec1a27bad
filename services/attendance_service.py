# services/attendance_service.py
import logging
import math
from dataclasses import dataclass
from datetime import date as date_cls, datetime, timezone
from numbers import Real

from errors import (
    AttendanceError,
    OutsideCampusBoundary,
    PermissionDenied,
    SessionNotFound,
    ValidationError,
)
from models import db
from models.attendance_model import AttendanceRecord
from models.session_model import Session
from models.subject_model import Subject
from models.user_model import ROLE_FACULTY, ROLE_STUDENT, User
from utils.geo_utils import CampusBoundary
from utils.qr_utils import Direction, now_millis

logger = logging.getLogger(__name__)

RECENT_SESSIONS = 10
RECENT_ATTENDANCE = 5


@dataclass
class ScanResult:
    record: AttendanceRecord
    direction: Direction

    @property
    def message(self):
        return f"{self.direction.value} scan recorded successfully"


def _iso(millis):
    return datetime.fromtimestamp(millis / 1000, tz=timezone.utc).isoformat()


def _percentage(attended, total):
    # rounds half up: 2/3 -> 67, 1/8 -> 13
    if total <= 0:
        return 0
    return math.floor(attended * 100 / total + 0.5)


class AttendanceService:
    """
    Issues IN/OUT scan tokens for class sessions and records student scans.

    A scan is accepted only when the device is inside the campus boundary and
    the token is correctly signed, unexpired and names an existing session.
    Each direction of an attendance record is written once.
    """

    def __init__(self, codec, sessions, attendance, boundary=None, clock=now_millis, timeout=None):
        self.codec = codec
        self.sessions = sessions
        self.attendance = attendance
        self.boundary = boundary or CampusBoundary()
        self.clock = clock
        self.timeout = timeout

    # -------------------- Faculty --------------------
    def create_session(self, faculty_id, subject_id, date, start_time=None, timeout=None):
        if not isinstance(subject_id, str) or not isinstance(date, str) or not subject_id or not date:
            raise ValidationError("subject_id and date are required")
        if start_time is not None and not isinstance(start_time, str):
            raise ValidationError("start_time must be a string")
        try:
            date_cls.fromisoformat(date)
        except ValueError as e:
            raise ValidationError("date must be YYYY-MM-DD") from e

        subject = db.session.get(Subject, subject_id)
        if subject is None:
            raise ValidationError(f"Unknown subject {subject_id}")
        if subject.faculty_id != faculty_id:
            raise PermissionDenied("Subject is taught by another faculty")

        now = self.clock()
        session = Session(
            id=f"{subject_id}:{now}",
            subject_id=subject_id,
            faculty_id=faculty_id,
            date=date,
            start_time=start_time or _iso(now),
            in_issued_at=now,
        )
        # two sessions for one subject in the same millisecond: take the next free one
        millis = now
        while not self.sessions.create(session, timeout or self.timeout):
            millis += 1
            session.id = f"{subject_id}:{millis}"

        in_token = self.codec.encode_wire(session.id, Direction.IN)
        logger.info("Session %s created by %s for %s", session.id, faculty_id, session.date)
        return session, in_token

    def generate_out_token(self, session_id, faculty_id=None, timeout=None):
        """Issue an OUT token. Repeat calls re-sign a token but keep the first out_issued_at."""
        session = self.sessions.get(session_id)
        if faculty_id is not None and session.faculty_id != faculty_id:
            raise SessionNotFound(f"Session {session_id} not found")

        session = self.sessions.set_out_issued(session_id, self.clock(), timeout or self.timeout)
        out_token = self.codec.encode_wire(session.id, Direction.OUT)
        logger.info("OUT token issued for session %s", session.id)
        return session, out_token

    def get_session_attendance(self, session_id, faculty_id=None):
        session = self.sessions.get(session_id)
        if faculty_id is not None and session.faculty_id != faculty_id:
            raise PermissionDenied()

        records = self.attendance.list_by_session(session_id)
        students = {
            s.id: s for s in User.query.filter(
                User.id.in_([r.student_id for r in records]),
                User.role == ROLE_STUDENT,
            ).all()
        } if records else {}

        rows = []
        for record in records:
            student = students.get(record.student_id)
            if student is None:
                continue
            row = record.to_dict()
            row.update(student_name=student.name, roll_no=student.roll_no)
            rows.append(row)

        return {
            "session": session.to_dict(),
            "attendance": rows,
            "total_scans": len(records),
            "complete_attendance": sum(1 for r in records if r.is_complete),
        }

    def get_faculty_dashboard(self, faculty_id):
        faculty = db.session.get(User, faculty_id)
        if faculty is None or faculty.role != ROLE_FACULTY:
            raise ValidationError("Faculty not found")

        subjects = Subject.query.filter_by(faculty_id=faculty_id).order_by(Subject.id).all()
        sessions = sorted(
            self.sessions.list_by_faculty(faculty_id),
            key=lambda s: s.in_issued_at,
            reverse=True,
        )[:RECENT_SESSIONS]
        return {
            "profile": faculty.to_dict(),
            "subjects": [s.to_dict() for s in subjects],
            "recent_sessions": [s.to_dict() for s in sessions],
        }

    # -------------------- Student --------------------
    def submit_scan(self, student_id, wire_token, lat, lng, timeout=None):
        if not wire_token:
            raise ValidationError("No token received")
        for value in (lat, lng):
            if isinstance(value, bool) or not isinstance(value, Real) or not math.isfinite(value):
                raise ValidationError("lat and lng must be numbers")

        try:
            if not self.boundary.contains(lat, lng):
                raise OutsideCampusBoundary()

            token = self.codec.decode(wire_token)
            session = self.sessions.get(token.session_id)

            with self.attendance.locked(student_id, session.id, timeout or self.timeout):
                record = self.attendance.get_or_create(student_id, session.id, session.subject_id)
                record.record_scan(token.direction, self.clock(), lat, lng)
                self.attendance.save(record)
        except AttendanceError as e:
            logger.warning("Scan by %s rejected: %s", student_id, e.code)
            raise

        logger.info("%s scan recorded for %s in session %s", token.direction.value, student_id, session.id)
        return ScanResult(record=record, direction=token.direction)

    def get_student_attendance_summary(self, student_id):
        summary = []
        for subject in Subject.query.order_by(Subject.id).all():
            total = len(self.sessions.list_by_subject(subject.id))
            records = self.attendance.list_by_student_and_subject(student_id, subject.id)
            attended = sum(1 for r in records if r.is_complete)
            recent = sorted(records, key=lambda r: r.last_scan_at, reverse=True)[:RECENT_ATTENDANCE]
            summary.append({
                "subject_id": subject.id,
                "subject": subject.name,
                "code": subject.code,
                "total_sessions": total,
                "attended_sessions": attended,
                "percentage": _percentage(attended, total),
                "recent_attendance": [r.to_dict() for r in recent],
            })
        return summary

    def get_student_profile(self, student_id):
        student = db.session.get(User, student_id)
        if student is None or student.role != ROLE_STUDENT:
            raise ValidationError("Student not found")
        return {
            "profile": student.to_dict(),
            "attendance": self.get_student_attendance_summary(student_id),
        }

    # -------------------- Shared --------------------
    def list_subjects(self, user_id, role):
        query = Subject.query
        if role == ROLE_FACULTY:
            query = query.filter_by(faculty_id=user_id)
        return [s.to_dict() for s in query.order_by(Subject.id).all()]
