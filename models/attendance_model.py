from dataclasses import dataclass
from typing import Optional

from errors import AlreadyScanned
from utils.qr_utils import Direction

ATTENDANCE_PREFIX = "attendance:"


def attendance_key(student_id, session_id):
    return f"{ATTENDANCE_PREFIX}{student_id}:{session_id}"


@dataclass
class AttendanceRecord:
    student_id: str
    session_id: str
    subject_id: str
    in_scan_at: Optional[int] = None  # epoch ms
    in_scan_location: Optional[dict] = None  # {"lat": .., "lng": ..}
    out_scan_at: Optional[int] = None
    out_scan_location: Optional[dict] = None

    @property
    def id(self):
        return f"{self.student_id}:{self.session_id}"

    @property
    def is_complete(self):
        return self.in_scan_at is not None and self.out_scan_at is not None

    @property
    def last_scan_at(self):
        return max(self.in_scan_at or 0, self.out_scan_at or 0)

    def has_scan(self, direction):
        if Direction(direction) is Direction.IN:
            return self.in_scan_at is not None
        return self.out_scan_at is not None

    def record_scan(self, direction, timestamp, lat, lng):
        """Set the IN or OUT fields. A direction is written once and never overwritten."""
        direction = Direction(direction)
        if self.has_scan(direction):
            raise AlreadyScanned(f"{direction.value} scan already recorded for this session")
        location = {"lat": lat, "lng": lng}
        if direction is Direction.IN:
            self.in_scan_at = timestamp
            self.in_scan_location = location
        else:
            self.out_scan_at = timestamp
            self.out_scan_location = location

    def to_dict(self):
        return {
            "id": self.id,
            "student_id": self.student_id,
            "session_id": self.session_id,
            "subject_id": self.subject_id,
            "in_scan_at": self.in_scan_at,
            "in_scan_location": self.in_scan_location,
            "out_scan_at": self.out_scan_at,
            "out_scan_location": self.out_scan_location,
            "is_complete": self.is_complete,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            student_id=data["student_id"],
            session_id=data["session_id"],
            subject_id=data["subject_id"],
            in_scan_at=data.get("in_scan_at"),
            in_scan_location=data.get("in_scan_location"),
            out_scan_at=data.get("out_scan_at"),
            out_scan_location=data.get("out_scan_location"),
        )


class AttendanceStore:
    """Attendance records kept under ``attendance:<student_id>:<session_id>``."""

    def __init__(self, kv):
        self.kv = kv

    def locked(self, student_id, session_id, timeout=None):
        return self.kv.locked(attendance_key(student_id, session_id), timeout)

    def get(self, student_id, session_id):
        data = self.kv.get(attendance_key(student_id, session_id))
        return AttendanceRecord.from_dict(data) if data is not None else None

    def get_or_create(self, student_id, session_id, subject_id):
        # not persisted until save()
        record = self.get(student_id, session_id)
        if record is None:
            record = AttendanceRecord(student_id=student_id, session_id=session_id, subject_id=subject_id)
        return record

    def save(self, record):
        self.kv.set(attendance_key(record.student_id, record.session_id), record.to_dict())

    def list_by_session(self, session_id):
        rows = self.kv.get_by_prefix(ATTENDANCE_PREFIX)
        return [AttendanceRecord.from_dict(r) for r in rows if r.get("session_id") == session_id]

    def list_by_student_and_subject(self, student_id, subject_id):
        rows = self.kv.get_by_prefix(f"{ATTENDANCE_PREFIX}{student_id}:{subject_id}:")
        return [
            AttendanceRecord.from_dict(r) for r in rows
            if r.get("student_id") == student_id and r.get("subject_id") == subject_id
        ]
