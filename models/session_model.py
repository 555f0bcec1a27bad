from dataclasses import asdict, dataclass
from typing import Optional

from errors import SessionNotFound

SESSION_PREFIX = "session:"

STATUS_ACTIVE = "active"
STATUS_COMPLETED = "completed"


def session_key(session_id):
    return f"{SESSION_PREFIX}{session_id}"


@dataclass
class Session:
    id: str
    subject_id: str
    faculty_id: str
    date: str
    start_time: str
    in_issued_at: int  # epoch ms
    out_issued_at: Optional[int] = None

    @property
    def status(self):
        return STATUS_COMPLETED if self.out_issued_at is not None else STATUS_ACTIVE

    def to_dict(self):
        data = asdict(self)
        data["status"] = self.status
        return data

    @classmethod
    def from_dict(cls, data):
        return cls(
            id=data["id"],
            subject_id=data["subject_id"],
            faculty_id=data["faculty_id"],
            date=data["date"],
            start_time=data["start_time"],
            in_issued_at=data["in_issued_at"],
            out_issued_at=data.get("out_issued_at"),
        )


class SessionStore:
    """Sessions kept in the key-value store under ``session:<id>``."""

    def __init__(self, kv):
        self.kv = kv

    def create(self, session, timeout=None):
        """Persist a new session. Returns False, writing nothing, if the id is taken."""
        key = session_key(session.id)
        with self.kv.locked(key, timeout):
            if self.kv.exists(key):
                return False
            self.kv.set(key, session.to_dict())
        return True

    def get(self, session_id):
        data = self.kv.get(session_key(session_id))
        if data is None:
            raise SessionNotFound(f"Session {session_id} not found")
        return Session.from_dict(data)

    def set_out_issued(self, session_id, timestamp, timeout=None):
        # first issuance wins; it must land strictly after the IN issuance
        with self.kv.locked(session_key(session_id), timeout):
            session = self.get(session_id)
            if session.out_issued_at is None:
                session.out_issued_at = max(timestamp, session.in_issued_at + 1)
                self.kv.set(session_key(session_id), session.to_dict())
        return session

    def list_by_subject(self, subject_id):
        rows = self.kv.get_by_prefix(f"{SESSION_PREFIX}{subject_id}:")
        return [Session.from_dict(r) for r in rows if r.get("subject_id") == subject_id]

    def list_by_faculty(self, faculty_id):
        rows = self.kv.get_by_prefix(SESSION_PREFIX)
        return [Session.from_dict(r) for r in rows if r.get("faculty_id") == faculty_id]
