# seed_data.py
"""Demo students, faculty and subjects. Safe to run repeatedly."""
import logging

import click
from flask.cli import with_appcontext
from werkzeug.security import generate_password_hash

from models import db
from models.subject_model import Subject
from models.user_model import ROLE_FACULTY, ROLE_STUDENT, User

logger = logging.getLogger(__name__)

SAMPLE_STUDENTS = [
    {"id": "STU001", "name": "Arjun Patel", "phone": "+91 9876543210", "roll_no": "CS21001",
     "enrollment_no": "EN2021CS001", "course": "Computer Science Engineering"},
    {"id": "STU002", "name": "Priya Sharma", "phone": "+91 9876543211", "roll_no": "CS21002",
     "enrollment_no": "EN2021CS002", "course": "Computer Science Engineering"},
]
SAMPLE_FACULTY = [
    {"id": "FAC001", "name": "Dr. Rajesh Kumar", "phone": "+91 9876543220", "department": "Computer Science"},
    {"id": "FAC002", "name": "Prof. Meera Joshi", "phone": "+91 9876543221", "department": "Information Technology"},
]
SAMPLE_SUBJECTS = [
    {"id": "SUB001", "name": "Data Structures", "faculty_id": "FAC001", "code": "CS301"},
    {"id": "SUB002", "name": "Database Management", "faculty_id": "FAC001", "code": "CS302"},
    {"id": "SUB003", "name": "Web Development", "faculty_id": "FAC002", "code": "IT301"},
]
STUDENT_PASSWORD = "student123"
FACULTY_PASSWORD = "faculty123"


def seed_sample_data():
    """Insert whatever sample rows are missing. Returns the number of rows added."""
    added = 0
    for role, rows, password in (
        (ROLE_STUDENT, SAMPLE_STUDENTS, STUDENT_PASSWORD),
        (ROLE_FACULTY, SAMPLE_FACULTY, FACULTY_PASSWORD),
    ):
        for row in rows:
            if db.session.get(User, row["id"]) is None:
                db.session.add(User(role=role, password=generate_password_hash(password), **row))
                added += 1
    db.session.flush()

    for row in SAMPLE_SUBJECTS:
        if db.session.get(Subject, row["id"]) is None:
            db.session.add(Subject(**row))
            added += 1

    db.session.commit()
    if added:
        logger.info("Sample data initialized (%d rows)", added)
    return added


@click.command("seed")
@with_appcontext
def seed_command():
    """Insert the demo users and subjects."""
    added = seed_sample_data()
    click.echo(f"Seeded {added} rows")
