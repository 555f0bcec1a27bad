from models import db

ROLE_STUDENT = "student"
ROLE_FACULTY = "faculty"


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.String(20), primary_key=True)  # STU001, FAC001
    role = db.Column(db.String(10), nullable=False)  # "faculty" or "student"
    password = db.Column(db.String(200), nullable=False)  # hashed
    name = db.Column(db.String(100), nullable=False)
    phone = db.Column(db.String(20), nullable=True)
    roll_no = db.Column(db.String(20), nullable=True)  # only for students
    enrollment_no = db.Column(db.String(30), nullable=True)  # only for students
    course = db.Column(db.String(100), nullable=True)  # only for students
    department = db.Column(db.String(100), nullable=True)  # only for faculty

    def to_dict(self):
        data = {
            "id": self.id,
            "role": self.role,
            "name": self.name,
            "phone": self.phone,
        }
        if self.role == ROLE_STUDENT:
            data.update(roll_no=self.roll_no, enrollment_no=self.enrollment_no, course=self.course)
        else:
            data.update(department=self.department)
        return data

    def __repr__(self):
        return f"<User {self.id} ({self.role})>"
