from models import db


class Subject(db.Model):
    __tablename__ = "subjects"

    id = db.Column(db.String(20), primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    code = db.Column(db.String(20), nullable=False)
    faculty_id = db.Column(db.String(20), db.ForeignKey("users.id"), nullable=False)

    def to_dict(self):
        return {"id": self.id, "name": self.name, "code": self.code, "faculty_id": self.faculty_id}

    def __repr__(self):
        return f"<Subject {self.code} {self.name}>"
