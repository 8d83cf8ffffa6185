from models import db


class User(db.Model):
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(50), nullable=False, unique=True)
    email = db.Column(db.String(100), nullable=False, unique=True)
    full_name = db.Column(db.String(100), nullable=True)
    role = db.Column(db.String(20), nullable=False, default="student")  # 'student', 'instructor', 'admin'
    date_created = db.Column(db.DateTime, default=db.func.now(), nullable=False)

    def __repr__(self):
        return f"<User {self.username} ({self.role})>"

    @property
    def display_name(self):
        return self.full_name or self.username
