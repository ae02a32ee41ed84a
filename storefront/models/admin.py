# storefront/models/admin.py
from storefront.extensions import db, bcrypt
from flask_login import UserMixin
from werkzeug.security import check_password_hash as wz_check_password_hash


class Admin(db.Model, UserMixin):
    __tablename__ = "admins"

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(150), unique=True, nullable=False)
    # column keeps its historical name; the value is always a hash
    password_hash = db.Column("password", db.String(200), nullable=False)

    # --- Password handling ---------------------------------------------------
    def set_password(self, password: str) -> None:
        self.password_hash = bcrypt.generate_password_hash(password).decode("utf-8")

    def check_password(self, password: str) -> bool:
        if not self.password_hash:
            return False
        try:
            return bcrypt.check_password_hash(self.password_hash, password)
        except ValueError:
            # not a bcrypt hash: accounts created with Werkzeug's pbkdf2 helper
            return wz_check_password_hash(self.password_hash, password)

    def get_id(self):
        return str(self.id)

    def __repr__(self):
        return f"<Admin {self.username}>"
