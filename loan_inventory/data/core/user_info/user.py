from werkzeug.security import generate_password_hash, check_password_hash
from flask_login import UserMixin
from loan_inventory import db, login_manager
from loan_inventory.buisness.core.data_insertion_mixin import DataInsertionMixin
from loan_inventory.data.core.constants import Role
from loan_inventory.data.core.user_created_base import utcnow


class User(UserMixin, DataInsertionMixin, db.Model):
    __tablename__ = 'users'
    __hidden_fields__ = ('password_hash',)

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(db.String(20), nullable=False, default=Role.GESTIONNAIRE)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        return check_password_hash(self.password_hash, password)

    @property
    def is_admin(self):
        return self.role == Role.ADMIN

    def has_role(self, *roles):
        return self.role in roles

    def __repr__(self):
        return f'<User {self.email}>'


@login_manager.user_loader
def load_user(user_id):
    user = db.session.get(User, int(user_id))
    if user is None or not user.is_active:
        return None
    return user
