"""
User Context (Core)
Provides a clean interface for managing application user accounts.

Handles:
- Registration (the very first account becomes ADMIN) and credential checks
- Admin-side creation, update and deletion of accounts
- Password changes under the password policy
"""

from typing import Optional, Union
from loan_inventory import db
from loan_inventory.buisness.core.audit_trail import AuditTrail
from loan_inventory.buisness.core.errors import (
    ConflictError, ForbiddenError, NotFoundError, UnauthorizedError, ValidationError
)
from loan_inventory.buisness.core.validation import normalize_email, require_choice
from loan_inventory.data.core.constants import AuditAction, Role
from loan_inventory.data.core.user_info.password_validator import PasswordValidator
from loan_inventory.data.core.user_info.user import User
from loan_inventory.logger import get_logger

logger = get_logger("loan_inventory.buisness.core.user_context")


class UserContext:
    """
    Core context manager for user operations.

    Provides a clean interface for:
    - Creating users (register or admin creation)
    - Authenticating users by email and password
    - Updating, deleting users and changing passwords
    """

    def __init__(self, user: Union[User, int]):
        """
        Initialize UserContext with a User instance or user ID.

        Raises:
            NotFoundError: If no user has this ID
        """
        if isinstance(user, int):
            self._user = db.session.get(User, user)
            if self._user is None:
                raise NotFoundError('Utilisateur non trouvé')
        else:
            self._user = user
        self._user_id = self._user.id

    @property
    def user(self) -> User:
        return self._user

    @property
    def user_id(self) -> int:
        return self._user_id

    def to_dict(self) -> dict:
        return self._user.to_dict()

    @staticmethod
    def _check_password_policy(password: str) -> None:
        is_valid, error_msg = PasswordValidator.validate(password)
        if not is_valid:
            raise ValidationError(error_msg, details=[{'field': 'password', 'message': error_msg}])

    @staticmethod
    def _check_email_free(email: str, exclude_id: Optional[int] = None) -> None:
        existing = User.query.filter(db.func.lower(User.email) == email).first()
        if existing and existing.id != exclude_id:
            raise ConflictError('Un utilisateur avec cet email existe déjà')

    @classmethod
    def create(
        cls,
        email: str,
        password: str,
        role: Optional[str] = None,
        created_by_id: Optional[int] = None,
        commit: bool = True
    ) -> 'UserContext':
        """
        Create a new user account.

        Args:
            email: Email address (must be unique, case-insensitive)
            password: Plain text password (hashed before storage)
            role: ADMIN, GESTIONNAIRE or LECTURE (default: GESTIONNAIRE)
            created_by_id: ID of the acting user, for the audit trail
            commit: Whether to commit the transaction (default: True)

        Raises:
            ValidationError: Invalid email, role or password
            ConflictError: Email already used
        """
        email = normalize_email(email)
        role = require_choice(role or Role.GESTIONNAIRE, Role.ALL, 'Rôle')
        cls._check_password_policy(password)
        cls._check_email_free(email)

        user = User(email=email, role=role, is_active=True)
        user.set_password(password)
        db.session.add(user)

        if commit:
            db.session.commit()
            logger.info(f"Created user: {email} (ID: {user.id}, role: {role})")
            AuditTrail.record(AuditAction.CREATE, 'users', user.id,
                              new_values=user.to_dict(), user_id=created_by_id)
        else:
            db.session.flush()

        return cls(user)

    @classmethod
    def register(cls, email: str, password: str, role: Optional[str] = None,
                 requested_by: Optional[User] = None) -> 'UserContext':
        """
        Self-registration. The first account of the installation is always ADMIN.

        Afterwards only an authenticated ADMIN may register another ADMIN.

        Raises:
            ForbiddenError: ADMIN role requested by anyone but an ADMIN
        """
        if User.query.count() == 0:
            logger.info("No user exists yet, registering first account as ADMIN")
            return cls.create(email, password, role=Role.ADMIN)

        if role == Role.ADMIN and not (requested_by is not None and requested_by.is_admin):
            raise ForbiddenError('Seul un administrateur peut créer un compte administrateur')
        return cls.create(email, password, role=role)

    @classmethod
    def authenticate(cls, email: str, password: str) -> 'UserContext':
        """
        Check credentials.

        Raises:
            UnauthorizedError: Unknown email, wrong password or inactive account,
                all reported with the same message
        """
        generic = 'Email ou mot de passe incorrect'
        if not email or not password:
            raise UnauthorizedError(generic)
        user = User.query.filter(db.func.lower(User.email) == str(email).strip().lower()).first()
        if user is None or not user.check_password(password):
            logger.warning("Failed login attempt")
            raise UnauthorizedError(generic)
        if not user.is_active:
            logger.warning(f"Login attempt on inactive account {user.id}")
            raise UnauthorizedError(generic)
        return cls(user)

    def update(
        self,
        updated_by_id: Optional[int] = None,
        commit: bool = True,
        **kwargs
    ) -> 'UserContext':
        """
        Update email, role, active flag or password.

        Raises:
            ValidationError: Invalid values
            ConflictError: Email already used by another account
        """
        old_values = self._user.to_dict()

        if 'email' in kwargs and kwargs['email'] is not None:
            email = normalize_email(kwargs['email'])
            self._check_email_free(email, exclude_id=self._user_id)
            self._user.email = email

        if 'role' in kwargs and kwargs['role'] is not None:
            self._user.role = require_choice(kwargs['role'], Role.ALL, 'Rôle')

        if 'is_active' in kwargs and kwargs['is_active'] is not None:
            if not isinstance(kwargs['is_active'], bool):
                raise ValidationError('is_active doit être un booléen')
            self._user.is_active = kwargs['is_active']

        if kwargs.get('password'):
            self._check_password_policy(kwargs['password'])
            self._user.set_password(kwargs['password'])

        if commit:
            db.session.commit()
            logger.info(f"Updated user {self._user_id}")
            AuditTrail.record(AuditAction.UPDATE, 'users', self._user_id,
                              old_values=old_values, new_values=self._user.to_dict(),
                              user_id=updated_by_id)

        return self

    def change_password(self, current_password: str, new_password: str) -> None:
        """
        Raises:
            UnauthorizedError: current_password does not match
            ValidationError: new_password violates the policy
        """
        if not current_password or not self._user.check_password(current_password):
            raise UnauthorizedError('Mot de passe actuel incorrect')
        self._check_password_policy(new_password)
        self._user.set_password(new_password)
        db.session.commit()
        logger.info(f"Password changed for user {self._user_id}")
        AuditTrail.record(AuditAction.UPDATE, 'users', self._user_id,
                          new_values={'password': 'changed'}, user_id=self._user_id)

    def delete(self, deleted_by_id: Optional[int] = None) -> None:
        """
        Raises:
            ValidationError: An account cannot delete itself
        """
        if deleted_by_id is not None and deleted_by_id == self._user_id:
            raise ValidationError('Vous ne pouvez pas supprimer votre propre compte')

        old_values = self._user.to_dict()
        db.session.delete(self._user)
        db.session.commit()
        logger.info(f"Deleted user {self._user_id}")
        AuditTrail.record(AuditAction.DELETE, 'users', self._user_id,
                          old_values=old_values, user_id=deleted_by_id)
