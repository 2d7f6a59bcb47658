import re


class PasswordValidator:
    """Password complexity rules applied on registration, creation and change"""

    MIN_LENGTH = 8
    MAX_LENGTH = 128
    SPECIAL_CHARACTERS = r"[!@#$%^&*()_+\-=\[\]{};':\"\\|,.<>/?~`]"

    @classmethod
    def validate(cls, password):
        """
        Check a candidate password.

        Returns:
            tuple: (is_valid, error_message); error_message is None when valid
        """
        if not password or not isinstance(password, str):
            return False, 'Le mot de passe est requis'
        if len(password) < cls.MIN_LENGTH:
            return False, f'Le mot de passe doit contenir au moins {cls.MIN_LENGTH} caractères'
        if len(password) > cls.MAX_LENGTH:
            return False, f'Le mot de passe ne peut pas dépasser {cls.MAX_LENGTH} caractères'
        if not re.search(r'[A-Z]', password):
            return False, 'Le mot de passe doit contenir au moins une majuscule'
        if not re.search(r'[a-z]', password):
            return False, 'Le mot de passe doit contenir au moins une minuscule'
        if not re.search(r'\d', password):
            return False, 'Le mot de passe doit contenir au moins un chiffre'
        if not re.search(cls.SPECIAL_CHARACTERS, password):
            return False, 'Le mot de passe doit contenir au moins un caractère spécial'
        return True, None
