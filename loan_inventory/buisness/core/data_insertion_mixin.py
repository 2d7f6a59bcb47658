"""
Generic data insertion mixin for SQLAlchemy models
Provides dictionary (de)serialization and audit-field handling shared by
every model of the inventory.
"""

from datetime import datetime
from sqlalchemy import inspect
from loan_inventory import db
from loan_inventory.logger import get_logger

logger = get_logger("loan_inventory.buisness.core.data_insertion")

AUDIT_FIELDS = ('created_at', 'created_by_id', 'updated_at', 'updated_by_id')


class DataInsertionMixin:
    """
    Mixin that provides generic data insertion capabilities for SQLAlchemy models

    This mixin adds:
    - from_dict(): Create model instance from dictionary
    - to_dict(): Convert model instance to a JSON-ready dictionary
    - apply_dict(): Update an existing instance from a dictionary
    - create_from_dict(): Create and save model instance from dictionary
    - bulk_create_from_dicts(): Create multiple instances from list of dictionaries
    - find_or_create_from_dict(): Look up by unique fields, create when missing
    """

    # Columns never exposed by to_dict()
    __hidden_fields__ = ()

    @classmethod
    def _column_keys(cls):
        return {c.key for c in inspect(cls).columns}

    @classmethod
    def from_dict(cls, data_dict, user_id=None, skip_fields=None):
        """
        Create a model instance from a dictionary

        Args:
            data_dict (dict): Dictionary containing model data
            user_id (int, optional): User ID for audit fields
            skip_fields (list, optional): Fields to skip during creation

        Returns:
            Model instance (not saved to database)
        """
        skip_fields = set(skip_fields or [])
        columns = cls._column_keys()

        filtered_data = {}
        for key, value in data_dict.items():
            if key not in columns or key in skip_fields or key == 'id':
                continue
            if key in ('created_at', 'updated_at') and value is None:
                continue
            filtered_data[key] = value

        instance = cls(**filtered_data)

        if 'password' in data_dict and hasattr(instance, 'set_password'):
            instance.set_password(data_dict['password'])

        if user_id is not None:
            if hasattr(instance, 'created_by_id') and not instance.created_by_id:
                instance.created_by_id = user_id
            if hasattr(instance, 'updated_by_id'):
                instance.updated_by_id = user_id

        return instance

    def apply_dict(self, data_dict, user_id=None, allowed_fields=None):
        """
        Update columns of an existing instance from a dictionary.

        Args:
            data_dict (dict): New values
            user_id (int, optional): User ID stored in updated_by_id
            allowed_fields (iterable, optional): Restrict which keys may change

        Returns:
            dict: The previous values of the fields that changed
        """
        columns = self._column_keys()
        changed = {}
        for key, value in data_dict.items():
            if key not in columns or key == 'id' or key in AUDIT_FIELDS:
                continue
            if allowed_fields is not None and key not in allowed_fields:
                continue
            old_value = getattr(self, key)
            if old_value != value:
                changed[key] = old_value
                setattr(self, key, value)

        if user_id is not None and hasattr(self, 'updated_by_id'):
            self.updated_by_id = user_id

        return changed

    def to_dict(self, include_relationships=False, include_audit_fields=True):
        """
        Convert model instance to dictionary

        Args:
            include_relationships (bool | list): Include relationship data; a list
                restricts the relationships included
            include_audit_fields (bool): Whether to include audit fields

        Returns:
            dict: Dictionary representation of the model
        """
        result = {}
        mapper = inspect(self.__class__)

        for column in mapper.columns:
            if column.key in self.__hidden_fields__:
                continue
            if not include_audit_fields and column.key in AUDIT_FIELDS:
                continue

            value = getattr(self, column.key)
            if isinstance(value, datetime):
                result[column.key] = value.isoformat()
            else:
                result[column.key] = value

        if include_relationships:
            wanted = None if include_relationships is True else set(include_relationships)
            for relationship in mapper.relationships:
                if relationship.key in result:
                    continue
                if wanted is not None and relationship.key not in wanted:
                    continue
                related = getattr(self, relationship.key)
                if related is None:
                    result[relationship.key] = None
                elif relationship.uselist:
                    result[relationship.key] = [item.to_dict() for item in related]
                elif hasattr(related, 'to_dict'):
                    result[relationship.key] = related.to_dict()
                else:
                    result[relationship.key] = str(related)

        return result

    @classmethod
    def create_from_dict(cls, data_dict, user_id=None, skip_fields=None, commit=True):
        """
        Create and save a model instance from dictionary

        Args:
            data_dict (dict): Dictionary containing model data
            user_id (int, optional): User ID for audit fields
            skip_fields (list, optional): Fields to skip during creation
            commit (bool): Whether to commit the transaction

        Returns:
            Model instance (saved to database, or flushed when commit is False)
        """
        instance = cls.from_dict(data_dict, user_id, skip_fields)

        try:
            db.session.add(instance)
            if commit:
                db.session.commit()
                logger.info(f"Created {cls.__name__}: {instance}")
            else:
                db.session.flush()
            return instance
        except Exception as e:
            db.session.rollback()
            logger.error(f"Error creating {cls.__name__}: {e}")
            raise

    @classmethod
    def bulk_create_from_dicts(cls, data_list, user_id=None, skip_fields=None, commit=True):
        """
        Create multiple model instances from list of dictionaries

        Returns:
            list: List of created model instances
        """
        instances = []

        try:
            for data_dict in data_list:
                instance = cls.from_dict(data_dict, user_id, skip_fields)
                instances.append(instance)
                db.session.add(instance)

            if commit:
                db.session.commit()
                logger.info(f"Created {len(instances)} {cls.__name__} instances")
            else:
                db.session.flush()
            return instances
        except Exception as e:
            db.session.rollback()
            logger.error(f"Error bulk creating {cls.__name__}: {e}")
            raise

    @classmethod
    def find_or_create_from_dict(cls, data_dict, user_id=None, skip_fields=None,
                                 lookup_fields=None, commit=True):
        """
        Find existing instance or create new one from dictionary

        Args:
            lookup_fields (list, optional): Fields to use for lookup (default: unique fields)

        Returns:
            tuple: (instance, created) where created is boolean
        """
        if lookup_fields is None:
            mapper = inspect(cls)
            lookup_fields = [c.key for c in mapper.columns if c.unique and c.key in data_dict]

        lookup_data = {field: data_dict[field] for field in lookup_fields if field in data_dict}
        if not lookup_data:
            return cls.create_from_dict(data_dict, user_id, skip_fields, commit), True

        existing = cls.query.filter_by(**lookup_data).first()
        if existing:
            logger.debug(f"Found existing {cls.__name__}: {existing}")
            return existing, False

        return cls.create_from_dict(data_dict, user_id, skip_fields, commit), True
