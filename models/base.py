# models/base.py
import uuid

from sqlalchemy.orm import DeclarativeBase, declared_attr


def new_id() -> str:
     """Primary keys are opaque string ids (uuid4 hex)."""
     return uuid.uuid4().hex


class Base(DeclarativeBase):
     """
     Base class for all SQLAlchemy models.
     Provides common configuration and mixins.
     """

     @declared_attr.directive
     def __tablename__(cls) -> str:
          """
          Automatically generate table name from class name.
          Example: Purchase -> purchases
          """
          import re
          name = re.sub(r'(?<!^)(?=[A-Z])', '_', cls.__name__).lower()
          # Pluralize (simple version)
          if name.endswith('y'):
               return name[:-1] + 'ies'
          elif name.endswith('s'):
               return name + 'es'
          return name + 's'
