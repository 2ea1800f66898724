"""
repositories/ - Data Access Layer
==================================
Models that serve create/read/update/delete/list for an entity, either
through stored procedures or through SQL generated from table metadata.
Models receive raw rows from the database and return domain objects via
a row processor.
"""

from repositories.api_model import ApiModel, Operation
from repositories.options import ListOptions
from repositories.procedure import Procedure
from repositories.table_model import TableModel

__all__ = ["ApiModel", "ListOptions", "Operation", "Procedure", "TableModel"]
