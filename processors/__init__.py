"""
processors/ - Row Processors
============================
Per-entity mapping between application objects and table rows.
"""

from processors.base import DataProcessor
from processors.dataclass_processor import DataclassProcessor
from processors.dict_processor import DictProcessor

__all__ = ["DataProcessor", "DataclassProcessor", "DictProcessor"]
