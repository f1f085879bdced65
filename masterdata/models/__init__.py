"""Domain models for the masterdata schema compiler.

Grid / schema models describe the input, the processing models describe the
outcome of generate and export runs.
"""

from .config_models import GeneratorConfig, MasterDataConfig
from .excel_file import ExcelFile, FileStatus
from .grid import Cell, Sheet, Workbook
from .processing_result import ArtifactResult, ArtifactStatus, FileStat, ProcessingResult
from .schema import DataRow, EnumDefinition, EnumMember, FieldDefinition, SchemaDescription
from .sheet_process import SheetProcess

__all__ = [
    # Configuration models
    "GeneratorConfig",
    "MasterDataConfig",
    # Grid models
    "Cell",
    "Sheet",
    "Workbook",
    # Schema models
    "DataRow",
    "EnumDefinition",
    "EnumMember",
    "FieldDefinition",
    "SchemaDescription",
    # Processing models
    "ArtifactResult",
    "ArtifactStatus",
    "ExcelFile",
    "FileStat",
    "FileStatus",
    "ProcessingResult",
    "SheetProcess",
]
