from .bulk_export import BulkExporter, BulkExportSummary
from .daily_export import DailyExporter, daily_export_filename
from .export_anime import AnimeExporter, ExportSummary, skip_reason
from .import_anime import AnimeImporter, ImportSummary

__all__ = [
    "AnimeExporter",
    "AnimeImporter",
    "BulkExportSummary",
    "BulkExporter",
    "DailyExporter",
    "ExportSummary",
    "ImportSummary",
    "daily_export_filename",
    "skip_reason",
]
