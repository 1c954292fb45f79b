from .controller import ReportingController
from .export import export_csv, to_csv_text, write_csv

__all__ = ["ReportingController", "export_csv", "to_csv_text", "write_csv"]
