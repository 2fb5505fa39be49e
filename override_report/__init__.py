from .report import OverrideReport, build_report, format_report_text, get_override_report, report_to_json

__all__ = ["OverrideReport", "build_report", "format_report_text", "get_override_report", "report_to_json"]
