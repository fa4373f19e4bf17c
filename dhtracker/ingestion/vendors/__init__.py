# Vendor-specific lab parsers
# Each module should expose:
# - resolve_report_date(text) -> Optional[str]                         # ISO date string from one page's text
# - extract_points(pages, source, tracked) -> List[MeasurementPoint]   # dated, named points for one document
