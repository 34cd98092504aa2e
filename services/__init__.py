"""services package"""

__all__ = [
    "billing_calculator",
    "enrollment_validator",
    "errors",
    "record_store",
    "report_aggregator",
    "report_pdf_generator",
    "seat_occupancy",
]
