from callspend.api import health, records, spending, uploads

__all__ = ["health", "records", "spending", "uploads"]
