"""School Admin API - academic records, teaching staff, enrollments and SAFT-AO export."""

__version__ = "0.1.0"
