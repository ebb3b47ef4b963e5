"""
SAFT module - SAFT-AO fiscal export of student payments.
"""

from school_admin.modules.saft.models import Payment, ServiceType
from school_admin.modules.saft.router import router

__all__ = ["router", "Payment", "ServiceType"]
