"""
Work Order Kernel

Core lifecycle for service-shop work orders:
- Per-customer-class invoice number allocation
- Admin-defined linear status workflow
- Invoice materialization on reaching the end status
- Numbering audit with gap/duplicate detection and counter resync
"""

__version__ = "0.1.0"
