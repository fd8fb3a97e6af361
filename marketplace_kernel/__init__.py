"""
Marketplace Kernel

A serialized, transactional construction-project marketplace with:
- Escrowed bids pooled into one balance
- Accept-once ownership transfer
- Per-day milestone tracking
- Emergency stop and owner-only withdrawal
- Full auditability via a hash-chained notification log
"""

__version__ = "0.1.0"
