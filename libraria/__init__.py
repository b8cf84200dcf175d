"""
Libraria

Library catalog management API:
- User accounts with role-based access (reader, editor, admin)
- Book catalog with soft deletes and duplicate detection
- Book reservations with availability tracking
"""

__version__ = "1.0.0"
