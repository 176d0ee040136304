"""
Vibe Magazine admin backend.

Engagement analytics for the magazine archive and the staff account
functions behind the admin panel.
"""

__version__ = "0.1.0"
