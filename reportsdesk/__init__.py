"""
ReportsDesk - client for the governorate security-reporting backend.

Reports, incidents, inter-agency coordination requests and memo/release
documents, through one authenticated API client that refreshes an expired
session once before sending the user back to login.

Usage:
    reportsdesk login                 # Store a session
    reportsdesk reports list          # List reports
    reportsdesk events critical       # Critical incidents
"""

__version__ = "1.0.0"
