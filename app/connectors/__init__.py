"""
app/connectors package marker.
"""

from app.connectors.base import MailSearchClient, MailSearchError
from app.connectors.gmail_cli import GmailCLIClient

__all__ = [
    "GmailCLIClient",
    "MailSearchClient",
    "MailSearchError",
]
