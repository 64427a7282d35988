"""Quotes, receipts and public commitments for small service businesses."""
