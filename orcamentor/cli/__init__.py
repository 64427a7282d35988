"""Unified command-line interface for orcamentor.

Usage:
    orcamentor dashboard
    orcamentor quotes
    orcamentor quote-status <id> <status> [--strict]
    orcamentor export quote <id> [--watermark-position POS] [--watermark-opacity N]
    orcamentor export receipt <id>
    orcamentor export commitments [--search TERM]
    orcamentor message <quote_id>
    orcamentor improve <service_id> [--apply]
    orcamentor serve [--host] [--port]
"""
