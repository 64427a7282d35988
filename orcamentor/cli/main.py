#!/usr/bin/env python3

import argparse
from collections.abc import Sequence
from pathlib import Path

from orcamentor.rendering import DocumentKind, WatermarkPosition


def _opacity(value: str) -> int:
    try:
        opacity = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid opacity: {value!r}") from exc
    if not 0 <= opacity <= 100:
        raise argparse.ArgumentTypeError("opacity must be between 0 and 100")
    return opacity


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="Quotes, receipts and public commitments for small service businesses",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  dashboard                  Show revenue, conversion and category figures
  quotes                     List quotes
  quote-status <id> <status> Change a quote's status
  export quote <id>          Write a quote PDF
  export receipt <id>        Write a receipt PDF
  export commitments         Write the commitments ledger PDF
  message <quote_id>         Compose a message to send with a quote
  improve <service_id>       Suggest a better service description
  serve [--host --port]      Start the local HTTP server

Data lives under $ORCAMENTOR_HOME (default ~/.orcamentor).
""",
    )
    parser.add_argument("--home", type=Path, default=None, help="Data directory (overrides ORCAMENTOR_HOME)")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("dashboard", help="Show dashboard figures")
    subparsers.add_parser("quotes", help="List quotes")

    status_parser = subparsers.add_parser("quote-status", help="Change a quote's status")
    status_parser.add_argument("quote_id", help="Quote id")
    status_parser.add_argument("status", help="rascunho, enviado, aprovado or rejeitado")
    status_parser.add_argument("--strict", action="store_true", help="Only allow forward transitions")

    # export command
    export_parser = subparsers.add_parser("export", help="Export a document as PDF")
    export_parser.add_argument("kind", choices=[kind.value for kind in DocumentKind], help="Document type")
    export_parser.add_argument("record_id", nargs="?", default=None, help="Quote or receipt id")
    export_parser.add_argument("--search", default="", help="Filter commitments by authority, number or process")
    export_parser.add_argument(
        "--watermark-position",
        choices=[position.value for position in WatermarkPosition],
        default=None,
        help="Watermark position (default from settings)",
    )
    export_parser.add_argument(
        "--watermark-opacity", type=_opacity, default=None, help="Watermark opacity 0-100 (default from settings)"
    )
    export_parser.add_argument("--output-dir", type=Path, default=None, help="Directory for the PDF")

    message_parser = subparsers.add_parser("message", help="Compose a message for a quote")
    message_parser.add_argument("quote_id", help="Quote id")

    improve_parser = subparsers.add_parser("improve", help="Suggest a better service description")
    improve_parser.add_argument("service_id", help="Service id")
    improve_parser.add_argument("--apply", action="store_true", help="Save the suggestion")

    serve_parser = subparsers.add_parser("serve", help="Start the local HTTP server")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Host to bind to (default: 127.0.0.1)")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to bind to (default: 8000)")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    from orcamentor.runtime import configure_logging, set_home

    configure_logging()
    if args.home is not None:
        set_home(args.home)

    from orcamentor.cli import commands

    handlers = {
        "dashboard": commands.cmd_dashboard,
        "quotes": commands.cmd_quotes,
        "quote-status": commands.cmd_quote_status,
        "export": commands.cmd_export,
        "message": commands.cmd_message,
        "improve": commands.cmd_improve,
        "serve": commands.cmd_serve,
    }
    handler = handlers.get(args.command)
    if handler is None:
        return 1
    return handler(args)


if __name__ == "__main__":
    raise SystemExit(main())
