"""Command handlers used by the unified CLI."""

import argparse

from orcamentor.domain.formatting import format_date, format_money
from orcamentor.domain.status import QuoteStatus
from orcamentor.rendering import DocumentKind
from orcamentor.runtime import AppStore, RecordNotFound, get_logger, get_paths, load_settings, open_store

logger = get_logger(__name__)


def _open_store() -> AppStore:
    paths = get_paths()
    return open_store(load_settings(paths.settings), paths)


def cmd_dashboard(args: argparse.Namespace) -> int:
    """Print the dashboard figures."""
    from orcamentor.application import dashboard

    metrics = dashboard.run_dashboard(_open_store())
    print(f"Faturamento realizado:  {format_money(metrics.realized_revenue)}")
    print(f"Faturamento projetado:  {format_money(metrics.projected_revenue)}")
    ratio = f"{metrics.approved_quote_count}/{metrics.quote_count}"
    print(f"Conversão:              {metrics.conversion_percent}% ({ratio})")
    print(f"Estoque baixo:          {metrics.low_stock_count} produto(s)")
    if metrics.category_breakdown:
        print("\nCategorias mais vendidas:")
        for stat in metrics.category_breakdown:
            print(f"  {stat.name:<20} {format_money(stat.total_value):>16}  ({stat.item_count} itens)")
    if metrics.recent_receipts:
        print("\nRecibos recentes:")
        for receipt in metrics.recent_receipts:
            print(f"  #{receipt.id}  {format_date(receipt.date)}  {format_money(receipt.amount)}")
    return 0


def cmd_quotes(args: argparse.Namespace) -> int:
    """List quotes, newest first."""
    store = _open_store()
    if not store.quotes:
        print("Nenhum orçamento cadastrado.")
        return 0
    print("-" * 80)
    for quote in store.quotes:
        client = store.find_client(quote.client_id)
        client_name = client.name if client else "(cliente removido)"
        print(
            f"#{quote.id:<10} {format_date(quote.date):<11} {quote.status.label:<10} "
            f"{client_name:<28} {format_money(quote.total):>16}"
        )
    print("-" * 80)
    return 0


def cmd_quote_status(args: argparse.Namespace) -> int:
    """Move a quote to another status."""
    store = _open_store()
    try:
        quote = store.set_quote_status(args.quote_id, args.status, strict=args.strict)
    except RecordNotFound as exc:
        print(f"Error: {exc}")
        return 1
    except ValueError as exc:
        print(f"Error: {exc}")
        print(f"Valid statuses: {', '.join(status.value for status in QuoteStatus)}")
        return 1
    print(f"Orçamento #{quote.id}: {quote.status.label}")
    for warning in store.persist_warnings:
        print(f"Warning: {warning}")
    return 0


def cmd_export(args: argparse.Namespace) -> int:
    """Render a document to the exports directory."""
    from orcamentor.application import exports

    kind = DocumentKind(args.kind)
    if kind is not DocumentKind.COMMITMENTS and not args.record_id:
        print(f"Error: export {kind.value} requires an id")
        return 1

    result = exports.run_document_export(
        exports.ExportRequest(
            store=_open_store(),
            kind=kind,
            record_id=args.record_id,
            search=args.search or "",
            watermark_position=args.watermark_position,
            watermark_opacity=args.watermark_opacity,
            output_dir=args.output_dir,
        )
    )
    if result.status != "exported":
        logger.error("%s", result.error)
        print(f"Error: {result.error}")
        return 1
    print(f"Saved: {result.path} ({result.size_bytes} bytes)")
    return 0


def cmd_message(args: argparse.Namespace) -> int:
    """Print a ready-to-send message for a quote."""
    from orcamentor.application import assistant
    from orcamentor.runtime.text_service import create_text_assistant

    store = _open_store()
    result = assistant.run_quote_message(store, args.quote_id, create_text_assistant(store.settings))
    if result.status == "not_found":
        print(f"Error: {result.error}")
        return 1
    print(result.message)
    return 0


def cmd_improve(args: argparse.Namespace) -> int:
    """Suggest a better description for a service."""
    from orcamentor.application import assistant
    from orcamentor.runtime.text_service import create_text_assistant

    store = _open_store()
    result = assistant.run_improve_description(
        store, args.service_id, create_text_assistant(store.settings), apply=args.apply
    )
    if result.status == "not_found":
        print(f"Error: {result.error}")
        return 1
    if result.status == "unchanged":
        print("Nenhuma sugestão disponível; descrição mantida.")
        return 0
    print(result.suggestion)
    if result.status == "applied":
        print("\nDescrição atualizada.")
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    """Start the local HTTP server."""
    from orcamentor.runtime.server import serve

    print(f"Starting server on http://{args.host}:{args.port}")
    print("Press Ctrl+C to stop")
    serve(_open_store(), host=args.host, port=args.port)
    return 0
