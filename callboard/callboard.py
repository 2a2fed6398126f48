#!/usr/bin/env python3
"""
Callboard - voice agent call analytics dashboard.

Shows the call duration and sad path charts and edits them through the
email-gated save workflow.

Usage:
    python -m callboard.callboard --show
    python -m callboard.callboard --set-duration "1 Mar 2024=250" --email you@example.com
    python -m callboard.callboard --set-outcome "Customer Hostility=20" --overwrite
    python -m callboard.callboard --serve
"""

import argparse
import asyncio
import logging
import sys
from typing import Callable, List, Optional, Tuple

import aiosqlite

from callboard.charts.remote import HttpRemoteStore, RemoteStore, SqliteRemoteStore
from callboard.charts.store import ChartStore, IdentityPersistence
from callboard.charts.workflow import SaveWorkflow, WorkflowState
from callboard.config.loader import load_config, get_api_url, get_database_path, get_state_path
from callboard.models.entities import ChartField
from callboard.models.schema import drop_all_tables, ensure_database, get_connection
from callboard.output.formatter import (
    format_duration_table,
    format_outcome_table,
    print_section,
)

logger = logging.getLogger("callboard")


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all CLI flags."""
    parser = argparse.ArgumentParser(
        prog='callboard',
        description='Voice agent call analytics dashboard'
    )

    parser.add_argument('--show', action='store_true',
                       help='Show both charts (default when nothing is edited)')

    # Editing
    edits = parser.add_argument_group('editing')
    edits.add_argument('--set-duration', metavar='DAY=SECONDS', action='append', default=[],
                      help='Set average duration for a month, e.g. "1 Mar 2024=250"')
    edits.add_argument('--set-outcome', metavar='NAME=PERCENT', action='append', default=[],
                      help='Set share for an outcome, e.g. "Customer Hostility=20"')
    edits.add_argument('--reset', action='store_true',
                      help='Start edits from the last saved data')

    # Identity
    identity = parser.add_argument_group('identity')
    identity.add_argument('--email', metavar='EMAIL',
                         help='Email to save under when none is remembered')
    identity.add_argument('--forget-email', action='store_true',
                         help='Forget the remembered email')
    identity.add_argument('--overwrite', action='store_true',
                         help='Replace chart data already saved for the email')

    # Remote store
    parser.add_argument('--api-url', metavar='URL',
                       help='Use a running callboard server instead of the local database')
    parser.add_argument('--rebuild', action='store_true',
                       help='Drop and recreate the local database before running')

    # Output options
    parser.add_argument('--no-color', action='store_true',
                       help='Disable colors')
    parser.add_argument('--verbose', '-v', action='store_true',
                       help='Verbose output')

    # Web dashboard
    parser.add_argument('--serve', action='store_true',
                       help='Start the dashboard API server')
    parser.add_argument('--port', type=int, default=None,
                       help='Port for the API server (default: 8080)')
    parser.add_argument('--host', default=None,
                       help='Host for the API server (default: 127.0.0.1)')

    return parser


def parse_assignment(text: str) -> Tuple[str, str]:
    """Split 'KEY=VALUE' on the last '='; raises ValueError when malformed."""
    key, sep, value = text.rpartition('=')
    if not sep or not key.strip():
        raise ValueError(f"Expected KEY=VALUE, got '{text}'")
    return key.strip(), value.strip()


async def open_remote(config: dict) -> Tuple[RemoteStore, Callable]:
    """Open the configured remote store; returns it with an async close callable."""
    api_url = get_api_url(config)
    if api_url:
        remote = HttpRemoteStore.from_url(api_url, timeout=config.get("request_timeout", 10.0))
        return remote, remote.aclose

    db_path = get_database_path(config)
    sync_conn = get_connection(db_path)
    ensure_database(sync_conn)
    sync_conn.close()

    db = await aiosqlite.connect(str(db_path))
    return SqliteRemoteStore(db), db.close


def rebuild_database(config: dict) -> None:
    """Drop all saved chart data in the local database and recreate the schema."""
    db_path = get_database_path(config)
    conn = get_connection(db_path)
    try:
        drop_all_tables(conn)
        ensure_database(conn)
    finally:
        conn.close()
    logger.info("Rebuilt database at %s", db_path)


async def edit_and_save(
    store: ChartStore,
    remote: RemoteStore,
    chart: ChartField,
    assignments: List[str],
    args,
) -> int:
    """Apply edits to a draft of ``chart`` and run it through the save workflow."""
    workflow = SaveWorkflow(store, remote, chart)
    workflow.open_editor()
    if args.reset:
        workflow.reset_draft()

    for text in assignments:
        try:
            key, raw = parse_assignment(text)
        except ValueError as e:
            print(f"Error: {e}")
            workflow.close_editor()
            return 1
        if not workflow.update_raw(key, raw):
            print(f"Error: Unknown {chart.key_attr} '{key}'")
            workflow.close_editor()
            return 1

    state = await workflow.save()

    if state is WorkflowState.AWAITING_IDENTITY and workflow.error is None:
        if not args.email:
            print("An email is required to save. Pass --email EMAIL.")
            workflow.close_editor()
            return 1
        state = await workflow.submit_identity(args.email)

    if state is WorkflowState.AWAITING_CONFIRMATION:
        if not args.overwrite:
            print(f"Chart data is already saved for {workflow.identity_input}. "
                  "Re-run with --overwrite to replace it.")
            workflow.cancel()
            workflow.close_editor()
            return 1
        state = await workflow.confirm_overwrite()

    if workflow.error is not None:
        print(f"Error: {workflow.error_message}")
        workflow.close_editor()
        return 1

    print(f"Saved {chart.value.replace('_', ' ')} data for {store.identity}.")
    return 0


async def run_charts(config: dict, args) -> int:
    """Load, optionally edit, and display the charts."""
    if args.rebuild:
        if get_api_url(config):
            print("Error: --rebuild only applies to the local database")
            return 1
        rebuild_database(config)
        print(f"Rebuilt {get_database_path(config)}")

    store = ChartStore(IdentityPersistence(get_state_path(config)))
    if args.forget_email:
        store.set_identity(None)
        print("Forgot remembered email.")

    remote, close = await open_remote(config)
    status = 0
    try:
        if store.identity:
            loaded = await store.load_user_data(remote)
            logger.debug("Remote data for %s loaded: %s", store.identity, loaded)

        edited = False
        for chart, assignments in (
            (ChartField.CALL_DURATION, args.set_duration),
            (ChartField.SAD_PATH, args.set_outcome),
        ):
            if assignments:
                edited = True
                status = max(status, await edit_and_save(store, remote, chart, assignments, args))
    finally:
        await close()

    if args.show or not edited:
        color_enabled = not args.no_color
        print(print_section("Call Duration Analysis", color_enabled))
        print(format_duration_table(store.call_duration, color_enabled))
        print(print_section("Sad Path Analysis", color_enabled))
        print(format_outcome_table(store.call_outcomes, color_enabled))
        if store.identity:
            print(f"\nShowing data for {store.identity}")

    return status


def _run_serve(config: dict, args) -> None:
    """Start the dashboard API server."""
    import uvicorn

    from callboard.server.app import create_app

    host = args.host or config["server"]["host"]
    port = args.port or config["server"]["port"]
    app = create_app(config=config)

    print(f"Starting callboard API at http://{host}:{port}")
    uvicorn.run(app, host=host, port=port, log_level="info")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
    )

    config = load_config()
    if args.api_url:
        config["api_url"] = args.api_url

    if args.serve:
        _run_serve(config, args)
        return 0

    return asyncio.run(run_charts(config, args))


if __name__ == '__main__':
    sys.exit(main())
