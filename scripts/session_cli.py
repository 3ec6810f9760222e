#!/usr/bin/env python3
"""Operações do ciclo de vida da sessão pela linha de comando.

Uso:
    python scripts/session_cli.py homeservers
    python scripts/session_cli.py validate https://matrix.org
    python scripts/session_cli.py select https://example.org
    python scripts/session_cli.py flows
    python scripts/session_cli.py connect --token syt_... --wait 30
    python scripts/session_cli.py logout

A identidade é persistida em arquivo JSON (--state-path) para que os
comandos compartilhem homeserver selecionado, credencial e device id.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys

from config.settings import StorageSettings, get_storage_settings
from fsm.states.status import ClientStatus
from session_core.bootstrap import initialize_app
from session_core.bootstrap.dependencies import build_session_manager
from session_core.errors import SessionLifecycleError
from session_core.sessions.manager import MatrixSessionManager


def _build_manager(state_path: str) -> MatrixSessionManager:
    base = get_storage_settings()
    storage = StorageSettings(
        backend="file",
        state_path=state_path,
        sync_namespace=base.sync_namespace,
        crypto_namespace=base.crypto_namespace,
    )
    return build_session_manager(storage_settings=storage)


async def _wait_ready(manager: MatrixSessionManager, timeout: float) -> bool:
    ready = asyncio.Event()
    if manager.status == ClientStatus.READY:
        return True
    subscription = manager.subscribe(
        lambda transition: ready.set() if transition.to_status == ClientStatus.READY else None
    )
    try:
        await asyncio.wait_for(ready.wait(), timeout=timeout)
    except TimeoutError:
        return False
    finally:
        subscription.cancel()
    return True


async def _run(args: argparse.Namespace) -> int:
    manager = _build_manager(args.state_path)

    if args.command == "homeservers":
        selected = manager.homeserver
        for homeserver in manager.homeservers:
            marker = "*" if selected is not None and selected.url == homeserver.url else " "
            print(f"{marker} {homeserver.name:<24} {homeserver.url}")
        return 0

    if args.command == "validate":
        valid = await manager.validate_homeserver(args.url)
        print("valid" if valid else "invalid")
        return 0 if valid else 1

    if args.command == "select":
        homeserver = manager.select_homeserver(args.url)
        print(json.dumps(homeserver.to_dict()))
        return 0

    if args.command == "logout":
        await manager.unset_current_homeserver()
        print("logged out")
        return 0

    report = await manager.bootstrap()
    try:
        if args.command == "flows":
            for flow in await manager.fetch_login_flows():
                print(flow.type)
            return 0

        if args.token:
            await manager.login_with_access_token(args.token)
        elif not report.resumed:
            reason = report.resume_failure.error_reason if report.resume_failure else "no access token"
            print(f"not authenticated: {reason}", file=sys.stderr)
            return 1

        if not await _wait_ready(manager, args.wait):
            print(f"status={manager.status.value} (sync not prepared yet)", file=sys.stderr)
            return 1
        verified = await manager.is_device_verified()
        print(f"ready user={manager.user_id} device={manager.device_id} verified={verified}")
        return 0
    finally:
        client = manager.client
        if client is not None:
            await client.close()


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument(
        "--state-path",
        default=".homeserver-session/state.json",
        help="Arquivo JSON da identidade persistida",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("homeservers", help="Lista homeservers conhecidos")

    validate = commands.add_parser("validate", help="Valida um homeserver")
    validate.add_argument("url")

    select = commands.add_parser("select", help="Seleciona um homeserver")
    select.add_argument("url")

    commands.add_parser("flows", help="Lista os login flows do selecionado")

    connect = commands.add_parser("connect", help="Bootstrap e espera o primeiro sync")
    connect.add_argument("--token", help="Access token obtido no login manual")
    connect.add_argument("--wait", type=float, default=30.0, help="Segundos até READY")

    commands.add_parser("logout", help="Descarta seleção e credencial")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    initialize_app()
    try:
        return asyncio.run(_run(args))
    except (SessionLifecycleError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
