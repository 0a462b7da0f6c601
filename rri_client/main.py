from __future__ import annotations

import argparse
import asyncio
import getpass
import logging
import sys
from collections.abc import Callable
from typing import Any, Dict, List, Optional

from rri.protocol.documents import load_query_document
from rri.protocol.errors import RRIError

from rri_client import __version__
from rri_client.config import CLIENT_CONFIG, ConfigError, load_config
from rri_client.core import connect
from rri_client.features import BatchRunner
from rri_client.storage import Environment, EnvironmentStore, EnvironmentStoreError
from rri_client.ui import RRIShell, TrafficPrinter, print_query

Prompt = Callable[[str], str]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="rri-client", description="Client application for RRI")
    parser.add_argument("address", nargs="?", default="", help="Address and port like host:1234 of the RRI host")
    parser.add_argument("-f", "--file", default="", help="Input file containing RRI requests separated by a '=-=' line")
    parser.add_argument("-v", "--verbose", action="store_true", help="Print all sent and received requests")
    parser.add_argument("-u", "--user", default="", help="RRI user to use for login")
    parser.add_argument(
        "-p", "--pass", dest="password", default="", help="RRI password to use for login. Will be asked for if only user is set"
    )
    parser.add_argument("-e", "--env", default="", help="Named environment to use or create")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def enter_environment(name: str, prompt: Prompt = input, password_prompt: Prompt = getpass.getpass) -> Environment:
    print(f"Creating environment {name!r}")
    return Environment(
        address=prompt("Address (Host:Port)> ").strip(),
        user=prompt("User> ").strip(),
        password=password_prompt("Password> "),
    )


def select_environment(store: EnvironmentStore, prompt: Prompt = input) -> Environment:
    names = store.names()
    if not names:
        return Environment()
    for index, name in enumerate(names, start=1):
        print(f"[{index}] {store.title(name)}")
    while True:
        choice = prompt("Environment (empty for none)> ").strip()
        if not choice:
            return Environment()
        if choice in names:
            return store.load(choice)
        if choice.isdigit() and 1 <= int(choice) <= len(names):
            return store.load(names[int(choice) - 1])
        print("Unknown environment")


def resolve_environment(
    args: argparse.Namespace,
    store: EnvironmentStore,
    config: Optional[Dict[str, Any]] = None,
    prompt: Prompt = input,
    password_prompt: Prompt = getpass.getpass,
) -> Environment:
    """Combine stored environment, command line flags and config into the effective environment."""
    config = CLIENT_CONFIG if config is None else config
    if args.env:
        if store.exists(args.env):
            env = store.load(args.env)
        else:
            env = enter_environment(args.env, prompt, password_prompt)
            store.save(args.env, env)
    elif not args.address and not config.get("address"):
        env = select_environment(store, prompt)
    else:
        env = Environment()

    overrides = {"address": args.address or env.address or config.get("address", "")}
    if args.user:
        overrides["user"] = args.user
    if args.password:
        overrides["password"] = args.password
    env = env.model_copy(update=overrides)

    if env.user and not env.password:
        print(f"Please enter RRI password for user {env.user!r}")
        env = env.model_copy(update={"password": password_prompt("> ")})
    return env


async def run_client(args: argparse.Namespace, env: Environment, config: Dict[str, Any]) -> int:
    if not env.address:
        raise ConfigError("missing RRI server address")

    # Parse the whole batch before anything reaches the server.
    queries = load_query_document(args.file) if args.file else None

    printer = TrafficPrinter(enabled=args.verbose or bool(config.get("verbose")))
    session = await connect(env.address, observer=printer, config=config)
    async with session:
        if env.has_credentials():
            await session.login(env.user, env.password)

        if queries is None:
            await RRIShell(session, printer).run()
            return 0

        report = await BatchRunner(session, on_query=print_query).run(queries)
        if not report.successful:
            print(f"Query failed: {report.error_message}")
            return 1
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        config = load_config()
        logging.basicConfig(level=config["log_level"])
        store = EnvironmentStore(config["env_dir"])
        env = resolve_environment(args, store, config)
        return asyncio.run(run_client(args, env, config))
    except (RRIError, ConfigError, EnvironmentStoreError, OSError) as exc:
        print(f"FATAL: {exc}")
        return 1
    except (KeyboardInterrupt, EOFError):
        print()
        return 130


if __name__ == "__main__":
    sys.exit(main())
