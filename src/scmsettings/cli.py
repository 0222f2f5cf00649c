"""SCM hosting settings CLI: get, show, parse and serve.

Usage:
    scmsettings get ArmRetryAfterSeconds       # Effective raw value of a key
    scmsettings show                           # Every known setting and its source
    scmsettings show --json
    scmsettings parse ScmHostingConfigurations.txt
    scmsettings serve                          # Start the HTTP diagnostics server
    scmsettings serve --config provider.yaml
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from .config import ProviderConfig
from .parsing import iter_pairs, parse
from .provider import HostingConfigurations
from .settings import KNOWN_SETTINGS


def _load_config(args: argparse.Namespace) -> Optional[ProviderConfig]:
    """Load provider config, printing validation errors."""
    config_path = getattr(args, "config", None)
    if config_path:
        config = ProviderConfig.from_file(config_path)
    else:
        config = ProviderConfig.from_env()

    configs_file = getattr(args, "file", None)
    if configs_file:
        config.configs_file = configs_file

    errors = config.validate()
    if errors:
        for error in errors:
            print(f"❌ {error}", file=sys.stderr)
        return None
    return config


def _build_provider(config: ProviderConfig) -> HostingConfigurations:
    # Short-lived process: deliver events inline so nothing is lost on exit
    config.queue_events = False
    return HostingConfigurations.from_config(config)


def cmd_get(args: argparse.Namespace) -> int:
    """Print the effective value of a single key."""
    config = _load_config(args)
    if config is None:
        return 2
    provider = _build_provider(config)

    try:
        resolution = provider.resolve(args.key, args.default)
    except ValueError as e:
        print(f"❌ {e}", file=sys.stderr)
        return 2
    if resolution.value is None:
        print(f"{args.key} is not set", file=sys.stderr)
        return 1

    if args.verbose:
        print(f"{resolution.key}={resolution.value} ({resolution.source.value})")
    else:
        print(resolution.value)
    return 0


def cmd_show(args: argparse.Namespace) -> int:
    """Print every known setting with its typed value and source."""
    config = _load_config(args)
    if config is None:
        return 2
    provider = _build_provider(config)

    rows = []
    for setting, resolution in zip(KNOWN_SETTINGS, provider.effective_settings()):
        rows.append({
            "key": setting.key,
            "value": setting.convert(resolution.value),
            "raw_value": resolution.value,
            "source": resolution.source.value,
        })

    if args.json:
        print(json.dumps({"configs_file": provider.configs_file, "settings": rows}, indent=2))
        return 0

    print(f"Configs file: {provider.configs_file}")
    width = max(len(row["key"]) for row in rows)
    for row in rows:
        print(f"  {row['key']:<{width}}  {row['value']!s:<6} ({row['source']})")
    return 0


def cmd_parse(args: argparse.Namespace) -> int:
    """Show the pairs a hosting configurations file yields."""
    path = Path(args.path).expanduser()
    if not path.is_file():
        print(f"❌ File not found: {path}", file=sys.stderr)
        return 1

    text = path.read_text(encoding="utf-8-sig")
    pairs = list(iter_pairs(text))
    snapshot = parse(text)

    for key, value in snapshot.items():
        print(f"{key}={value}")

    overridden = len(pairs) - len(snapshot)
    if overridden:
        print(f"⚠️  {overridden} duplicate key(s) overridden by later entries", file=sys.stderr)
    return 0


def cmd_serve(args: argparse.Namespace) -> None:
    """Start the HTTP server."""
    from .server.app import run_server

    config = _load_config(args)
    if config is None:
        sys.exit(2)

    run_server(
        config=config,
        host=args.host,
        port=args.port,
        log_level=args.log_level or "info",
    )


def _add_common_arguments(parser: argparse.ArgumentParser, default) -> None:
    parser.add_argument("--config", "-c", type=str, default=default,
                        help="Provider YAML config (default: $SCM_SETTINGS_CONFIG)")
    parser.add_argument("--file", "-f", type=str, default=default,
                        help="Hosting configurations file to read")


def main(argv: Optional[list[str]] = None) -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="scmsettings",
        description="SCM hosting settings: inspect effective configuration",
    )
    _add_common_arguments(parser, default=None)
    # Subcommands accept the same options after their name
    common = argparse.ArgumentParser(add_help=False)
    _add_common_arguments(common, default=argparse.SUPPRESS)
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # get
    get_parser = subparsers.add_parser(
        "get", parents=[common], help="Print the effective value of a key")
    get_parser.add_argument("key", type=str)
    get_parser.add_argument("--default", "-d", type=str, default=None,
                            help="Value to print when no source supplies the key")
    get_parser.add_argument("--verbose", "-v", action="store_true",
                            help="Also print where the value came from")

    # show
    show_parser = subparsers.add_parser(
        "show", parents=[common], help="Show every known setting")
    show_parser.add_argument("--json", action="store_true", help="Output JSON")

    # parse
    parse_parser = subparsers.add_parser("parse", help="Show the pairs a file yields")
    parse_parser.add_argument("path", type=str)

    # serve
    serve_parser = subparsers.add_parser(
        "serve", parents=[common], help="Start the HTTP server")
    serve_parser.add_argument("--host", type=str, default=None)
    serve_parser.add_argument("--port", "-p", type=int, default=None)
    serve_parser.add_argument("--log-level", type=str, default=None,
                              choices=["debug", "info", "warning", "error"])

    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.WARNING)

    if args.command == "get":
        sys.exit(cmd_get(args))
    elif args.command == "show":
        sys.exit(cmd_show(args))
    elif args.command == "parse":
        sys.exit(cmd_parse(args))
    elif args.command == "serve":
        cmd_serve(args)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
