"""Command line entry point for inspecting interpreter resolution."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from functools import cmp_to_key
from pathlib import Path
from typing import List, Optional

from .config import load_config
from .context import ResolverContext, build_context
from .info.version import compare_versions
from .locators import WindowsRegistryLocator
from .resolver import EnvironmentResolver


async def _resolve(context: ResolverContext, paths: List[str]) -> List[dict]:
    resolver = EnvironmentResolver(context)
    return [env.to_dict() async for env in resolver.resolve_envs(paths)]


async def _identify(context: ResolverContext, paths: List[str]) -> List[dict]:
    resolver = EnvironmentResolver(context)
    return [
        {"executable": path, "kind": (await resolver.identify_environment(path)).value}
        for path in paths
    ]


async def _registry(context: ResolverContext) -> List[dict]:
    envs = [env async for env in WindowsRegistryLocator(context).iter_envs()]
    envs.sort(key=cmp_to_key(lambda a, b: compare_versions(b.version, a.version)))
    return [env.to_dict() for env in envs]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pyenvs",
        description="Identify and describe Python interpreters",
    )
    parser.add_argument(
        "--project",
        type=Path,
        default=Path.cwd(),
        help="Project root containing .pyenvs.toml (default: current directory)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    resolve_parser = subparsers.add_parser("resolve", help="Resolve interpreter paths")
    resolve_parser.add_argument("paths", nargs="+", help="Interpreter executables")

    identify_parser = subparsers.add_parser("identify", help="Print the environment kind only")
    identify_parser.add_argument("paths", nargs="+", help="Interpreter executables")

    subparsers.add_parser("registry", help="List interpreters found in the Windows registry")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    config = load_config(args.project)
    level = logging.DEBUG if args.verbose else getattr(logging, config.log_level, logging.WARNING)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s", stream=sys.stderr)

    context = build_context(config)

    if args.command == "resolve":
        result = asyncio.run(_resolve(context, args.paths))
    elif args.command == "identify":
        result = asyncio.run(_identify(context, args.paths))
    else:
        result = asyncio.run(_registry(context))

    print(json.dumps(result, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
