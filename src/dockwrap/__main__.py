"""Entry point for `python -m dockwrap` / `dockwrap`.

Subcommands:
    dockwrap build IMAGE [CONTEXT] [-- ARGS...]
    dockwrap run [-v VOL] [-e KEY=VAL] IMAGE [-- COMMAND...]
    dockwrap push IMAGE / dockwrap pull IMAGE
    dockwrap tag IMAGE NEW_TAG
    dockwrap image-id IMAGE
    dockwrap ping
"""

from __future__ import annotations

import argparse
import asyncio
import sys

from dockwrap.client import DockerClient, new_client
from dockwrap.config import get_settings
from dockwrap.errors import DockerError
from dockwrap.logger import configure_logging, logger
from dockwrap.types import CommandResult


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="dockwrap", description=__doc__.splitlines()[0])
    parser.add_argument("--show-output", action="store_true", help="echo output lines live")
    parser.add_argument("--registry", help="registry host for push/pull")
    sub = parser.add_subparsers(dest="op", required=True)

    p = sub.add_parser("build", help="build an image")
    p.add_argument("image")
    p.add_argument("context", nargs="?", default=".")
    p.add_argument("extra", nargs=argparse.REMAINDER, help="extra docker build args")

    p = sub.add_parser("run", help="run a container")
    p.add_argument("image")
    p.add_argument("-v", "--volume", action="append", default=[], dest="volumes")
    p.add_argument("-e", "--env", action="append", default=[], dest="env_vars")
    p.add_argument("command", nargs=argparse.REMAINDER, help="command to run in the container")

    for name in ("push", "pull", "image-id"):
        p = sub.add_parser(name)
        p.add_argument("image")

    p = sub.add_parser("tag", help="tag an image by its resolved ID")
    p.add_argument("image")
    p.add_argument("new_tag")

    sub.add_parser("ping", help="check daemon connectivity")
    return parser


def _strip_separator(extra: list[str]) -> list[str]:
    return extra[1:] if extra[:1] == ["--"] else extra


async def _dispatch(client: DockerClient, ns: argparse.Namespace) -> int:
    result: CommandResult
    if ns.op == "ping":
        connected = await client.is_connected()
        print("connected" if connected else "not connected")
        return 0 if connected else 1
    if ns.op == "image-id":
        print(await client.get_image_id(ns.image))
        return 0
    if ns.op == "build":
        result = await client.build(ns.image, ns.context, *_strip_separator(ns.extra))
    elif ns.op == "run":
        result = await client.run(
            ns.image, _strip_separator(ns.command), ns.volumes, ns.env_vars
        )
    elif ns.op == "push":
        result = await client.push(ns.image)
    elif ns.op == "pull":
        result = await client.pull(ns.image)
    else:
        result = await client.tag(ns.image, ns.new_tag)

    if not client.show_output and result.output:
        print(result.output)
    if result.error is not None:
        logger.error("Command failed", command=result.command, error=str(result.error))
        return 1
    return 0


def main(argv: list[str] | None = None) -> int:
    ns = _parser().parse_args(argv)
    settings = get_settings()
    configure_logging(settings.logging.level)
    try:
        client = new_client(settings)
        if ns.show_output:
            client.show_output = True
        if ns.registry:
            client.registry_host = ns.registry
        return asyncio.run(_dispatch(client, ns))
    except DockerError as exc:
        logger.error(str(exc))
        return 1


if __name__ == "__main__":
    sys.exit(main())
