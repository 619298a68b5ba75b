"""
Object storage manager command line.

Usage:
    objectstore objects list [PREFIX]
    objectstore objects get KEY -o json
    objectstore objects put KEY FILE
    objectstore objects watch [PREFIX] --interval 10
    objectstore --config storage.env objects delete KEY
    objectstore config get [PROP]
"""

import argparse
import asyncio
import base64
import sys
import time
from collections.abc import Awaitable, Callable
from datetime import timedelta
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from objectstore import __version__
from objectstore.core.config import Settings
from objectstore.core.exceptions import InvalidArgumentError, ObjectStorageError
from objectstore.core.logging import OperationLogger, configure_logging, get_logger
from objectstore.output import OUTPUT_FORMATS, write_json, write_output
from objectstore.storage.base import StorageBackend
from objectstore.storage.diff import ObjectSliceDiff
from objectstore.storage.factory import get_storage_backend
from objectstore.storage.objects import Object
from objectstore.storage.watch import watch_objects

Handler = Callable[[argparse.Namespace, Settings], int]


def object_to_dict(obj: Object, include_data: bool = False) -> dict[str, Any]:
    """Render an Object for command output."""
    result: dict[str, Any] = {
        "path": obj.path,
        "last_modified": obj.last_modified.isoformat(),
    }
    if include_data:
        result["size"] = len(obj.data)
        try:
            result["data"] = obj.data.decode("utf-8")
        except UnicodeDecodeError:
            result["data"] = base64.b64encode(obj.data).decode("ascii")
            result["encoding"] = "base64"
    return result


def load_settings(args: argparse.Namespace) -> Settings:
    """Build settings from the environment, the --config file and flags."""
    overrides: dict[str, Any] = {}
    if args.log_json:
        overrides["log_format"] = "json"
    if args.log_level:
        overrides["log_level"] = args.log_level

    try:
        if args.config:
            return Settings(_env_file=args.config, config_file=args.config, **overrides)
        return Settings(**overrides)
    except ValidationError as e:
        raise InvalidArgumentError(
            message="Invalid configuration",
            details={"errors": e.errors(include_url=False)},
        ) from e


def run_operation(
    settings: Settings,
    operation: str,
    func: Callable[[StorageBackend], Awaitable[Any]],
) -> Any:
    """Run one backend operation and log its outcome."""
    backend = get_storage_backend(settings)
    op_logger = OperationLogger(backend.backend_name)
    started = time.perf_counter()

    try:
        result = asyncio.run(func(backend))
    except ObjectStorageError as e:
        op_logger.log_operation_failed(operation, e.error_code, e.message)
        raise

    op_logger.log_operation_completed(operation, (time.perf_counter() - started) * 1000)
    return result


# =============================================================================
# objects
# =============================================================================


def list_objects_command(args: argparse.Namespace, settings: Settings) -> int:
    objects = run_operation(settings, "list", lambda b: b.list_objects(args.prefix))
    write_output(sys.stdout, [object_to_dict(o) for o in objects], args.output)
    return 0


def get_object_command(args: argparse.Namespace, settings: Settings) -> int:
    obj = run_operation(settings, "get", lambda b: b.get_object(args.key))
    write_output(sys.stdout, object_to_dict(obj, include_data=True), args.output)
    return 0


def put_object_command(args: argparse.Namespace, settings: Settings) -> int:
    if args.file:
        try:
            data = Path(args.file).read_bytes()
        except OSError as e:
            raise InvalidArgumentError(
                message=f"Unable to read {args.file}: {e}",
                details={"file": args.file},
            ) from e
    else:
        data = sys.stdin.buffer.read()

    run_operation(settings, "put", lambda b: b.put_object(args.key, data))
    return 0


def delete_object_command(args: argparse.Namespace, settings: Settings) -> int:
    run_operation(settings, "delete", lambda b: b.delete_object(args.key))
    return 0


def diff_to_dict(diff: ObjectSliceDiff) -> dict[str, list[str]]:
    return {
        "added": [o.path for o in diff.added],
        "removed": [o.path for o in diff.removed],
        "updated": [o.path for o in diff.updated],
    }


async def _watch(backend: StorageBackend, args: argparse.Namespace, settings: Settings) -> None:
    tolerance = timedelta(seconds=settings.diff_timestamp_tolerance_seconds)
    polls = 0
    async for diff in watch_objects(backend, args.prefix, tolerance, args.interval):
        if diff.change:
            write_output(sys.stdout, diff_to_dict(diff), args.output)
            sys.stdout.flush()
        polls += 1
        if args.count and polls >= args.count:
            return


def watch_objects_command(args: argparse.Namespace, settings: Settings) -> int:
    if args.interval < 0:
        raise InvalidArgumentError(
            message="Interval must not be negative",
            details={"interval": args.interval},
        )
    try:
        run_operation(settings, "watch", lambda b: _watch(b, args, settings))
    except KeyboardInterrupt:
        pass
    return 0


def sync_objects_command(args: argparse.Namespace, settings: Settings) -> int:
    get_logger("objectstore.cli").warning(
        "not_implemented",
        command="sync",
        source=args.source,
        destination=args.destination,
        recursive=args.recursive,
        exclude=args.exclude,
        include=args.include,
    )
    return 0


# =============================================================================
# config
# =============================================================================


def config_get_command(args: argparse.Namespace, settings: Settings) -> int:
    values = settings.public_dump()
    if args.prop is None:
        write_output(sys.stdout, values, args.output)
        return 0

    name = args.prop.replace(".", "_").lower()
    if name not in values:
        raise InvalidArgumentError(
            message=f"Unknown config property: {args.prop}",
            details={"property": args.prop},
        )
    write_output(sys.stdout, values[name], args.output)
    return 0


# =============================================================================
# Parser
# =============================================================================


def add_output_format_flag(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-o",
        "--output",
        choices=OUTPUT_FORMATS,
        default="yaml",
        help="Output format (yaml/json)",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="objectstore",
        description="File-system and cloud storage compatible object manager",
    )
    parser.add_argument("--version", action="version", version=__version__)
    parser.add_argument("--config", help="Env file with storage settings")
    parser.add_argument(
        "--log-json", action="store_true", help="Enable JSON formatted logs"
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    objects = commands.add_parser("objects", help="Find, add and remove storage objects")
    object_commands = objects.add_subparsers(dest="object_command", required=True)

    list_cmd = object_commands.add_parser("list", help="List storage objects")
    list_cmd.add_argument("prefix", nargs="?", default="", help="Prefix to list")
    add_output_format_flag(list_cmd)
    list_cmd.set_defaults(handler=list_objects_command)

    get_cmd = object_commands.add_parser("get", help="Get storage object")
    get_cmd.add_argument("key", help="Object path")
    add_output_format_flag(get_cmd)
    get_cmd.set_defaults(handler=get_object_command)

    put_cmd = object_commands.add_parser("put", help="Put storage object")
    put_cmd.add_argument("key", help="Object path")
    put_cmd.add_argument("file", nargs="?", help="File to upload (stdin if omitted)")
    put_cmd.set_defaults(handler=put_object_command)

    delete_cmd = object_commands.add_parser("delete", help="Remove storage object")
    delete_cmd.add_argument("key", help="Object path")
    delete_cmd.set_defaults(handler=delete_object_command)

    watch_cmd = object_commands.add_parser(
        "watch", help="Print added, removed and updated objects as they change"
    )
    watch_cmd.add_argument("prefix", nargs="?", default="", help="Prefix to watch")
    watch_cmd.add_argument(
        "--interval", type=float, default=5.0, help="Seconds between listings"
    )
    watch_cmd.add_argument(
        "--count", type=int, default=0, help="Stop after this many polls (0 = forever)"
    )
    add_output_format_flag(watch_cmd)
    watch_cmd.set_defaults(handler=watch_objects_command)

    sync_cmd = object_commands.add_parser("sync", help="Sync storage objects")
    sync_cmd.add_argument("source", help="Source path")
    sync_cmd.add_argument("destination", help="Destination path")
    sync_cmd.add_argument(
        "-r",
        "--recursive",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Recursively sync all files",
    )
    sync_cmd.add_argument("--exclude", action="append", default=[], help="Exclude path")
    sync_cmd.add_argument("--include", action="append", default=[], help="Include only path")
    sync_cmd.set_defaults(handler=sync_objects_command)

    config = commands.add_parser("config", help="Show configuration")
    config_commands = config.add_subparsers(dest="config_command", required=True)
    config_get = config_commands.add_parser("get", help="Get value of config property")
    config_get.add_argument("prop", nargs="?", help="Property name (e.g. s3_region)")
    add_output_format_flag(config_get)
    config_get.set_defaults(handler=config_get_command)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = load_settings(args)
        configure_logging(settings)
        handler: Handler = args.handler
        return handler(args, settings)
    except ObjectStorageError as e:
        write_json(sys.stderr, e.to_dict())
        return e.exit_code


if __name__ == "__main__":
    sys.exit(main())
