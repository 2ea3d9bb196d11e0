"""
pixminify: minify images with a chain of optimizer plugins.

Usage:
  pixminify <path|glob> ... --out-dir=build [--plugin=<name> ...]
  pixminify <file> > <output>
  cat <file> | pixminify > <output>
  pixminify **/*.{jpg,png} --write
"""

import argparse
import os
import sys
from typing import List, Optional

import pixmin as pixmin_module
from pixmin.dispatch import BatchOrchestrator, FailurePolicy, SinkKind, SinkMode
from pixmin.errors import ConfigurationError, InvalidSettingError, NoInputError
from pixmin.plugins import REGISTRY, resolve_plugins
from pixmin.utils import (
    DEFAULT_LOG_LEVEL,
    DEFAULT_WORKERS,
    LOG_LEVEL_SETTING,
    WORKERS_SETTING,
    LogLevel,
    logger,
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pixminify",
        description="Minify images. Reads paths or glob patterns, or a single image piped on stdin.",
        epilog="Examples:\n"
               "  pixminify images/* --out-dir=build\n"
               "  pixminify foo.png > foo-optimized.png\n"
               "  cat foo.png | pixminify > foo-optimized.png\n"
               "  pixminify --plugin=optipng foo.png > foo-optimized.png\n"
               "  pixminify '**/*.png' --write",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("inputs", nargs="*", help="Image paths or glob patterns (omit to read stdin)")
    parser.add_argument("-p", "--plugin", action="append", default=[],
                        help="Override the default plugins (repeatable, applied in order). "
                             "Options: --plugin=optipng:optimization_level=5")
    parser.add_argument("-o", "--out-dir", help="Output directory")
    parser.add_argument("-w", "--write", action="store_true", help="Edit files in-place. (Beware!)")
    parser.add_argument("-j", "--workers", type=int,
                        help=f"Images processed concurrently (default: $PIXMIN_WORKERS or {DEFAULT_WORKERS})")
    parser.add_argument("--strict", action="store_true",
                        help="Exit with status 1 if any image fails to minify")
    parser.add_argument("--verbose", action="store_true", help="Log every processed image to stderr")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--list-plugins", action="store_true", help="List registered plugins and exit")
    parser.add_argument("--version", action="version", version=f"%(prog)s {pixmin_module.__version__}")
    return parser


def _configure_logging(args) -> None:
    if args.debug:
        level = LogLevel.DEBUG
    elif args.verbose:
        level = LogLevel.INFO
    else:
        try:
            level = LogLevel.from_name(LOG_LEVEL_SETTING or DEFAULT_LOG_LEVEL)
        except ValueError:
            raise InvalidSettingError(
                "PIXMIN_LOG_LEVEL", LOG_LEVEL_SETTING, "one of TRACE, DEBUG, INFO, WARN, ERROR") from None
    logger.set_log_level(level)


def _resolve_workers(args) -> int:
    if args.workers is not None:
        if args.workers < 1:
            raise InvalidSettingError("--workers", str(args.workers), "a positive integer")
        return args.workers
    if not WORKERS_SETTING:
        return DEFAULT_WORKERS
    try:
        workers = int(WORKERS_SETTING)
    except ValueError:
        workers = 0
    if workers < 1:
        raise InvalidSettingError("PIXMIN_WORKERS", WORKERS_SETTING, "a positive integer")
    return workers


def _silence_stdout() -> None:
    """Point stdout at devnull so the interpreter's final flush cannot fail again."""
    devnull = os.open(os.devnull, os.O_WRONLY)
    os.dup2(devnull, sys.stdout.fileno())


def _read_input(args, stdin=None):
    """Return the positional inputs, or the whole piped stdin as bytes."""
    if args.inputs:
        return args.inputs
    stdin = stdin if stdin is not None else sys.stdin
    if stdin.isatty():
        raise NoInputError()
    return stdin.buffer.read()


def run(argv: Optional[List[str]] = None, stdin=None, stdout=None) -> int:
    """Run the CLI and return the process exit status."""
    args = build_parser().parse_args(argv)

    try:
        _configure_logging(args)
        if args.list_plugins:
            for name in REGISTRY.names():
                logger.safe_print(name, file=sys.stdout)
            return 0

        workers = _resolve_workers(args)
        raw = _read_input(args, stdin)
        plugins = resolve_plugins(args.plugin)
        sink = SinkMode.from_flags(args.out_dir, args.write, piped=isinstance(raw, bytes))
        orchestrator = BatchOrchestrator(
            plugins,
            sink,
            workers=workers,
            progress=sys.stderr.isatty(),
            stdout=stdout,
        )
        summary = orchestrator.run(raw)
    except ConfigurationError as e:
        logger.safe_print(str(e))
        return 1
    except BrokenPipeError:
        # The reader went away (e.g. `| head -c1`); nothing useful left to say
        if stdout is None:
            _silence_stdout()
        return 1

    for failure in summary.failures:
        plugin = f" ({failure.plugin})" if failure.plugin else ""
        logger.safe_print(f"Failed to minify {failure.item.label}{plugin}: {failure.error}")

    if sink.kind is not SinkKind.STDOUT:
        logger.safe_print(summary.message(), file=sys.stdout)

    policy = FailurePolicy.FAIL if args.strict else FailurePolicy.REPORT
    return summary.exit_code(policy)


def main():
    sys.exit(run())


if __name__ == "__main__":
    main()
