"""Command-line interface for the ESG aggregation pipeline.

Provides subcommands: `analyze`, `validate` and `flatten`. Each command is
implemented as a `cmd_*` function that accepts an argparse namespace and
returns the process exit status.
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Sequence

from esg_pipeline.aggregate.frames import result_to_frame, stats_to_frame
from esg_pipeline.config import get_settings
from esg_pipeline.errors import EsgPipelineError, ParseError, UnsupportedInputShapeError
from esg_pipeline.logging_config import configure_logging
from esg_pipeline.pipeline import AnalysisRun, analyze_fund

log = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ASSETS_SKIPPED = 1
EXIT_BAD_INPUT = 2


# --------------------------------------------------
# Helpers
# --------------------------------------------------
def _read_input(path: str) -> str:
    """Read the input document from a file, or stdin when `path` is "-"."""
    if path == "-":
        return sys.stdin.read()
    return Path(path).read_text(encoding="utf-8")


def _run(args: argparse.Namespace) -> AnalysisRun:
    return analyze_fund(
        _read_input(args.input),
        fail_fast=True if args.fail_fast else None,
        parallel=True if args.parallel else None,
    )


def _exit_status(run: AnalysisRun) -> int:
    return EXIT_OK if run.ok else EXIT_ASSETS_SKIPPED


# --------------------------------------------------
# ANALYZE
# --------------------------------------------------
def cmd_analyze(args: argparse.Namespace) -> int:
    """Write the analysis document as JSON to `--output` or stdout.

    Args:
        args: argparse namespace with `input`, `output`, `fail_fast`, `parallel`, `indent`.
    """
    run = _run(args)
    text = json.dumps(run.to_document(), indent=args.indent)

    if args.output:
        out = Path(args.output)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(text + "\n", encoding="utf-8")
        log.info("Wrote analysis to %s", out)
    else:
        sys.stdout.write(text + "\n")

    return _exit_status(run)


# --------------------------------------------------
# VALIDATE
# --------------------------------------------------
def cmd_validate(args: argparse.Namespace) -> int:
    """Run the pipeline without writing output; exit status reflects skipped assets."""
    run = _run(args)
    log.info(
        "%s: %d assets ok, %d skipped, %d aggregation warnings",
        run.result.fund_name,
        len(run.result.assets_analysis),
        len(run.errors),
        len(run.warnings),
    )
    return _exit_status(run)


# --------------------------------------------------
# FLATTEN
# --------------------------------------------------
def cmd_flatten(args: argparse.Namespace) -> int:
    """Write the per-point series table (or the stats table with `--stats`) as CSV."""
    run = _run(args)
    pdf = stats_to_frame(run.result) if args.stats else result_to_frame(run.result)

    out = Path(args.output)
    out.parent.mkdir(parents=True, exist_ok=True)
    pdf.to_csv(out, index=False)
    log.info("Wrote %d rows to %s", len(pdf), out)

    return _exit_status(run)


# --------------------------------------------------
# CLI
# --------------------------------------------------
def build_parser() -> argparse.ArgumentParser:
    """Build and return the top-level argument parser for the CLI.

    Returns:
        Configured argparse.ArgumentParser instance.
    """
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("input", help="fund JSON document, or - for stdin")
    common.add_argument("--fail-fast", action="store_true")
    common.add_argument("--parallel", action="store_true")

    p = argparse.ArgumentParser(prog="esg_pipeline")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_analyze = sub.add_parser("analyze", parents=[common])
    p_analyze.add_argument("-o", "--output", default=None)
    p_analyze.add_argument("--indent", type=int, default=2)

    sub.add_parser("validate", parents=[common])

    p_flatten = sub.add_parser("flatten", parents=[common])
    p_flatten.add_argument("-o", "--output", required=True)
    p_flatten.add_argument("--stats", action="store_true")

    return p


COMMANDS = {
    "analyze": cmd_analyze,
    "validate": cmd_validate,
    "flatten": cmd_flatten,
}


def main(argv: Sequence[str] | None = None) -> None:
    """CLI entry point: parse args, configure logging and dispatch commands."""
    args = build_parser().parse_args(argv)
    s = get_settings()
    configure_logging(s.log_path, s.log_level)

    try:
        code = COMMANDS[args.cmd](args)
    except (ParseError, UnsupportedInputShapeError) as exc:
        log.error("Cannot read %s: %s", args.input, exc)
        code = EXIT_BAD_INPUT
    except EsgPipelineError as exc:
        log.error("Analysis aborted: %s", exc)
        code = EXIT_ASSETS_SKIPPED
    except OSError as exc:
        log.error("I/O error: %s", exc)
        code = EXIT_BAD_INPUT

    raise SystemExit(code)


if __name__ == "__main__":
    main()
