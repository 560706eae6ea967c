"""
`editgate` command line: a thin front-end over EditLifecycleController.

Commands
--------
editgate write PATH --content TEXT [--append]     -- propose a full write
editgate write PATH --from-file FILE               -- content from a file
editgate edit PATH --old TEXT --new TEXT [--replace-all]
editgate run "COMMAND" [--cwd DIR]                 -- propose a shell command
editgate git OP [ARGS...]                          -- propose a git operation
editgate pending                                   -- list pending proposals
editgate show ID                                   -- show one proposal + diff
editgate accept ID | reject ID [--reason TEXT]
editgate refactor ID "INSTRUCTIONS"
editgate chunk PATH [--strategy S] [--size N] [--index I]
editgate stats                                     -- edit + chunking stats
editgate review                                    -- interactive review (Textual)

Proposals persist between invocations through the pending snapshot in
the data directory.
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from typing import Optional

from .chunking import STRATEGIES
from .cli_display import (
    format_colored_diff, format_proposal, format_proposal_line, setup_logger,
)
from .config import Config
from .editing.fileio import read_text
from .editing.path_guard import resolve
from .errors import EditGateError
from .proposals.controller import EditLifecycleController

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _color() -> bool:
    return sys.stdout.isatty() and not os.environ.get("NO_COLOR")


def _print_proposed(controller: EditLifecycleController, proposal_id: str) -> None:
    proposal = controller.get_proposal(proposal_id)
    print(format_proposal(proposal, color=_color()))
    if proposal.is_pending:
        print(f"\n  Accept with: editgate accept {proposal_id}")


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def _cmd_write(controller: EditLifecycleController, args: argparse.Namespace) -> int:
    if args.from_file:
        content = read_text(args.from_file)
    else:
        content = args.content
    mode = "append" if args.append else "overwrite"
    proposal_id = controller.propose_full_write(args.path, content, mode)
    _print_proposed(controller, proposal_id)
    return 0


def _cmd_edit(controller: EditLifecycleController, args: argparse.Namespace) -> int:
    # Each invocation is a fresh process, so the read is taken here.
    full = resolve(controller.workspace_root, args.path)
    try:
        content = read_text(full)
    except OSError as exc:
        print(f"Cannot read {args.path}: {exc}", file=sys.stderr)
        return 1
    controller.record_read(args.path, content)
    proposal_id = controller.propose_surgical_edit(
        args.path, args.old, args.new, replace_all=args.replace_all
    )
    _print_proposed(controller, proposal_id)
    return 0


def _cmd_run(controller: EditLifecycleController, args: argparse.Namespace) -> int:
    _print_proposed(controller, controller.propose_command(args.command, args.cwd))
    return 0


def _cmd_git(controller: EditLifecycleController, args: argparse.Namespace) -> int:
    proposal_id = controller.propose_repository_operation(args.operation, args.args)
    _print_proposed(controller, proposal_id)
    return 0


def _cmd_pending(controller: EditLifecycleController, args: argparse.Namespace) -> int:
    pending = controller.list_pending()
    if not pending:
        print("  (no pending edits)")
        return 0
    print(f"\nPending edits  [{len(pending)}]")
    print("-" * 60)
    for proposal in pending:
        print(format_proposal_line(proposal, color=_color()))
    return 0


def _cmd_show(controller: EditLifecycleController, args: argparse.Namespace) -> int:
    proposal = controller.get_proposal(args.id)
    if proposal is None:
        print(f"Edit {args.id} not found", file=sys.stderr)
        return 1
    if args.json:
        print(json.dumps(proposal.to_dict(), indent=2))
    else:
        print(format_proposal(proposal, color=_color()))
    return 0


def _cmd_accept(controller: EditLifecycleController, args: argparse.Namespace) -> int:
    result = controller.accept(args.id)
    if not result.success:
        print(f"Edit {args.id} failed: {result.error}", file=sys.stderr)
        return 1
    print(f"Applied {args.id}")
    output = result.metadata.get("stdout")
    if output:
        print(output, end="" if output.endswith("\n") else "\n")
    return 0


def _cmd_reject(controller: EditLifecycleController, args: argparse.Namespace) -> int:
    result = controller.reject(args.id, args.reason)
    if result.restored:
        print(f"Rejected {args.id}; backup restored")
    else:
        print(f"Rejected {args.id}")
    if result.warning:
        print(f"Warning: {result.warning}", file=sys.stderr)
    return 0


def _cmd_refactor(controller: EditLifecycleController, args: argparse.Namespace) -> int:
    new_id = controller.refactor(args.id, args.instructions)
    if new_id is None:
        print(f"Refactor of {args.id} was declined; it is still pending")
        return 1
    _print_proposed(controller, new_id)
    return 0


def _cmd_chunk(controller: EditLifecycleController, args: argparse.Namespace) -> int:
    result = controller.read_chunk(args.path, args.strategy, args.size, args.index)
    print(f"# chunk {result.index + 1}/{result.total_chunks} ({result.strategy})",
          file=sys.stderr)
    sys.stdout.write(result.chunk)
    return 0


def _cmd_stats(controller: EditLifecycleController, args: argparse.Namespace) -> int:
    stats = {
        "edits": controller.get_edit_stats(),
        "chunking": controller.chunking_analytics(),
    }
    history = controller.store.history
    if history is not None:
        stats["history"] = history.stats()
    print(json.dumps(stats, indent=2))
    return 0


def _cmd_review(controller: EditLifecycleController, args: argparse.Namespace) -> int:
    from .review import run_review

    if not controller.list_pending():
        print("  (no pending edits)")
        return 0
    decisions = run_review(controller)
    for action, proposal_id, outcome in decisions:
        print(f"  {action:<9} {proposal_id}  {outcome}")
    return 0


def _cmd_diff(controller: EditLifecycleController, args: argparse.Namespace) -> int:
    proposal = controller.get_proposal(args.id)
    if proposal is None or proposal.diff is None:
        print(f"No diff for {args.id}", file=sys.stderr)
        return 1
    text = proposal.diff.text
    print(format_colored_diff(text) if _color() else text)
    return 0


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------

def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="editgate",
        description="Edit gate: preview, approve and roll back file edits",
    )
    parser.add_argument("--workspace", default=".",
                        help="Workspace root all paths are confined to (default: CWD)")
    parser.add_argument("--config", default=None,
                        help="Path to .editgate.yaml config file")
    parser.add_argument("--auto", action="store_true",
                        help="Auto-apply: accept every proposal immediately")
    subparsers = parser.add_subparsers(dest="cmd", metavar="COMMAND")
    subparsers.required = True

    # --- write ---
    write_p = subparsers.add_parser("write", help="Propose writing a whole file")
    write_p.add_argument("path")
    source = write_p.add_mutually_exclusive_group(required=True)
    source.add_argument("--content", help="New file content")
    source.add_argument("--from-file", dest="from_file",
                        help="Read new content from FILE")
    write_p.add_argument("--append", action="store_true",
                         help="Append instead of overwrite")
    write_p.set_defaults(func=_cmd_write)

    # --- edit ---
    edit_p = subparsers.add_parser("edit", help="Propose a surgical string replacement")
    edit_p.add_argument("path")
    edit_p.add_argument("--old", required=True, help="Exact text to replace")
    edit_p.add_argument("--new", required=True, help="Replacement text")
    edit_p.add_argument("--replace-all", dest="replace_all", action="store_true",
                        help="Replace every occurrence")
    edit_p.set_defaults(func=_cmd_edit)

    # --- run ---
    run_p = subparsers.add_parser("run", help="Propose a shell command")
    run_p.add_argument("command")
    run_p.add_argument("--cwd", default=None,
                       help="Working directory, relative to the workspace")
    run_p.set_defaults(func=_cmd_run)

    # --- git ---
    git_p = subparsers.add_parser("git", help="Propose a git operation")
    git_p.add_argument("operation")
    git_p.add_argument("args", nargs=argparse.REMAINDER)
    git_p.set_defaults(func=_cmd_git)

    # --- pending / show / diff ---
    subparsers.add_parser("pending", help="List pending proposals").set_defaults(
        func=_cmd_pending)
    show_p = subparsers.add_parser("show", help="Show one proposal")
    show_p.add_argument("id")
    show_p.add_argument("--json", action="store_true", help="Machine-readable output")
    show_p.set_defaults(func=_cmd_show)
    diff_p = subparsers.add_parser("diff", help="Print a proposal's diff only")
    diff_p.add_argument("id")
    diff_p.set_defaults(func=_cmd_diff)

    # --- accept / reject / refactor ---
    accept_p = subparsers.add_parser("accept", help="Apply a pending proposal")
    accept_p.add_argument("id")
    accept_p.set_defaults(func=_cmd_accept)

    reject_p = subparsers.add_parser(
        "reject", help="Discard a pending proposal or roll back an applied one")
    reject_p.add_argument("id")
    reject_p.add_argument("--reason", default="User rejected")
    reject_p.set_defaults(func=_cmd_reject)

    refactor_p = subparsers.add_parser(
        "refactor", help="Supersede a pending proposal with a revised one")
    refactor_p.add_argument("id")
    refactor_p.add_argument("instructions")
    refactor_p.set_defaults(func=_cmd_refactor)

    # --- chunk ---
    chunk_p = subparsers.add_parser("chunk", help="Print one chunk of a file")
    chunk_p.add_argument("path")
    chunk_p.add_argument("--strategy", choices=STRATEGIES, default=None)
    chunk_p.add_argument("--size", type=int, default=None,
                         help="Target chunk size (default: from config)")
    chunk_p.add_argument("--index", type=int, default=0)
    chunk_p.set_defaults(func=_cmd_chunk)

    # --- stats / review ---
    subparsers.add_parser("stats", help="Show edit and chunking statistics").set_defaults(
        func=_cmd_stats)
    subparsers.add_parser("review", help="Review pending proposals interactively").set_defaults(
        func=_cmd_review)

    return parser


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def main(argv: Optional[list[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    cfg = Config.load(args.config)
    workspace = os.path.abspath(args.workspace)
    setup_logger(os.path.join(cfg.data_dir_for(workspace), "logs"))

    controller = EditLifecycleController(workspace, config=cfg)
    if args.auto:
        controller.set_auto_apply(True)

    try:
        return args.func(controller, args)
    except EditGateError as exc:
        logger.error("[EditGate] %s: %s", type(exc).__name__, exc)
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
