from __future__ import annotations

"""
Command Line Interface (CLI) Application Controller.

Orchestrates the CLI lifecycle: logging bootstrap, configuration layering
(defaults, stored file, environment, CLI overrides), loading an assignment
session, applying the requested selection edits, optional save, and
rendering of the resulting tri-state tree.
"""

import argparse
import json
import sys
from typing import Any, Dict, List, Optional

from menuselect.core.services.assignment import AssignmentController, MenuSource
from menuselect.core.services.validator import validate_config
from menuselect.domain.config import (
    apply_env_overrides,
    get_default_config,
    load_config,
    save_config,
)
from menuselect.domain.errors import (
    EmptySelectionError,
    FetchFailure,
    PersistFailure,
    UnknownNodeError,
)
from menuselect.infra.fs import normalize_path
from menuselect.infra.local_store import JsonFileSource
from menuselect.infra.logging import LoggingConfig, configure_logging, get_logger
from menuselect.infra.network import MenuApiClient
from menuselect.interface.cli import args as cli_args

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INVALID = 2
EXIT_INTERRUPTED = 130

# -----------------------------------------------------------------------------
# ENTRYPOINT ORCHESTRATOR
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """
    Execute the main CLI application workflow.

    Args:
        argv: Optional list of command line arguments. Defaults to sys.argv.

    Returns:
        int: Process exit code.
    """
    # 1. Argument parsing phase
    parser = cli_args.build_parser()
    args = parser.parse_args(argv)

    # 2. Configuration hierarchy
    base_conf = get_default_config() if args.use_defaults else load_config()
    raw_conf = _merge_config(apply_env_overrides(base_conf), cli_args.args_to_overrides(args))
    conf, warnings = validate_config(raw_conf, strict=False)

    # 3. Logging bootstrap (CLI: console on stderr, optional file)
    configure_logging(LoggingConfig.from_app_config(conf, debug=args.debug))
    for w in warnings:
        logger.warning(f"Configuration Constraint: {w}")

    if args.dump_config:
        print(json.dumps(_masked(conf), ensure_ascii=False, indent=2))
        return EXIT_OK

    # 4. Session target
    scope = args.scope or conf.get("last_scope")
    if not scope:
        print("ERROR: No role given. Use --role <id>.", file=sys.stderr)
        return EXIT_INVALID
    scope_key = cli_args.parse_id(str(scope))

    source = _build_source(args, conf)
    controller = AssignmentController(
        source,
        scope_key,
        promote_orphans=conf["orphan_policy"] == "promote",
    )

    try:
        return _run_session(args, conf, controller)
    except KeyboardInterrupt:
        logger.warning("Interrupted by user.")
        controller.discard()
        return EXIT_INTERRUPTED
    finally:
        if isinstance(source, MenuApiClient):
            source.close()

# -----------------------------------------------------------------------------
# SESSION FLOW
# -----------------------------------------------------------------------------

def _run_session(
        args: argparse.Namespace,
        conf: Dict[str, Any],
        controller: AssignmentController,
) -> int:
    """Load, edit, optionally save, then report."""
    try:
        controller.load()
    except FetchFailure as e:
        print(f"ERROR: Failed to load menus: {e}", file=sys.stderr)
        return EXIT_FAILURE

    if not args.use_defaults and conf.get("last_scope") != str(controller.scope_key):
        save_config(dict(load_config(), last_scope=str(controller.scope_key)))

    if args.collapsed:
        controller.collapse_all()
    if args.query:
        controller.set_query(args.query)

    try:
        _apply_edits(args, controller)
    except UnknownNodeError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_INVALID

    saved = False
    if args.save:
        try:
            saved = controller.save()
        except EmptySelectionError as e:
            print(f"ERROR: {e}", file=sys.stderr)
            return EXIT_INVALID
        except PersistFailure as e:
            print(f"ERROR: Failed to assign menus: {e}", file=sys.stderr)
            return EXIT_FAILURE

    if args.json_output:
        print(json.dumps(_session_to_dict(controller, saved), ensure_ascii=False, indent=2))
    else:
        _print_human_summary(controller, saved)
    return EXIT_OK


def _apply_edits(args: argparse.Namespace, controller: AssignmentController) -> None:
    """Apply the selection flags in a fixed, documented order."""
    if args.clear:
        controller.deselect_all()
    if args.select_all:
        controller.select_all()
    if args.select_visible:
        controller.select_all_visible()
    if args.deselect_visible:
        controller.deselect_all_visible()
    for node_id in cli_args.parse_id_list(args.select_ids):
        controller.check(node_id)
    for node_id in cli_args.parse_id_list(args.deselect_ids):
        controller.uncheck(node_id)
    for node_id in cli_args.parse_id_list(args.toggle_ids):
        controller.toggle(node_id)


def _build_source(args: argparse.Namespace, conf: Dict[str, Any]) -> MenuSource:
    if args.source_file:
        path = normalize_path(args.source_file)
        logger.debug(f"Using file-backed menu source: {path}")
        return JsonFileSource(path)
    return MenuApiClient(
        base_url=conf["api_base_url"],
        token=conf["access_token"] or None,
        timeout=conf["request_timeout"],
    )

# -----------------------------------------------------------------------------
# CONFIGURATION MERGING
# -----------------------------------------------------------------------------

def _merge_config(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """Shallow merge of the non-None overrides into the base configuration."""
    out = dict(base)
    for k, v in overrides.items():
        if v is not None:
            out[k] = v
    return out


def _masked(conf: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(conf)
    if out.get("access_token"):
        out["access_token"] = "***"
    return out

# -----------------------------------------------------------------------------
# VIEW RENDERING
# -----------------------------------------------------------------------------

def _session_to_dict(controller: AssignmentController, saved: bool) -> Dict[str, Any]:
    summary = controller.summary
    result = controller.filter_result
    return {
        "scope": controller.scope_key,
        "state": controller.state.value,
        "query": controller.query,
        "matches": len(result.match_ids),
        "selection": _sorted(controller.selection),
        "baseline": _sorted(controller.baseline),
        "dirty": controller.is_dirty,
        "saved": saved,
        "summary": {
            "selected": summary.selected,
            "total": summary.total,
            "percent": summary.percent,
        },
        "tree": controller.render(),
    }


def _print_human_summary(controller: AssignmentController, saved: bool) -> None:
    """
    Print the tri-state tree followed by the selection counter.

    Acts as the 'View' of the CLI: [x] checked, [-] partially checked,
    [ ] unchecked.
    """
    lines = controller.render()
    if controller.query:
        count = len(controller.filter_result.match_ids)
        print(f"Found {count} {'menu' if count == 1 else 'menus'} matching '{controller.query}'")
        if not lines:
            print("No menus found. Try adjusting your search terms.")
    elif not lines:
        print("No menus available.")

    for line in lines:
        print(line)

    summary = controller.summary
    print(f"\n{summary.selected} / {summary.total} menus selected ({summary.percent}%)")

    if saved:
        print(f"Role {controller.scope_key} menus updated.")
    elif controller.is_dirty:
        print("Unsaved changes (use --save to persist).")


def _sorted(ids: Any) -> List[Any]:
    return sorted(ids, key=lambda i: (isinstance(i, str), i))

# -----------------------------------------------------------------------------
# CLI ENTRYPOINT
# -----------------------------------------------------------------------------

if __name__ == "__main__":
    sys.exit(main())
