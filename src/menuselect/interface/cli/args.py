from __future__ import annotations

"""
CLI Argument Definition and Mapping.

Defines the command-line schema and translates the parsed namespace into
configuration overrides and selection edits.
"""

import argparse
from typing import Any, Dict, List, Optional

from menuselect.domain.node_models import NodeId

# -----------------------------------------------------------------------------
# ARGUMENT DEFINITION
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """
    Construct the argument parser for the MenuSelect CLI.

    Returns:
        argparse.ArgumentParser: Configured parser instance.
    """
    p = argparse.ArgumentParser(
        prog="menuselect",
        description="Inspect and edit the menus assigned to a role.",
    )

    # --- Session Target ---
    p.add_argument(
        "-r", "--role", "--scope",
        dest="scope",
        default=None,
        help="Role (scope) whose menu assignment is edited.",
    )
    p.add_argument(
        "--source-file",
        dest="source_file",
        default=None,
        help="Use a local JSON document instead of the remote API.",
    )
    p.add_argument(
        "--api-url",
        dest="api_base_url",
        default=None,
        help="Base URL of the admin API (e.g. http://localhost:8000/api).",
    )
    p.add_argument(
        "--token",
        dest="access_token",
        default=None,
        help="Bearer token sent to the admin API.",
    )
    p.add_argument(
        "--timeout",
        dest="request_timeout",
        type=float,
        default=None,
        help="HTTP timeout in seconds.",
    )
    p.add_argument(
        "--promote-orphans",
        action="store_true",
        help="Show menus whose parent is missing as roots instead of hiding them.",
    )

    # --- View ---
    p.add_argument(
        "-s", "--search",
        dest="query",
        default="",
        help="Only show menus whose name contains this text (plus their parents).",
    )
    p.add_argument(
        "--collapsed",
        action="store_true",
        help="Render every branch collapsed except those opened by the search.",
    )

    # --- Selection Edits (applied in this order) ---
    p.add_argument("--clear", action="store_true", help="Deselect every menu.")
    p.add_argument("--select-all", action="store_true", help="Select every menu.")
    p.add_argument(
        "--select-visible",
        action="store_true",
        help="Select every menu shown by the current search.",
    )
    p.add_argument(
        "--deselect-visible",
        action="store_true",
        help="Deselect every menu shown by the current search.",
    )
    p.add_argument(
        "--select",
        dest="select_ids",
        default=None,
        help="Comma-separated menu ids to check, with their submenus.",
    )
    p.add_argument(
        "--deselect",
        dest="deselect_ids",
        default=None,
        help="Comma-separated menu ids to uncheck, with their submenus.",
    )
    p.add_argument(
        "--toggle",
        dest="toggle_ids",
        default=None,
        help="Comma-separated menu ids to toggle, like clicking their checkbox.",
    )
    p.add_argument("--save", action="store_true", help="Persist the resulting selection.")

    # --- Configuration and Diagnostics ---
    p.add_argument(
        "--use-defaults",
        action="store_true",
        help="Ignore the stored configuration file.",
    )
    p.add_argument(
        "--dump-config",
        action="store_true",
        help="Print the effective configuration and exit.",
    )
    p.add_argument(
        "--debug",
        action="store_true",
        help="Elevate logging verbosity to DEBUG.",
    )
    p.add_argument(
        "--json",
        dest="json_output",
        action="store_true",
        help="Print the session state as JSON.",
    )

    return p

# -----------------------------------------------------------------------------
# ARGUMENT MAPPING
# -----------------------------------------------------------------------------

def args_to_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Translate the argparse Namespace into configuration overrides.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Dict[str, Any]: Overrides; None values mean "not given".
    """
    overrides: Dict[str, Any] = {
        "api_base_url": args.api_base_url,
        "access_token": args.access_token,
        "request_timeout": args.request_timeout,
    }
    if args.promote_orphans:
        overrides["orphan_policy"] = "promote"
    return overrides


def parse_id_list(value: Optional[str]) -> List[NodeId]:
    """
    Split a comma-separated id list. Numeric items become ints.

    Returns:
        List[NodeId]: Parsed ids (empty when value is None or blank).
    """
    if not value:
        return []
    out: List[NodeId] = []
    for part in value.split(","):
        item = part.strip()
        if not item:
            continue
        out.append(parse_id(item))
    return out


def parse_id(value: str) -> NodeId:
    text = value.strip()
    if text.lstrip("-").isdigit():
        return int(text)
    return text
