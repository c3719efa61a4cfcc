from __future__ import annotations

"""
CLI Argument Definition and Mapping.

Defines the command-line schema (global flags and one subcommand per file
manager operation) and translates parsed namespaces into configuration
overrides and folder specifications.
"""

import argparse
import json
from typing import Any, Dict

from filekeeper.domain import constants as const
from filekeeper.domain.errors import InvalidStructureError

# -----------------------------------------------------------------------------
# ARGUMENT DEFINITION
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """
    Construct the argument parser for the filekeeper CLI.

    Returns:
        argparse.ArgumentParser: Configured parser instance.
    """
    p = argparse.ArgumentParser(
        prog="filekeeper",
        description="Create and delete folder hierarchies and manage keyed files.",
    )

    # --- Configuration and Diagnostic Tools ---
    p.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {const.APP_VERSION}",
    )
    p.add_argument(
        "--use-defaults",
        action="store_true",
        help="Ignore the persisted configuration file.",
    )
    p.add_argument(
        "--dump-config",
        action="store_true",
        help="Print the effective configuration as JSON and exit.",
    )
    p.add_argument(
        "--debug",
        action="store_true",
        help="Elevate logging verbosity to DEBUG.",
    )
    p.add_argument(
        "--log-file",
        action="store_true",
        help="Also write diagnostics to the rotating log in the user data directory.",
    )
    p.add_argument(
        "--json",
        dest="json_output",
        action="store_true",
        help="Print results as JSON.",
    )

    sub = p.add_subparsers(dest="command", metavar="COMMAND")

    # --- Folder structures ---
    mk = sub.add_parser("mkdirs", help="Create a folder structure.")
    mk.add_argument("base", help="Base directory.")
    mk.add_argument("spec", help='Folder spec as JSON, e.g. \'["a", ["b", "c"], "d"]\'.')
    mk.add_argument(
        "--ensure-base",
        action="store_true",
        help="Create the base directory if it is missing.",
    )

    rm = sub.add_parser("rmdirs", help="Delete a folder structure.")
    rm.add_argument("base", help="Base directory (never deleted).")
    rm.add_argument("spec", help="Folder spec as JSON.")
    rm.add_argument(
        "--mode",
        choices=const.DELETE_MODES,
        default=None,
        help="preserve: only empty folders; force: folders and their content.",
    )
    rm.add_argument(
        "--legacy",
        action="store_true",
        help="Read the folder spec with the '*' / '..' wildcard dialect.",
    )

    # --- Files ---
    touch = sub.add_parser("touch", help="Create a managed file.")
    touch.add_argument("path", help="Desired file path.")
    touch.add_argument(
        "--policy",
        choices=const.NAMING_POLICIES,
        default=None,
        help="Behaviour when the path already exists.",
    )

    log = sub.add_parser("log", help="Create a log file.")
    log.add_argument("directory", help="Directory holding the logs.")
    log.add_argument("--mode", choices=const.LOG_NAMING_MODES, default=None)
    log.add_argument(
        "--no-rotate",
        action="store_true",
        help="Increment mode: reuse the latest log instead of starting a new one.",
    )

    stat = sub.add_parser("stat", help="Show file metadata.")
    stat.add_argument("path")

    search = sub.add_parser("search", help="List entries whose name contains QUERY.")
    search.add_argument("directory")
    search.add_argument("query")

    backup = sub.add_parser("backup", help="Copy a file to a timestamped sibling.")
    backup.add_argument("path")

    gz = sub.add_parser("compress", help="Gzip a file.")
    gz.add_argument("src")
    gz.add_argument("dest")

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
        Dict[str, Any]: Configuration overrides subset.
    """
    overrides: Dict[str, Any] = {}

    if args.debug:
        overrides["log_level"] = "DEBUG"
    if args.log_file:
        overrides["log_to_file"] = True

    command = getattr(args, "command", None)
    if command == "rmdirs" and args.mode:
        overrides["delete_mode"] = args.mode
    if command == "touch" and args.policy:
        overrides["naming_policy"] = args.policy
    if command == "log" and args.mode:
        overrides["log_naming_mode"] = args.mode

    return overrides


def parse_spec_argument(raw: str) -> Any:
    """
    Decode a folder spec passed on the command line as JSON.

    Raises:
        InvalidStructureError: If the text is not valid JSON.
    """
    try:
        return json.loads(raw)
    except ValueError as e:
        raise InvalidStructureError(f"Folder spec is not valid JSON: {e}") from e
