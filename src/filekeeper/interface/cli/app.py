from __future__ import annotations

"""
Command Line Interface (CLI) Application Controller.

Orchestrates the CLI lifecycle: logging bootstrap, configuration
resolution (defaults, persisted file, command-line overrides), dispatch of
the requested subcommand to the FileManager, and result rendering.
"""

import json
import sys
from dataclasses import asdict
from typing import Any, Dict, List, Optional

from filekeeper.core.services.manager import FileManager
from filekeeper.core.validator import validate_config
from filekeeper.domain.config import get_default_config, load_config
from filekeeper.domain.errors import FileKeeperError
from filekeeper.infra.fs import normalize_path
from filekeeper.infra.logging import LoggingConfig, configure_logging, get_default_log_path, get_logger
from filekeeper.interface.cli import args as cli_args

logger = get_logger(__name__)

# -----------------------------------------------------------------------------
# ENTRYPOINT ORCHESTRATOR
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """
    Execute the CLI workflow.

    Args:
        argv: Optional list of command line arguments. Defaults to sys.argv.

    Returns:
        int: 0 on success, 2 on domain errors or bad input, 1 on unexpected failure.
    """
    # 1. Argument parsing phase
    parser = cli_args.build_parser()
    args = parser.parse_args(argv)

    # 2. Configuration hierarchy
    base_conf = get_default_config() if args.use_defaults else load_config()
    raw_conf = dict(base_conf)
    raw_conf.update(cli_args.args_to_overrides(args))
    clean_conf, warnings = validate_config(raw_conf, strict=False)

    # 3. Logging bootstrap
    log_file = get_default_log_path() if clean_conf["log_to_file"] else None
    configure_logging(LoggingConfig(level=clean_conf["log_level"], console=True, log_file=log_file))
    for w in warnings:
        logger.warning(f"Configuration Constraint: {w}")

    if args.dump_config:
        print(json.dumps(clean_conf, ensure_ascii=False, indent=2))
        return 0

    if not args.command:
        parser.print_help(sys.stderr)
        return 2

    # 4. Command execution phase
    manager = FileManager(clean_conf, install_hooks=False)
    try:
        result = _dispatch(manager, args)
    except FileKeeperError as e:
        logger.error(str(e))
        print(f"ERROR: {e}", file=sys.stderr)
        return 2
    except KeyboardInterrupt:
        print("Interrupted.", file=sys.stderr)
        return 130
    except Exception as e:
        logger.critical(f"Command '{args.command}' failed: {e}", exc_info=True)
        print(f"ERROR: {e}", file=sys.stderr)
        return 1
    finally:
        manager.close()

    # 5. Output rendering phase
    _render(result, args.json_output)
    return 0

# -----------------------------------------------------------------------------
# COMMAND DISPATCH
# -----------------------------------------------------------------------------

def _dispatch(manager: FileManager, args: Any) -> Dict[str, Any]:
    """Run the selected subcommand and return a JSON-serializable result."""
    command = args.command

    if command == "mkdirs":
        spec = cli_args.parse_spec_argument(args.spec)
        created = manager.create_folder_structure(_path(args.base), spec, ensure_base=args.ensure_base)
        return {"created": created}

    if command == "rmdirs":
        spec = cli_args.parse_spec_argument(args.spec)
        removed = manager.delete_folder_structure(_path(args.base), spec, legacy=args.legacy)
        return {"removed": removed}

    if command == "touch":
        key = manager.create_basic_file(_path(args.path))
        return {"key": key, "path": manager.get_path(key)}

    if command == "log":
        key = manager.create_log_file(_path(args.directory), rotate=not args.no_rotate)
        return {"key": key, "path": manager.get_path(key)}

    if command == "stat":
        meta = asdict(manager.get_metadata(_path(args.path)))
        meta["created_at"] = meta["created_at"].isoformat()
        meta["modified_at"] = meta["modified_at"].isoformat()
        return meta

    if command == "search":
        return {"matches": manager.search(_path(args.directory), args.query)}

    if command == "backup":
        return {"backup": manager.backup_file(_path(args.path))}

    if command == "compress":
        return {"output": manager.compress_file(_path(args.src), _path(args.dest)).result()}

    raise ValueError(f"Unknown command: {command}")


def _path(raw: str) -> str:
    """Expand '~' and environment variables in a command-line path."""
    return normalize_path(raw, fallback=".")

# -----------------------------------------------------------------------------
# OUTPUT RENDERING
# -----------------------------------------------------------------------------

def _render(result: Dict[str, Any], as_json: bool) -> None:
    if as_json:
        print(json.dumps(result, ensure_ascii=False, indent=2))
        return

    for field, value in result.items():
        if isinstance(value, list):
            print(f"{field}: {len(value)}")
            for item in value:
                print(f"  {item}")
        else:
            print(f"{field}: {value}")
