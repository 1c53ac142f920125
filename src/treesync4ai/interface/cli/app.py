from __future__ import annotations

"""
Command Line Interface (CLI) Application Controller.

Orchestrates one chat turn per invocation: logging bootstrap, configuration
resolution (defaults, saved file, environment, CLI overrides), loading of the
stored tree, reconciliation of the instruction, persistence of the new tree,
and result rendering.
"""

import json
import sys
from typing import Any, Dict, List, Optional

from treesync4ai.core.services.chat_session import ChatSession, format_error, render_summary_json
from treesync4ai.core.services.validator import validate_config
from treesync4ai.core.tree.projector import project_summary_only
from treesync4ai.core.tree.renderer import render_tree
from treesync4ai.domain.config import apply_env_overrides, get_default_config, load_config, save_config
from treesync4ai.domain.reconcile_models import ReconcileResult
from treesync4ai.domain.tree_models import tree_to_dict
from treesync4ai.infra.fs import (
    delete_tree_file,
    get_default_tree_path,
    load_tree_file,
    normalize_path,
    save_tree_file,
)
from treesync4ai.infra.github import build_gateway
from treesync4ai.infra.logging import LoggingConfig, configure_logging, get_logger
from treesync4ai.interface.cli import args as cli_args
from treesync4ai.utils.i18n import i18n

logger = get_logger(__name__)

# -----------------------------------------------------------------------------
# ENTRYPOINT ORCHESTRATOR
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """
    Execute one CLI chat turn.

    Args:
        argv: Optional list of command line arguments. Defaults to sys.argv.

    Returns:
        int: 0 on success, 1 on reconciliation failure, 2 on bad invocation,
             130 on interrupt.
    """
    parser = cli_args.build_parser()
    args = parser.parse_args(argv)

    # 1. Configuration hierarchy: defaults < saved file < environment < CLI
    base_conf = apply_env_overrides(get_default_config()) if args.use_defaults else load_config()
    raw_conf = _merge_config(base_conf, cli_args.args_to_overrides(args))
    conf, warnings = validate_config(raw_conf, strict=False)

    # 2. Logging bootstrap
    configure_logging(LoggingConfig(
        level=conf["log_level"],
        console=True,
        log_file=conf["log_file"] or None,
    ))
    for w in warnings:
        logger.warning(f"Configuration Constraint: {w}")

    if conf["locale"] != i18n.locale:
        i18n.load_locale(conf["locale"])

    if args.dump_config:
        shown = dict(conf)
        if shown.get("github_token"):
            shown["github_token"] = "***"
        print(json.dumps(shown, ensure_ascii=False, indent=2))
        return 0

    if args.save_config:
        save_config(conf)
        print(i18n.t("cli.status.config_saved"))

    tree_path = normalize_path(conf["tree_file"], get_default_tree_path())
    if args.reset and delete_tree_file(tree_path):
        print(i18n.t("cli.status.reset"))

    # 3. Instruction acquisition
    text = _read_instruction(args)
    if text is None:
        return 2
    if not text.strip():
        if args.reset or args.save_config:
            return 0
        print(f"ERROR: {i18n.t('cli.errors.no_input')}", file=sys.stderr)
        return 2

    # 4. Reconciliation
    session = ChatSession(gateway=build_gateway(conf), tree=load_tree_file(tree_path))
    try:
        result = session.send(text)
    except KeyboardInterrupt:
        msg = i18n.t("cli.status.interrupted")
        logger.warning(msg)
        print(msg, file=sys.stderr)
        return 130

    if result is None:
        print(f"ERROR: {i18n.t('cli.errors.no_input')}", file=sys.stderr)
        return 2

    # 5. Persistence of the caller-owned tree
    if result.ok and conf["persist_tree"] and result.tree is not None:
        try:
            save_tree_file(tree_path, result.tree)
        except OSError as e:
            msg = i18n.t("cli.errors.save_failed", error=str(e))
            logger.error(msg)
            print(f"ERROR: {msg}", file=sys.stderr)
            return 1

    # 6. Output rendering
    if args.json_output:
        print(json.dumps(result_to_dict(result), ensure_ascii=False, indent=2))
    else:
        _print_human_summary(session, result, render=bool(args.render))

    return 0 if result.ok else 1

# -----------------------------------------------------------------------------
# CONFIGURATION MERGING
# -----------------------------------------------------------------------------

def _merge_config(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """Shallow merge of known, non-None override values into the base configuration."""
    out = dict(base)
    for k, v in overrides.items():
        if k in base and v is not None:
            out[k] = v
    return out

# -----------------------------------------------------------------------------
# INPUT
# -----------------------------------------------------------------------------

def _read_instruction(args: Any) -> Optional[str]:
    """Return the instruction text, or None when the input file is unreadable."""
    if args.message is not None:
        return args.message

    if args.input_file and args.input_file != "-":
        try:
            with open(args.input_file, "r", encoding="utf-8") as f:
                return f.read()
        except OSError as e:
            print(f"ERROR: {i18n.t('cli.errors.read_failed', error=str(e))}", file=sys.stderr)
            return None

    if args.input_file == "-" or not sys.stdin.isatty():
        return sys.stdin.read()
    return ""

# -----------------------------------------------------------------------------
# VIEW RENDERING
# -----------------------------------------------------------------------------

def result_to_dict(result: ReconcileResult) -> Dict[str, Any]:
    """JSON-compatible view of a result; the tree is summary-only."""
    return {
        "ok": result.ok,
        "resolution": result.resolution.value if result.resolution else None,
        "error": None if result.error is None else {
            "kind": result.error.kind,
            "message": format_error(result.error),
            "params": dict(result.error.params),
        },
        "written_paths": list(result.written_paths),
        "fetched_remote": result.fetched_remote,
        "tree": tree_to_dict(project_summary_only(result.tree)) if result.tree is not None else None,
    }


def _print_human_summary(session: ChatSession, result: ReconcileResult, render: bool) -> None:
    """Print the system reply of the last turn."""
    if not result.ok:
        print(session.messages[-1].content, file=sys.stderr)
        return

    if render and result.tree is not None:
        print("\n".join(render_tree(project_summary_only(result.tree))))
    else:
        print(render_summary_json(result.tree))

    if result.written_paths:
        print(i18n.t("cli.status.written", count=len(result.written_paths)), file=sys.stderr)
