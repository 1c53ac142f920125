from __future__ import annotations

"""
CLI Argument Definition and Mapping.

Defines the command-line schema and translates the argparse namespace into
configuration overrides.
"""

import argparse
from typing import Any, Dict

from treesync4ai.core.services.validator import SUPPORTED_LOCALES
from treesync4ai.utils.i18n import i18n

# -----------------------------------------------------------------------------
# ARGUMENT DEFINITION
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """
    Construct the argument parser for the TreeSync4AI CLI.

    Returns:
        argparse.ArgumentParser: Configured parser instance.
    """
    p = argparse.ArgumentParser(
        prog="treesync4ai",
        description=i18n.t("app.description"),
    )

    # --- Instruction source ---
    source = p.add_mutually_exclusive_group()
    source.add_argument("-m", "--message", dest="message", default=None, help=i18n.t("cli.args.message"))
    source.add_argument("-f", "--file", dest="input_file", default=None, help=i18n.t("cli.args.file"))

    # --- Remote repository ---
    p.add_argument("--owner", dest="github_owner", default=None, help=i18n.t("cli.args.owner"))
    p.add_argument("--repo", dest="github_repo", default=None, help=i18n.t("cli.args.repo"))
    p.add_argument("--token", dest="github_token", default=None, help=i18n.t("cli.args.token"))
    p.add_argument("--branch", dest="github_branch", default=None, help=i18n.t("cli.args.branch"))

    # --- Session state ---
    p.add_argument("--tree-file", dest="tree_file", default=None, help=i18n.t("cli.args.tree_file"))
    p.add_argument("--no-save", action="store_true", help=i18n.t("cli.args.no_save"))
    p.add_argument("--reset", action="store_true", help=i18n.t("cli.args.reset"))

    # --- Output ---
    output = p.add_mutually_exclusive_group()
    output.add_argument("--render", action="store_true", help=i18n.t("cli.args.render"))
    output.add_argument("--json", dest="json_output", action="store_true", help=i18n.t("cli.args.json"))
    p.add_argument("--locale", choices=SUPPORTED_LOCALES, default=None, help=i18n.t("cli.args.locale"))

    # --- Configuration and diagnostics ---
    p.add_argument("--use-defaults", action="store_true", help=i18n.t("cli.args.defaults"))
    p.add_argument("--dump-config", action="store_true", help=i18n.t("cli.args.dump"))
    p.add_argument("--save-config", action="store_true", help=i18n.t("cli.args.save_config"))
    p.add_argument("--debug", action="store_true", help="Elevate logging verbosity to DEBUG.")

    return p

# -----------------------------------------------------------------------------
# ARGUMENT MAPPING
# -----------------------------------------------------------------------------

def args_to_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Translate the argparse Namespace into configuration overrides.

    Only options the user actually passed are included.
    """
    overrides: Dict[str, Any] = {}

    for key in ("github_owner", "github_repo", "github_token", "github_branch", "tree_file", "locale"):
        value = getattr(args, key, None)
        if value is not None:
            overrides[key] = value

    if args.no_save:
        overrides["persist_tree"] = False
    if args.debug:
        overrides["log_level"] = "DEBUG"

    return overrides
