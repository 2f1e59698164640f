"""Command line entry point — one sub-command per CI security step.

Each sub-command runs one gate, writes its verdict as GitHub step outputs,
annotates the run log and returns the exit code:

  0  pass (including warning-only outcomes)
  1  deliberate block (unauthorized, high-risk input, leaked secret)
  2  tooling error (missing file, malformed roles, scanner failure, bad config)

The workflow sequences the steps: check-auth → sanitize-input → agent →
extract-output → sanitize-output → publish.
"""

from __future__ import annotations

import argparse
import os
import sys
from typing import Optional

from cagent_security import __version__, workflow
from cagent_security.auth import authorize, parse_allowed_roles
from cagent_security.config import Config, load_config
from cagent_security.constants import (
    EXIT_BLOCKED,
    EXIT_ERROR,
    EXIT_OK,
    OUTPUT_AUTHORIZED,
    OUTPUT_BLOCKED,
    OUTPUT_LEAKED,
    OUTPUT_RISK_LEVEL,
    OUTPUT_SUSPICIOUS,
)
from cagent_security.errors import InputError
from cagent_security.extract import extract_agent_response
from cagent_security.models.block import (
    build_advisory_message,
    build_authorization_failure_message,
    build_input_block_message,
    build_leak_incident_message,
    build_medium_risk_message,
    build_scanner_error_message,
)
from cagent_security.models.scan import RiskLevel
from cagent_security.scanner import advise, classify_input, scan_output
from cagent_security.utils.logger import clear_step, configure_logging, get_logger, set_step

logger = get_logger(__name__)


def _read_text(path: str) -> str:
    if not path:
        raise InputError("No input file provided")
    if not os.path.isfile(path):
        raise InputError(f"Input file not found: {path}")
    try:
        with open(path, encoding="utf-8", errors="replace") as fh:
            return fh.read()
    except OSError as exc:
        raise InputError(f"Could not read {path}: {exc}") from exc


def _write_text(path: str, text: str) -> None:
    directory = os.path.dirname(path)
    try:
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(path, "w", encoding="utf-8") as fh:
            fh.write(text)
    except OSError as exc:
        raise InputError(f"Could not write {path}: {exc}") from exc


def _remove_stale(path: str) -> None:
    try:
        os.remove(path)
    except FileNotFoundError:
        return
    logger.info("Removed stale sanitized output", path=path)


# ─── Sub-commands ─────────────────────────────────────────────────────────────


def cmd_check_auth(args: argparse.Namespace, config: Config) -> int:
    if not args.association:
        workflow.set_output(OUTPUT_AUTHORIZED, False)
        raise InputError("No association provided")

    if args.allowed_roles is None:
        allowed = frozenset(config.authorization.allowed_roles)
    else:
        try:
            allowed = parse_allowed_roles(args.allowed_roles)
        except InputError:
            workflow.set_output(OUTPUT_AUTHORIZED, False)
            raise

    result = authorize(args.association, allowed)
    workflow.set_output(OUTPUT_AUTHORIZED, result.authorized)
    if not result.authorized:
        workflow.emit("error", build_authorization_failure_message(result, allowed))
        return EXIT_BLOCKED

    workflow.notice(f"Authorized: {result.actor_role}")
    return EXIT_OK


def cmd_sanitize_input(args: argparse.Namespace, config: Config) -> int:
    text = _read_text(args.input)
    sanitized, result = classify_input(text, is_diff=not args.prompt)

    workflow.set_output(OUTPUT_BLOCKED, result.blocked)
    workflow.set_output(OUTPUT_RISK_LEVEL, result.risk_level)

    if result.blocked:
        _remove_stale(args.output)
        if result.is_error:
            workflow.emit("error", build_scanner_error_message("input"))
            return EXIT_ERROR
        workflow.emit("error", build_input_block_message(result))
        return EXIT_BLOCKED

    _write_text(args.output, sanitized or "")
    if result.risk_level is RiskLevel.MEDIUM:
        workflow.emit("warning", build_medium_risk_message(result))
    else:
        logger.info("No suspicious patterns detected")
    return EXIT_OK


def cmd_sanitize_output(args: argparse.Namespace, config: Config) -> int:
    text = _read_text(args.file)
    result = scan_output(text, registry=config.secret_registry())

    workflow.set_output(OUTPUT_LEAKED, result.blocked)

    if result.is_error:
        workflow.emit("error", build_scanner_error_message("output"))
        return EXIT_ERROR
    if result.blocked:
        workflow.emit("error", build_leak_incident_message(result, args.pr_number))
        return EXIT_BLOCKED

    if result.advisory:
        workflow.warning(
            "Response mentions API key variable names. No secret values were found.",
            title="Sensitive variable names in response",
        )
    return EXIT_OK


def cmd_sanitize_prompt(args: argparse.Namespace, config: Config) -> int:
    prompt = args.prompt if args.prompt is not None else sys.stdin.read()
    result = advise(prompt)

    workflow.set_output(OUTPUT_SUSPICIOUS, result.suspicious)
    if result.suspicious:
        workflow.emit("warning", build_advisory_message(result))
    return EXIT_OK


def cmd_extract_output(args: argparse.Namespace, config: Config) -> int:
    raw = _read_text(args.log)
    response = extract_agent_response(raw, agent_name=args.agent)
    if not response.strip():
        logger.warning("Agent response is empty", log=args.log)
    _write_text(args.output, response + "\n" if response else "")
    return EXIT_OK


# ─── Parser ───────────────────────────────────────────────────────────────────


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="cagent-security",
        description="Security gates for AI agent runs in GitHub Actions.",
    )
    p.add_argument("--config", help="Config file (default: CAGENT_SECURITY_CONFIG or .cagent/security.yaml)")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = p.add_subparsers(dest="cmd", required=True)

    s = sub.add_parser("check-auth", help="Check the actor's repository association")
    s.add_argument("association", nargs="?", default="", help="e.g. OWNER, MEMBER, CONTRIBUTOR")
    s.add_argument(
        "allowed_roles",
        nargs="?",
        default=None,
        help='JSON array, e.g. \'["OWNER", "MEMBER"]\' (default: authorization.allowed_roles)',
    )
    s.set_defaults(func=cmd_check_auth)

    s = sub.add_parser("sanitize-input", help="Classify a PR diff or prompt before the agent runs")
    s.add_argument("input", help="Diff or prompt file to classify")
    s.add_argument("output", help="Where to write the sanitized text")
    s.add_argument("--prompt", action="store_true", help="Input is a free-form prompt, not a diff")
    s.set_defaults(func=cmd_sanitize_input)

    s = sub.add_parser("sanitize-output", help="Scan the agent response for leaked secrets")
    s.add_argument("file", help="Agent response file")
    s.add_argument("--pr-number", default=None, help="Pull request number for the incident report")
    s.set_defaults(func=cmd_sanitize_output)

    s = sub.add_parser("sanitize-prompt", help="Warn about suspicious prompts (never blocks)")
    s.add_argument("prompt", nargs="?", default=None, help="Prompt text (default: read stdin)")
    s.set_defaults(func=cmd_sanitize_prompt)

    s = sub.add_parser("extract-output", help="Extract the agent response from raw CLI output")
    s.add_argument("log", help="Raw agent output")
    s.add_argument("output", help="Where to write the extracted response")
    s.add_argument("--agent", default="root", help="Agent name in the '--- Agent: <name> ---' marker")
    s.set_defaults(func=cmd_extract_output)

    return p


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    config = load_config(args.config)
    configure_logging(config.logging.level, json_output=config.logging.json)

    set_step(args.cmd)
    try:
        return int(args.func(args, config))
    except InputError as exc:
        logger.error("Invalid input", error=exc.message)
        workflow.error(exc.message, title="cagent-security: invalid input")
        return EXIT_ERROR
    finally:
        clear_step()


if __name__ == "__main__":
    raise SystemExit(main())
