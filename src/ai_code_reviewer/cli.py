"""
Command Line Interface

ai-code-review github-pr --owner O --repo R --pr-id N
ai-code-review local [--path P] [--commit SHA]
ai-code-review github-file --owner O --repo R --pr-id N --file F
"""

import sys
import logging
import argparse
from typing import Any, Dict, List, Optional

from . import __version__
from .config import load_config, setup_logging
from .exceptions import ReviewerError
from .platforms import PlatformOptions
from .review import CodeReviewer, ConsoleObserver


logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="ai-code-review", description="AI powered code review for pull requests and local changes.")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("-c", "--config", help="Path of the config file")
    common.add_argument("--debug", action="store_true", help="Enable debug logging")

    sub = p.add_subparsers(dest="command", required=True)

    pr = sub.add_parser("github-pr", parents=[common], help="Review a GitHub pull request.")
    pr.add_argument("--owner", help="Repository owner")
    pr.add_argument("--repo", help="Repository name")
    pr.add_argument("--pr-id", type=int, help="Pull request number")

    local = sub.add_parser("local", parents=[common], help="Review local git changes.")
    local.add_argument("--path", help="Repository path (default: current directory)")
    local.add_argument("--commit", help="Review the changes of this commit instead of the working tree")

    single = sub.add_parser("github-file", parents=[common], help="Review one file of a GitHub pull request and comment on it.")
    single.add_argument("--owner", help="Repository owner")
    single.add_argument("--repo", help="Repository name")
    single.add_argument("--pr-id", type=int, help="Pull request number")
    single.add_argument("--file", help="Path of the file to review")

    return p


def _missing(args: argparse.Namespace, names: List[str]) -> List[str]:
    return [f"--{name.replace('_', '-')}" for name in names if not getattr(args, name)]


def _overrides(platform_type: str, debug: bool) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {"platform": {"type": platform_type}}
    if debug:
        overrides["debug"] = True
    return overrides


def run(args: argparse.Namespace) -> int:
    """
    Execute a parsed command.

    Returns:
        Process exit code
    """
    if args.command == "local":
        required: List[str] = []
        platform_type = "local"
        options = PlatformOptions(path=args.path, commit_sha=args.commit)
    else:
        required = ["owner", "repo", "pr_id"] + (["file"] if args.command == "github-file" else [])
        platform_type = "github"
        options = PlatformOptions(owner=args.owner, repo=args.repo, pr_id=args.pr_id)

    missing = _missing(args, required)
    if missing:
        logger.error(f"Missing required arguments: {', '.join(missing)}")
        return 1

    config = load_config(args.config, _overrides(platform_type, args.debug))
    setup_logging(config.logging, debug=config.debug)

    reviewer = CodeReviewer.from_config(config, options, observer=ConsoleObserver())

    if args.command == "github-file":
        logger.info(f"Reviewing {args.file} in PR #{args.pr_id}")
        result = reviewer.review_single_file(args.file)
        if result is None:
            logger.warning(f"File {args.file} is not part of PR #{args.pr_id}")
    else:
        reviewer.review()

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        return run(args)
    except ReviewerError as e:
        logger.error(f"{args.command} failed: {e}")
        return 1
    except Exception as e:
        logger.exception(f"{args.command} failed with an unexpected error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
