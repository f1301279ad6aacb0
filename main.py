"""Command-line entry point for the duplicate detection engine.

Loads environment variables, builds a detector over a local corpus directory
and the configured audit store, runs one command and prints JSON.

Examples::

    python main.py check-script tests/login.spec.ts --project web --corpus ./corpus
    python main.py check-test-case "Test user login ..." --project web --corpus ./corpus
    python main.py check-session session-42 --corpus ./corpus
    python main.py show DC-1A2B3C4D5E6F
    python main.py list web --limit 10
"""
from dotenv import load_dotenv
import argparse
import asyncio
import json
import sys
from pathlib import Path

# Load environment variables first, before any other imports
load_dotenv()

from dupcheck.audit import build_audit_store
from dupcheck.config import get_config
from dupcheck.dedup import DuplicateDetector
from dupcheck.errors import DuplicateDetectionError
from dupcheck.sources import DirectoryCandidateSource
from dupcheck.utils.deadline import Deadline
from dupcheck.utils.logger import log_error, set_log_level


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Check test content for duplicates in a project corpus.")
    sub = parser.add_subparsers(dest="command", required=True)

    script = sub.add_parser("check-script", help="Check a script file against project scripts.")
    script.add_argument("file", type=Path, help="Script file to check.")
    script.add_argument("--project", required=True, help="Project id scoping the corpus.")
    script.add_argument("--corpus", type=Path, required=True, help="Corpus root directory.")
    script.add_argument("--exclude", help="Id of the script being edited (never matched).")
    script.add_argument("--timeout", type=float, help="Seconds before candidate scanning stops.")

    case = sub.add_parser("check-test-case", help="Check serialized test-case content.")
    case.add_argument("content", help="Test case content (title, description, steps, expected result).")
    case.add_argument("--project", required=True, help="Project id scoping the corpus.")
    case.add_argument("--corpus", type=Path, required=True, help="Corpus root directory.")
    case.add_argument("--exclude", help="Id of the test case being edited (never matched).")
    case.add_argument("--timeout", type=float, help="Seconds before candidate scanning stops.")

    session = sub.add_parser("check-session", help="Check every test file of a generation session.")
    session.add_argument("session_id", help="Session id (reads <corpus>/sessions/<id>.json).")
    session.add_argument("--corpus", type=Path, required=True, help="Corpus root directory.")
    session.add_argument("--timeout", type=float, help="Seconds before candidate scanning stops.")

    show = sub.add_parser("show", help="Show a recorded duplicate check.")
    show.add_argument("check_id", help="Duplicate check id.")

    listing = sub.add_parser("list", help="List recent duplicate checks for a project.")
    listing.add_argument("project", help="Project id.")
    listing.add_argument("--limit", type=int, help="Maximum number of checks (1-200).")

    return parser


async def run(args: argparse.Namespace) -> dict:
    config = get_config()
    corpus = getattr(args, "corpus", None) or Path(".")
    detector = DuplicateDetector(
        DirectoryCandidateSource(corpus),
        build_audit_store(config),
        config=config.dedup_config(),
    )
    timeout = getattr(args, "timeout", None)
    deadline = Deadline.after(timeout) if timeout else None

    try:
        if args.command == "check-script":
            code = args.file.read_text(encoding="utf-8")
            result = await detector.check_script(
                code, args.project, args.exclude, deadline=deadline, path=args.file.name
            )
            return result.to_dict()
        if args.command == "check-test-case":
            result = await detector.check_test_case(args.content, args.project, args.exclude, deadline=deadline)
            return result.to_dict()
        if args.command == "check-session":
            result = await detector.check_session(args.session_id, deadline=deadline)
            return result.to_dict()
        if args.command == "show":
            return (await detector.get_check(args.check_id)).to_dict()
        limit = args.limit if args.limit is not None else config.default_list_limit
        checks = await detector.list_project_checks(args.project, limit)
        return {"data": [c.to_dict() for c in checks], "total": len(checks)}
    finally:
        await detector.audit_store.close()


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    config = get_config()
    set_log_level(config.log_level)
    for issue in config.validate_configuration():
        log_error("Configuration issue", issue=issue)
    config.log_configuration()

    try:
        output = asyncio.run(run(args))
    except DuplicateDetectionError as e:
        log_error("Duplicate check failed", error=str(e))
        print(json.dumps({"error": str(e)}), file=sys.stderr)
        return 1

    print(json.dumps(output, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
