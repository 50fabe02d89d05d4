#!/usr/bin/env python3
"""
Run linting checks on the Majestic MCP codebase.
"""
import argparse
import fnmatch
import logging
import os
import subprocess
import sys
from pathlib import Path

# Configure logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger("majestic-lint")

# Root directory of the project
ROOT_DIR = Path(__file__).parent.parent.absolute()

# Directories to check
CHECK_DIRS = [
    ROOT_DIR / "src",
    ROOT_DIR / "tests",
    ROOT_DIR / "scripts",
]


def parse_gitignore():
    """Parse .gitignore and return a list of patterns to ignore."""
    gitignore_path = ROOT_DIR / ".gitignore"
    if not gitignore_path.exists():
        return []

    with open(gitignore_path, "r") as f:
        return [
            line.strip()
            for line in f
            if line.strip() and not line.strip().startswith("#")
        ]


def is_ignored(file_path, gitignore_patterns):
    rel_path = str(file_path.relative_to(ROOT_DIR))
    for pattern in gitignore_patterns:
        if pattern.endswith("/"):
            if rel_path.startswith(pattern) or fnmatch.fnmatch(rel_path + "/", pattern):
                return True
        elif fnmatch.fnmatch(rel_path, pattern):
            return True
    return False


def get_files_to_check(dirs, gitignore_patterns):
    """Get Python files to check, excluding those matching gitignore patterns."""
    files_to_check = []
    for dir_path in dirs:
        if not dir_path.exists():
            continue
        for root, _, files in os.walk(dir_path):
            for file in files:
                file_path = Path(root) / file
                if file.endswith(".py") and not is_ignored(file_path, gitignore_patterns):
                    files_to_check.append(file_path)
    return files_to_check


def run_command(cmd, description):
    """Run a command and return its status."""
    logger.info(f"{description}...")
    try:
        subprocess.run(cmd, check=True, capture_output=True, text=True)
        logger.info(f"✅ {description} passed!")
        return True
    except subprocess.CalledProcessError as e:
        logger.error(f"❌ {description} failed!")
        logger.error(e.stdout)
        logger.error(e.stderr)
        return False


def run_linting(dirs, auto_fix=False):
    """Run flake8, mypy and black, optionally formatting first."""
    files_to_check = [str(f) for f in get_files_to_check(dirs, parse_gitignore())]
    logger.info(f"Found {len(files_to_check)} Python files to check")

    if not files_to_check:
        logger.warning("No Python files found to check!")
        return 0

    if auto_fix:
        run_command(["black"] + files_to_check, "Black formatting")

    all_passed = run_command(
        ["flake8", "--max-line-length", "120"] + files_to_check, "Flake8 linting"
    )
    # Namespace packages: src/ and tests/ have no __init__.py
    all_passed = (
        run_command(
            ["mypy", "--explicit-package-bases", "--ignore-missing-imports"]
            + files_to_check,
            "Mypy type checking",
        )
        and all_passed
    )
    all_passed = (
        run_command(["black", "--check"] + files_to_check, "Black format checking")
        and all_passed
    )

    if all_passed:
        logger.info("✅ All linting checks passed!")
    else:
        logger.error("❌ Some linting checks failed.")

    return 0 if all_passed else 1


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Run linting checks on the Majestic MCP codebase."
    )
    parser.add_argument(
        "--fix",
        action="store_true",
        help="Format with black before checking",
    )
    parser.add_argument(
        "--dirs", nargs="+", help="Directories to check (default: src tests scripts)"
    )

    args = parser.parse_args()

    dirs_to_check = [Path(d).absolute() for d in args.dirs] if args.dirs else CHECK_DIRS

    return run_linting(dirs_to_check, auto_fix=args.fix)


if __name__ == "__main__":
    sys.exit(main())
