"""
PatchPilot CLI - apply unified diffs that may not match the files exactly.

Usage:
    patchpilot apply PATCH [--root DIR] [--fuzz N] [--no-auto-correct] [--dry-run] [-v]
    patchpilot info PATCH [--root DIR] [-v]

Examples:
    patchpilot apply fix.diff                 Apply fix.diff to files under the cwd
    patchpilot apply fix.diff --dry-run       Report what would be applied
    git diff | patchpilot info -              Summarize a diff from stdin
"""

import os
import sys
import argparse
from typing import Dict, List, Optional

from dotenv import find_dotenv, load_dotenv

from patchpilot.utils.logging_utils import logger, configure_third_party_logging, set_log_level
from patchpilot.utils.diff_utils import ApplyOptions, PatchApplicationError, apply_patch_text, describe_patch


def load_env():
    """Load PATCHPILOT_* settings from a .env file if one is found."""
    dotenv_path = find_dotenv(usecwd=True)
    if dotenv_path:
        load_dotenv(dotenv_path, override=False)
        logger.debug(f"Loaded environment variables from {dotenv_path}")


def read_patch(path: str) -> str:
    """Read the diff from a file, or from stdin when path is '-'."""
    if path == '-':
        return sys.stdin.read()
    with open(path, 'r', encoding='utf-8', newline='') as f:
        return f.read()


def resolve_path(root: str, relative_path: str) -> Optional[str]:
    """Resolve a path from the diff against root; None if it leaves root."""
    root = os.path.realpath(root)
    full_path = os.path.realpath(os.path.join(root, relative_path))
    if os.path.commonpath([root, full_path]) != root:
        logger.warning(f"Refusing path outside of root: {relative_path}")
        return None
    return full_path


def read_target_files(root: str, file_paths: List[str]) -> Dict[str, str]:
    """Read every existing target file under root, keyed by its diff path."""
    contents = {}
    for file_path in file_paths:
        full_path = resolve_path(root, file_path)
        if full_path and os.path.isfile(full_path):
            # newline='' keeps CRLF files intact
            with open(full_path, 'r', encoding='utf-8', newline='') as f:
                contents[file_path] = f.read()
    return contents


def build_options(args) -> ApplyOptions:
    auto_correct = False if getattr(args, 'no_auto_correct', False) else None
    return ApplyOptions.from_env(fuzz=getattr(args, 'fuzz', None), auto_correct_hunk_headers=auto_correct)


def cmd_apply(args) -> int:
    """Handle: patchpilot apply PATCH"""
    root = args.root or os.getcwd()
    options = build_options(args)
    patch_text = read_patch(args.patch)

    file_paths = [info.file_path for info in describe_patch(patch_text, options)]
    contents = read_target_files(root, file_paths)
    results = apply_patch_text(patch_text, contents, options)

    exit_code = 0
    for result in results:
        full_path = resolve_path(root, result.file_path)
        if result.applied and full_path is None:
            print(f"failed   {result.file_path}: path is outside of {root}")
            exit_code = 1
        elif result.applied:
            print(f"applied  {result.file_path} ({result.strategy_name})")
            if not args.dry_run:
                os.makedirs(os.path.dirname(full_path), exist_ok=True)
                with open(full_path, 'w', encoding='utf-8', newline='') as f:
                    f.write(result.patched_text)
        else:
            print(f"failed   {result.file_path}: {result.reason}")
            exit_code = 1

    if args.dry_run:
        print("Dry run: no files were written")

    return exit_code


def cmd_info(args) -> int:
    """Handle: patchpilot info PATCH"""
    root = args.root or os.getcwd()
    options = build_options(args)
    patch_text = read_patch(args.patch)

    infos = describe_patch(patch_text, options)
    existing = read_target_files(root, [info.file_path for info in infos])
    infos = describe_patch(patch_text, options, known_files=existing.keys())

    for info in infos:
        state = "exists" if info.exists else "missing"
        corrected = " (hunk headers corrected)" if info.hunk_headers_corrected else ""
        print(f"{info.file_path}: {info.hunks} hunk(s), +{info.additions} -{info.deletions}, "
              f"{state}{corrected}")
    return 0


def create_parser():
    """Create the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog='patchpilot',
        description='Apply unified diffs with fuzzy matching',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  patchpilot apply fix.diff                 Apply fix.diff to files under the cwd
  patchpilot apply fix.diff --fuzz 3        Allow more context drift
  patchpilot apply fix.diff --dry-run       Report what would be applied
  git diff | patchpilot info -              Summarize a diff from stdin
"""
    )

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    # apply
    apply_parser = subparsers.add_parser('apply', help='Apply a patch')
    apply_parser.add_argument('patch', help="Patch file, or '-' for stdin")
    apply_parser.add_argument('--root', help='Root directory (default: cwd)')
    apply_parser.add_argument('--fuzz', type=int, choices=range(0, 4), help='Fuzz factor 0-3 (default: 2)')
    apply_parser.add_argument('--no-auto-correct', action='store_true', help='Do not correct hunk header counts')
    apply_parser.add_argument('--dry-run', action='store_true', help='Do not write any files')
    apply_parser.add_argument('--verbose', '-v', action='store_true', help='Log every strategy attempt')
    apply_parser.set_defaults(func=cmd_apply)

    # info
    info_parser = subparsers.add_parser('info', help='Summarize a patch')
    info_parser.add_argument('patch', help="Patch file, or '-' for stdin")
    info_parser.add_argument('--root', help='Root directory (default: cwd)')
    info_parser.add_argument('--verbose', '-v', action='store_true', help='Enable debug logging')
    info_parser.set_defaults(func=cmd_info)

    return parser


def main(argv=None) -> int:
    """CLI entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        # No command - show help
        parser.print_help()
        return 0

    load_env()
    configure_third_party_logging()
    if getattr(args, 'verbose', False):
        set_log_level('DEBUG')

    try:
        return args.func(args)
    except KeyboardInterrupt:
        print()
        return 0
    except (PatchApplicationError, OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
