#!/usr/bin/env python3

# Command-line access to properties files: read, edit, export, lint and
# synchronize them while keeping their layout.

import argparse
import logging
import sys
from typing import List, Optional

from tqdm import tqdm

from propfile.app_config import AppConfig, configure_properties, load_app_config
from propfile.properties import Properties, PropertiesFormatError
from propfile.properties_validator import (
    check_encoding_and_mojibake,
    lint_properties_file,
    synchronize_keys
)

logger = logging.getLogger("propfile.tool")


def _load(path: str, config: AppConfig) -> Properties:
    return configure_properties(Properties.from_file(path), config)


def _save(properties: Properties, config: AppConfig) -> None:
    if config.dry_run:
        logger.info("[Dry Run] Would write '%s'.", properties.source_file)
        return
    properties.save()


def cmd_get(args, config: AppConfig) -> int:
    value = _load(args.file, config).get(args.key, default=args.default)
    if value is None:
        logger.error("Key '%s' not found in '%s'.", args.key, args.file)
        return 1
    print(value)
    return 0


def cmd_set(args, config: AppConfig) -> int:
    properties = _load(args.file, config)
    if not properties.add(args.key, args.value, overwrite_existing=not args.no_overwrite):
        logger.warning("Key '%s' already exists in '%s'; left untouched.", args.key, args.file)
        return 1
    _save(properties, config)
    return 0


def cmd_delete(args, config: AppConfig) -> int:
    properties = _load(args.file, config)
    if not properties.delete(args.key):
        logger.error("Key '%s' not found in '%s'.", args.key, args.file)
        return 1
    _save(properties, config)
    return 0


def cmd_to_json(args, config: AppConfig) -> int:
    print(_load(args.file, config).to_json(prefix=args.prefix, suffix=args.suffix))
    return 0


def cmd_merge_json(args, config: AppConfig) -> int:
    properties = _load(args.file, config)
    with open(args.json_file, 'r', encoding='utf-8') as f:
        properties.merge_json(f.read(), overwrite_existing=not args.no_overwrite)
    _save(properties, config)
    return 0


def cmd_lint(args, config: AppConfig) -> int:
    findings = {}
    for path in tqdm(args.files, desc="Linting", unit="file", disable=len(args.files) < 2):
        errors = check_encoding_and_mojibake(path) + lint_properties_file(path)
        if errors:
            findings[path] = errors

    for path, errors in findings.items():
        for error in errors:
            logger.error("%s: %s", path, error)
    if findings:
        logger.info("%d of %d file(s) have issues.", len(findings), len(args.files))
        return 1
    logger.info("All %d file(s) are clean.", len(args.files))
    return 0


def cmd_sync(args, config: AppConfig) -> int:
    if synchronize_keys(args.target, args.source, dry_run=config.dry_run):
        logger.info("Synchronized keys of '%s' with '%s'.", args.target, args.source)
    else:
        logger.info("Keys of '%s' already match '%s'.", args.target, args.source)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="propfile", description="Read and edit .properties files, keeping their layout.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    get_parser = subparsers.add_parser("get", help="Print the value of a key.")
    get_parser.add_argument("file")
    get_parser.add_argument("key")
    get_parser.add_argument("--default", help="Value printed when the key is missing.")
    get_parser.set_defaults(handler=cmd_get)

    set_parser = subparsers.add_parser("set", help="Add or update a key.")
    set_parser.add_argument("file")
    set_parser.add_argument("key")
    set_parser.add_argument("value")
    set_parser.add_argument("--no-overwrite", action="store_true", help="Leave an existing key untouched.")
    set_parser.set_defaults(handler=cmd_set)

    delete_parser = subparsers.add_parser("delete", help="Remove a key.")
    delete_parser.add_argument("file")
    delete_parser.add_argument("key")
    delete_parser.set_defaults(handler=cmd_delete)

    json_parser = subparsers.add_parser("to-json", help="Export the properties as a JSON map.")
    json_parser.add_argument("file")
    json_parser.add_argument("--prefix")
    json_parser.add_argument("--suffix")
    json_parser.set_defaults(handler=cmd_to_json)

    merge_parser = subparsers.add_parser("merge-json", help="Merge a flat JSON map into a file.")
    merge_parser.add_argument("file")
    merge_parser.add_argument("json_file")
    merge_parser.add_argument("--no-overwrite", action="store_true", help="Keep the values of existing keys.")
    merge_parser.set_defaults(handler=cmd_merge_json)

    lint_parser = subparsers.add_parser("lint", help="Check files for encoding and syntax issues.")
    lint_parser.add_argument("files", nargs="+")
    lint_parser.set_defaults(handler=cmd_lint)

    sync_parser = subparsers.add_parser("sync", help="Make the keys of TARGET match those of SOURCE.")
    sync_parser.add_argument("target")
    sync_parser.add_argument("source")
    sync_parser.set_defaults(handler=cmd_sync)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = load_app_config()
    try:
        return args.handler(args, config)
    except (FileNotFoundError, PropertiesFormatError) as e:
        logger.error("%s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
