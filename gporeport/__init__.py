#! /usr/bin/env python3

import argparse
import os
import sys
import logging

from platformdirs import user_config_dir
from gporeport.utils.utils import load_yaml_config
from gporeport.core import GPOReportCore


def add_output_arguments(command, extension_keys):
    """
    Filters and output options shared by the report and parse commands
    """

    command.add_argument("--debug", action="store_true", help="Enable DEBUG output")

    filters = command.add_argument_group(title="Filters")
    filters.add_argument(
        "--extension",
        metavar="",
        help="Filter by extension : " + ", ".join(extension_keys),
        choices=extension_keys,
        nargs="+",
    )
    filters.add_argument(
        "--scope",
        metavar="",
        help="Filter by scope : computer, user",
        choices=["computer", "user"],
        nargs="+",
    )
    filters.add_argument("--search", help="Only keep settings with a value matching a regex pattern")

    output = command.add_argument_group(title="Output options")
    output.add_argument("--json", action="store_true", help="Display results in JSON format")
    output.add_argument("--csv", dest="csv_path", metavar="FILE", help="Export the settings to a CSV file")
    output.add_argument("--output", dest="json_path", metavar="FILE", help="Export the settings to a JSON file")


def main():

    # Create configuration directory if it does not exist
    os.makedirs(user_config_dir("gporeport"), exist_ok=True)

    # YAML configuration
    settings = load_yaml_config("gporeport.config", "settings.yaml")
    extensions = load_yaml_config("gporeport.config", "extensions.yaml")
    extension_keys = [extension["key"] for extension in extensions.values()]

    parser = argparse.ArgumentParser(description="GPOReport - Group Policy Object settings reporter")

    # Platform
    platform = parser.add_argument_group("Platform settings")
    platform.add_argument(
        "--powershell",
        default=settings.get("powershell"),
        metavar="EXE",
        help=f"PowerShell executable with the GroupPolicy module (default: {settings.get('powershell')})",
    )
    platform.add_argument(
        "--domain",
        default=settings.get("domain"),
        metavar="DOMAIN",
        help="Domain to query (default: domain of the current user)",
    )
    platform.add_argument(
        "--server",
        default=settings.get("server"),
        metavar="DC",
        help="Domain controller to contact (default: any domain controller)",
    )
    platform.add_argument(
        "--timeout",
        default=settings.get("timeout"),
        metavar="SECONDS",
        help=f"Timeout of a report generation (default: {settings.get('timeout')})",
        type=int,
    )
    platform.add_argument(
        "--workers",
        default=settings.get("workers"),
        metavar="N",
        help=f"Reports generated in parallel (default: {settings.get('workers')})",
        type=int,
    )

    # Commands
    subparsers = parser.add_subparsers(title="Commands", dest="command", required=True)

    # List command
    list_command = subparsers.add_parser("list", help="List the GPOs of the domain")
    list_command.add_argument("--debug", action="store_true", help="Enable DEBUG output")
    list_command.add_argument("--json", action="store_true", help="Display results in JSON format")

    # Report command
    report = subparsers.add_parser("report", help="Generate GPO reports and display their settings")
    report_target = report.add_argument_group(title="Target GPOs")
    report_target.add_argument("--name", metavar="", help="One or more GPO display names", nargs="+")
    report_target.add_argument("--guid", metavar="", help="One or more GPO GUIDs", nargs="+")
    report_target.add_argument("--all", dest="all_gpos", action="store_true", help="Every GPO of the domain")
    add_output_arguments(report, extension_keys)

    # Parse command
    parse = subparsers.add_parser("parse", help="Display the settings of saved XML reports")
    parse.add_argument("paths", metavar="PATH", nargs="+", help="XML report files or directories")
    add_output_arguments(parse, extension_keys)

    if len(sys.argv) == 1:
        parser.print_help()
        sys.exit(1)
    args = parser.parse_args()

    # Logging options
    logger = logging.getLogger()
    logger.setLevel(logging.INFO)
    stream = logging.StreamHandler(sys.stderr)
    stream.setLevel(logging.DEBUG)
    formatter = logging.Formatter("%(levelname)s: %(message)s")
    stream.setFormatter(formatter)
    logger.addHandler(stream)

    if args.debug is True:
        logger.setLevel(logging.DEBUG)

    if args.command == "report" and not (args.name or args.guid or args.all_gpos):
        logging.error("Specify the GPOs with --name, --guid or --all")
        sys.exit(1)

    gporeport_core = GPOReportCore(
        args.powershell,
        args.domain,
        args.server,
        args.timeout,
        args.workers,
    )

    if args.command == "list":
        gporeport_core.list_gpos(args.json)

    elif args.command == "report":
        gporeport_core.report(
            args.name,
            args.guid,
            args.all_gpos,
            args.extension,
            args.scope,
            args.search,
            args.json,
            args.csv_path,
            args.json_path,
        )

    elif args.command == "parse":
        gporeport_core.parse(
            args.paths,
            args.extension,
            args.scope,
            args.search,
            args.json,
            args.csv_path,
            args.json_path,
        )
