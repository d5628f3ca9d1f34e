#!/usr/bin/env python3
"""
Fleet Poller - CLI.

Usage:
    # Poll a fleet described by a JSON or YAML work file
    fleet-poller poll work.yaml -o devices.json

    # Override concurrency and timing from the command line
    fleet-poller poll work.json --workers 8 --timeout 2 --retries 1

    # Check how a single device is identified and dispatched
    fleet-poller identify 192.168.1.1 --community public --snmp-version 2c

    python -m fleetpoll poll work.yaml -v
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any, Dict

import yaml

from . import __version__
from .config import PollerSettings
from .exceptions import PollError
from .logs import setup_logging
from .mappers.dispatch import MapperDispatchTable
from .models import ConfigTemplate, HostContext, HostDescriptor
from .poller import DeviceMappingPoller
from .snmp.identify import identify
from .snmp.session import build_session


def load_work(path: Path) -> Dict[str, Any]:
    """Load a {"hosts": [...], "templates": {...}} payload from JSON or YAML."""
    text = path.read_text(encoding='utf-8')
    if path.suffix.lower() in ('.yaml', '.yml'):
        work = yaml.safe_load(text)
    else:
        work = json.loads(text)

    if not isinstance(work, dict):
        raise ValueError(f"{path}: expected a mapping with 'hosts' and 'templates'")
    return work


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        prog='fleet-poller',
        description='Process-parallel SNMP device mapping',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Poll with settings from the environment / .env
  fleet-poller poll work.yaml

  # Write records to a file, 8 workers, 2 second timeout
  fleet-poller poll work.json -o devices.json --workers 8 --timeout 2

  # Identify a single device
  fleet-poller identify 10.0.0.1 -c public --snmp-version 2c
        """
    )
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    poll_parser = subparsers.add_parser('poll', help='Poll every host in a work file')
    poll_parser.add_argument('work_file', type=Path, help='JSON or YAML work file')
    poll_parser.add_argument(
        '-o', '--output',
        type=Path,
        help='Output JSON file (default: stdout)'
    )
    poll_parser.add_argument(
        '-w', '--workers',
        type=int,
        help='Worker processes (default: SNMP_FORKS or 25)'
    )
    poll_parser.add_argument(
        '-t', '--timeout',
        type=float,
        help='Per-query timeout in seconds (default: SNMP_TIMEOUT or 0.5)'
    )
    poll_parser.add_argument(
        '-r', '--retries',
        type=int,
        help='Retries per query (default: SNMP_RETRIES or 0)'
    )
    poll_parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Log per-host failures'
    )

    identify_parser = subparsers.add_parser(
        'identify',
        help='Identify one device and show the mapper it dispatches to'
    )
    identify_parser.add_argument('target', help='IP address or hostname')
    identify_parser.add_argument(
        '-c', '--community',
        default='public',
        help='SNMP community string (default: public)'
    )
    identify_parser.add_argument(
        '--snmp-version',
        dest='snmp_version',
        choices=['1', '2c'],
        default='2c',
        help='SNMP version (default: 2c)'
    )
    identify_parser.add_argument(
        '-t', '--timeout',
        type=float,
        default=2.0,
        help='Per-query timeout in seconds (default: 2)'
    )
    identify_parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable verbose output'
    )

    return parser


def cmd_poll(args) -> int:
    """Poll a work file and emit the records as JSON."""
    try:
        work = load_work(args.work_file)
    except (OSError, ValueError, yaml.YAMLError) as e:
        print(f"ERROR: Cannot load work file: {e}", file=sys.stderr)
        return 1

    settings = PollerSettings.from_env(
        workers=args.workers,
        timeout=args.timeout,
        retries=args.retries,
        debug=True if args.verbose else None,
    )

    try:
        records = DeviceMappingPoller(settings).poll_work(work)
    except ValueError as e:
        print(f"ERROR: Invalid work payload: {e}", file=sys.stderr)
        return 1

    output = json.dumps(records, indent=2)
    if args.output:
        args.output.write_text(output, encoding='utf-8')
    else:
        print(output)

    total = len(work.get('hosts') or [])
    print(f"Mapped {len(records)}/{total} hosts", file=sys.stderr)
    if args.output:
        print(f"Saved to: {args.output}", file=sys.stderr)
    return 0


async def cmd_identify(args) -> int:
    """Run session -> identify -> dispatch against one host."""
    settings = PollerSettings(timeout=args.timeout)
    host = HostDescriptor(id=args.target, ip=args.target, template_id='cli')
    template = ConfigTemplate(snmp_version=args.snmp_version, snmp_community=args.community)
    dispatch = MapperDispatchTable()

    print(f"Target:    {args.target}")
    print(f"Version:   {args.snmp_version}")
    print(f"Timeout:   {args.timeout}s")
    print()

    try:
        async with build_session(host, template, settings) as session:
            type_identifier = await identify(session)
            context = HostContext(host=host, type_identifier=type_identifier)
            strategy = await dispatch.resolve(session, context)
    except PollError as e:
        print(f"ERROR: {type(e).__name__}: {e}")
        return 1

    known = type_identifier in dispatch
    print(f"sysObjectID: {type_identifier}")
    print(f"Mapper:      {strategy.name}{'' if known else ' (fallback)'}")
    return 0


def main():
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return 1

    setup_logging('DEBUG' if args.verbose else 'INFO')

    if args.command == 'poll':
        return cmd_poll(args)
    elif args.command == 'identify':
        return asyncio.run(cmd_identify(args))
    else:
        parser.print_help()
        return 1


if __name__ == '__main__':
    sys.exit(main())
