from __future__ import annotations

import argparse
import asyncio
import json
import sys

from rich import print as rprint

from update_notifier import __version__
from update_notifier.config import DEFAULT_DISTRIBUTION_TAG, ONE_DAY_MS, NotifierConfig
from update_notifier.coordinator import UpdateNotifier
from update_notifier.errors import ConfigurationError
from update_notifier.ports.registry_gateway import LookupFailure


def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="update-notifier",
        description="Check whether a newer release of a package is available",
    )
    parser.add_argument(
        "-v", "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument("package_name", metavar="PACKAGE")
    parser.add_argument("package_version", metavar="VERSION")
    parser.add_argument(
        "--interval",
        type=int,
        default=ONE_DAY_MS,
        metavar="MS",
        help="Minimum milliseconds between background checks (negative disables them).",
    )
    parser.add_argument(
        "--dist-tag",
        default=DEFAULT_DISTRIBUTION_TAG,
        metavar="TAG",
        help="Release channel to compare against; anything but 'latest' "
        "includes pre-releases.",
    )
    parser.add_argument("--registry", choices=["pypi", "github"], default="pypi")
    parser.add_argument(
        "--github-repository",
        metavar="OWNER/REPO",
        help="Repository whose releases are checked when --registry=github.",
    )
    parser.add_argument(
        "--allow-in-script",
        action="store_true",
        help="Show the notice even when running inside a package manager script.",
    )
    parser.add_argument(
        "--no-defer",
        action="store_true",
        help="Print the notice right away instead of when the process exits.",
    )

    action_group = parser.add_mutually_exclusive_group()
    action_group.add_argument(
        "--fetch",
        action="store_true",
        help="Query the registry now and print the result as JSON.",
    )
    action_group.add_argument(
        "--opt-out", action="store_true", help="Stop checking for this package."
    )
    action_group.add_argument(
        "--opt-in", action="store_true", help="Resume checking for this package."
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = parse_arguments(argv)

    try:
        config = NotifierConfig.from_options(
            package_name=args.package_name,
            package_version=args.package_version,
            update_check_interval_ms=args.interval,
            distribution_tag=args.dist_tag,
            allow_notify_in_package_manager_script=args.allow_in_script,
            registry=args.registry,
            github_repository=args.github_repository,
        )
    except ConfigurationError as e:
        rprint(f"[red]Error: {e}[/]")
        sys.exit(2)

    notifier = UpdateNotifier(config)

    if args.fetch:
        try:
            update = asyncio.run(notifier.fetch_info())
        except LookupFailure as e:
            rprint(f"[red]Error: {e}[/]")
            sys.exit(1)
        print(json.dumps(update.to_record(), indent=2))
        return

    if args.opt_out or args.opt_in:
        if notifier.store is None:
            rprint("[yellow]Update checks are disabled in this environment.[/]")
            sys.exit(1)
        if args.opt_out:
            notifier.opt_out()
        else:
            notifier.opt_in()
        state = "disabled" if args.opt_out else "enabled"
        rprint(f"Update checks for {config.package_name} are now {state}.")
        return

    notifier.check()
    notifier.notify(defer=not args.no_defer)


if __name__ == "__main__":
    main()
