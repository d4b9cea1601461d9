#!/usr/bin/env python3
"""
schedking - automated appointment booking for a scheduling portal.

Main entry point for the application.
"""

import argparse
import asyncio
import logging
import sys
from typing import Dict, List

from pydantic import ValidationError

from schedking.core.exceptions import ConfigurationError, SchedulerError
from schedking.core.logger import setup_structured_logging
from schedking.core.settings import SchedulerSettings, get_settings
from schedking.services.portal import Appointment, Scheduler, UserIdentity


def build_identity(settings: SchedulerSettings) -> UserIdentity:
    """
    Build the lookup identity from settings.

    Raises:
        ConfigurationError: If an identity field is missing or invalid
    """
    if not settings.has_identity():
        raise ConfigurationError(
            "FIRST_NAME, LAST_NAME, BIRTHDATE, EMAIL and PHONE must all be set"
        )
    try:
        return UserIdentity(
            first_name=settings.first_name,
            last_name=settings.last_name,
            birthdate=settings.birthdate,
            email=settings.email,
            phone=settings.phone,
        )
    except ValidationError as e:
        raise ConfigurationError(f"Invalid identity settings: {e}")


def selection_from_args(args: argparse.Namespace) -> Dict[str, str]:
    """Collect the filter options given on the command line."""
    selection = {
        "date_filter": args.date,
        "appointment_type_filter": args.type,
        "trainer_filter": args.trainer,
    }
    return {key: value for key, value in selection.items() if value}


def describe(appointment: Appointment) -> str:
    """One line summary of an appointment."""
    when = appointment.datetime.strftime("%Y-%m-%d %H:%M") if appointment.datetime else "?"
    return (
        f"{when}  {appointment.appointment_type_name or appointment.appointment_type_id}  "
        f"{appointment.trainer_name or appointment.trainer_id}  "
        f"[{appointment.state.value}] id={appointment.appointment_id or '-'}"
    )


async def run(args: argparse.Namespace, settings: SchedulerSettings) -> int:
    """Run one command against the portal."""
    logger = logging.getLogger(__name__)
    identity = build_identity(settings)
    location_id = args.location or settings.location_id
    if not location_id:
        raise ConfigurationError("A location id is required (--location or LOCATION_ID)")

    async with Scheduler(
        location_id, settings.scheduler_url, settings.request_timeout
    ) as scheduler:
        await scheduler.create_session()
        booked = await scheduler.get_booked_appointments(identity)

        if args.command == "booked":
            for appointment in booked:
                print(describe(appointment))
            return 0

        if args.command == "cancel":
            for appointment in booked:
                if appointment.appointment_id == args.appointment_id:
                    await appointment.cancel()
                    print(f"Cancelled {describe(appointment)}")
                    return 0
            logger.error(f"No booked appointment with id {args.appointment_id}")
            return 1

        times: List[Appointment] = await scheduler.search(selection_from_args(args))

        if args.command == "search":
            for appointment in times:
                print(describe(appointment))
            return 0

        # book
        for appointment in times:
            if appointment.datetime and appointment.datetime.strftime("%H:%M") == args.time:
                await appointment.book()
                print(f"Booked {describe(appointment)}")
                return 0
        logger.error(f"No open time at {args.time} for the selected filters")
        return 1


def build_parser() -> argparse.ArgumentParser:
    """Build the command line parser."""
    parser = argparse.ArgumentParser(description="schedking - scheduling portal automation")
    parser.add_argument("--location", help="Location id (default: LOCATION_ID)")
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: LOG_LEVEL)",
    )

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("booked", help="List booked appointments")

    for name, help_text in (("search", "List open times"), ("book", "Book an open time")):
        command = commands.add_parser(name, help=help_text)
        command.add_argument("--date", help="Date option id or label")
        command.add_argument("--type", help="Appointment type id or (partial) name")
        command.add_argument("--trainer", help="Trainer id or (partial) name")
        if name == "book":
            command.add_argument("--time", required=True, help="Start time, 24 hour HH:MM")

    cancel = commands.add_parser("cancel", help="Cancel a booked appointment")
    cancel.add_argument("appointment_id", help="Id of the booked appointment")
    return parser


def main() -> None:
    """Main entry point."""
    args = build_parser().parse_args()

    try:
        settings = get_settings()
    except ValidationError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        sys.exit(2)

    setup_structured_logging(
        args.log_level or settings.log_level,
        json_format=settings.log_json,
        diagnose=settings.is_development(),
    )
    logger = logging.getLogger(__name__)

    try:
        sys.exit(asyncio.run(run(args, settings)))
    except SchedulerError as e:
        logger.error(f"{e.__class__.__name__}: {e.message}")
        sys.exit(1)


if __name__ == "__main__":
    main()
