#!/usr/bin/env python3
"""Command-line front end for the procivlog trip log.

Usage
-----
::

    python scripts/triplog.py vehicles add AB123CD "Fiat Ducato"
    python scripts/triplog.py volunteers add Mario Rossi
    python scripts/triplog.py set-sink https://script.google.com/macros/s/XXX/exec
    python scripts/triplog.py start --vehicle <id> --volunteer <id> --km 120.4 --destination Base
    python scripts/triplog.py end --km 245.6 --refueled --maintenance "Front tyre worn"
    python scripts/triplog.py sync
    python scripts/triplog.py history --limit 5

Options::

    --data-dir DIR   Where the trip log is stored (default: $PROCIV_DATA_DIR or ~/.procivlog)
    --json           Output machine-readable JSON
    --verbose, -v    Enable debug logging
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from procivlog import ProcivConfig, ProcivError, TripLogClient  # noqa: E402
from procivlog._constants import RECENT_TRIPS_LIMIT  # noqa: E402
from procivlog.models import Trip  # noqa: E402


def _section(title: str) -> str:
    line = "=" * 60
    return f"\n{line}\n  {title}\n{line}"


def _trip_line(log: TripLogClient, trip: Trip) -> str:
    plate = log.rosters.vehicle_plate(trip.vehicle_id)
    sync_mark = "●" if trip.synced else " "
    if trip.is_active:
        return f"{sync_mark} {trip.id}  {plate:<10} {trip.destination:<24} IN SERVICE since {trip.start_km} km"
    return f"{sync_mark} {trip.id}  {plate:<10} {trip.destination:<24} {trip.display_distance_km:>6} KM"


def _emit(args: argparse.Namespace, data: Any, lines: list[str]) -> None:
    if args.json_mode:
        print(json.dumps(data, indent=2, default=str, ensure_ascii=False))
    else:
        print("\n".join(lines))


async def _run(args: argparse.Namespace) -> int:
    overrides: dict[str, Any] = {"auto_sync": False}
    if args.data_dir:
        overrides["data_dir"] = args.data_dir
    config = ProcivConfig.from_env(**overrides)

    async with TripLogClient(config) as log:
        if args.command == "start":
            trip = log.start_trip(
                args.vehicle,
                args.volunteer,
                args.km,
                args.destination,
                reason=args.reason,
                notes=args.notes,
                refueling_done=args.refueled,
            )
            _emit(args, trip.to_record(), [f"Started {trip.id} ({trip.driver_name}, {trip.start_km} km)"])

        elif args.command == "end":
            active = log.active_trip
            if active is None:
                print("No active trip", file=sys.stderr)
                return 1
            maintenance = {"needed": bool(args.maintenance), "description": args.maintenance or ""}
            trip = await log.end_trip(
                active,
                args.km,
                refueling_done=args.refueled,
                maintenance=maintenance,
                notes=args.notes if args.notes is not None else active.notes,
            )
            lines = [f"Ended {trip.id}: {trip.distance_km} km travelled"]
            if log.store.settings().is_configured and not args.no_sync:
                outcome = await log.dispatcher.sync_one(trip)
                lines.append(f"Sync: {outcome.value}")
            _emit(args, (log.store.find_trip(trip.id) or trip).to_record(), lines)

        elif args.command == "status":
            active = log.active_trip
            pending = log.lifecycle.pending_trips()
            lines = [_section("procivlog status")]
            lines.append(f"  active    : {_trip_line(log, active) if active else '-'}")
            lines.append(f"  pending   : {len(pending)}")
            lines.append(f"  sink      : {'configured' if log.store.settings().is_configured else 'not configured'}")
            _emit(
                args,
                {"active": active.to_record() if active else None, "pending": len(pending)},
                lines,
            )

        elif args.command == "history":
            trips = log.lifecycle.completed_trips(limit=args.limit)
            _emit(args, [t.to_record() for t in trips], [_trip_line(log, t) for t in trips] or ["(no trips)"])

        elif args.command == "sync":
            if not log.store.settings().is_configured:
                print("No sink configured (use set-sink)", file=sys.stderr)
                return 1
            summary = await log.sync_pending()
            _emit(
                args,
                {"succeeded": summary.succeeded, "skipped": summary.skipped, "failed": summary.failed},
                [f"Sent {summary.succeeded}, skipped {summary.skipped}, failed {summary.failed}"],
            )
            return 0 if summary.failed == 0 else 2

        elif args.command == "set-sink":
            settings = log.set_sink_url(args.url)
            _emit(args, settings.to_record(), ["Sink configured" if settings.is_configured else "Sink cleared"])

        elif args.command == "vehicles":
            if args.action == "add":
                vehicle = log.add_vehicle(args.plate, args.model)
                _emit(args, vehicle.to_record(), [f"Added {vehicle.id}: {vehicle.label}"])
            elif args.action == "remove":
                removed = log.remove_vehicle(args.id)
                _emit(args, {"removed": removed}, ["Removed" if removed else "Not found"])
            else:
                vehicles = log.rosters.vehicles()
                _emit(args, [v.to_record() for v in vehicles], [f"{v.id}  {v.label}" for v in vehicles])

        elif args.command == "volunteers":
            if args.action == "add":
                volunteer = log.add_volunteer(args.name, args.surname)
                _emit(args, volunteer.to_record(), [f"Added {volunteer.id}: {volunteer.full_name}"])
            elif args.action == "remove":
                removed = log.remove_volunteer(args.id)
                _emit(args, {"removed": removed}, ["Removed" if removed else "Not found"])
            else:
                volunteers = log.rosters.volunteers()
                _emit(args, [v.to_record() for v in volunteers], [f"{v.id}  {v.full_name}" for v in volunteers])

    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Civil-protection vehicle trip log.")
    parser.add_argument("--data-dir", help="Directory holding the trip log")
    parser.add_argument("--json", action="store_true", dest="json_mode", help="Output machine-readable JSON")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    start = sub.add_parser("start", help="Start a trip")
    start.add_argument("--vehicle", required=True, help="Vehicle id")
    start.add_argument("--volunteer", required=True, help="Volunteer id (driver)")
    start.add_argument("--km", required=True, help="Odometer at departure")
    start.add_argument("--destination", required=True)
    start.add_argument("--reason", default="")
    start.add_argument("--notes", default="")
    start.add_argument("--refueled", action="store_true")

    end = sub.add_parser("end", help="End the active trip")
    end.add_argument("--km", required=True, help="Odometer on return")
    end.add_argument("--refueled", action="store_true")
    end.add_argument("--maintenance", help="Flag maintenance with this description")
    end.add_argument("--notes", help="Notes (default: keep the notes given at start)")
    end.add_argument("--no-sync", action="store_true", help="Do not send the trip right away")

    sub.add_parser("status", help="Show active trip and pending count")

    history = sub.add_parser("history", help="List completed trips")
    history.add_argument("--limit", type=int, default=RECENT_TRIPS_LIMIT)

    sub.add_parser("sync", help="Send pending trips to the sink")

    set_sink = sub.add_parser("set-sink", help="Set the sink URL (empty to clear)")
    set_sink.add_argument("url", nargs="?", default="")

    vehicles = sub.add_parser("vehicles", help="Manage the vehicle roster")
    vehicles_sub = vehicles.add_subparsers(dest="action", required=True)
    vehicles_sub.add_parser("list")
    v_add = vehicles_sub.add_parser("add")
    v_add.add_argument("plate")
    v_add.add_argument("model")
    v_remove = vehicles_sub.add_parser("remove")
    v_remove.add_argument("id")

    volunteers = sub.add_parser("volunteers", help="Manage the volunteer roster")
    volunteers_sub = volunteers.add_subparsers(dest="action", required=True)
    volunteers_sub.add_parser("list")
    p_add = volunteers_sub.add_parser("add")
    p_add.add_argument("name")
    p_add.add_argument("surname")
    p_remove = volunteers_sub.add_parser("remove")
    p_remove.add_argument("id")

    return parser


def main() -> None:
    args = _build_parser().parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    try:
        code = asyncio.run(_run(args))
    except ProcivError as exc:
        print(f"error: {exc}", file=sys.stderr)
        code = 1
    sys.exit(code)


if __name__ == "__main__":
    main()
