"""Command-line interface for the ward roster pre-schedule engine."""

import argparse
import json
import logging
import sys
from datetime import date
from typing import Optional

from wardroster.aggregation.demand import DemandAggregator, submission_progress
from wardroster.config import EngineConfig, parse_date
from wardroster.domain.models import (
    GridStatus,
    GroupLimit,
    PreScheduleRequest,
    RequestStatus,
    ScheduleGrid,
    WishPreferences,
    WishSet,
    WriterCapabilities,
    month_dates,
    prior_month_tail,
)
from wardroster.errors import ConfigError, WardRosterError
from wardroster.lifecycle.store import InMemorySubmissionStore
from wardroster.output.pdf_generator import PDFGenerator
from wardroster.output.text_report import TextReportGenerator
from wardroster.service import PreScheduleService
from wardroster.statistics.completeness import check_group_limits, compute_completeness

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_INPUT_ERROR = 2


def setup_logging(verbose: bool = False) -> None:
    """Configure root logging for command-line use."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def _parse_demand(data: dict) -> dict[date, dict[str, int]]:
    return {parse_date(day): {code: int(n) for code, n in codes.items()} for day, codes in data.items()}


def _parse_row(data: dict) -> dict[date, str]:
    return {parse_date(day): code for day, code in data.items()}


def request_from_dict(data: dict) -> PreScheduleRequest:
    """Build a PreScheduleRequest from its JSON form."""
    open_date = data.get("open_date")
    close_date = data.get("close_date")
    return PreScheduleRequest(
        unit_id=data["unit_id"],
        year=int(data["year"]),
        month=int(data["month"]),
        status=RequestStatus(data.get("status", "draft")),
        open_date=parse_date(open_date) if open_date else None,
        close_date=parse_date(close_date) if close_date else None,
        max_off_days=int(data.get("max_off_days", 8)),
        max_holiday=int(data.get("max_holiday", 2)),
        shift_types_limit=int(data.get("shift_types_limit", 2)),
        allow_three_types_voluntary=bool(data.get("allow_three_types_voluntary", False)),
        reserved_staff_per_day=int(data.get("reserved_staff_per_day", 0)),
        group_limits={
            group: GroupLimit(
                min_per_shift=dict(limit.get("min_per_shift", {})),
                max_per_shift=dict(limit.get("max_per_shift", {})),
            )
            for group, limit in data.get("group_limits", {}).items()
        },
        demand_by_date=_parse_demand(data.get("demand_by_date", {})),
        participants=dict(data.get("participants", {})),
    )


def wish_set_from_dict(data: dict, request: PreScheduleRequest) -> WishSet:
    """Build a WishSet; year and month default to the request's."""
    prefs = data.get("preferences", {})
    return WishSet(
        staff_id=data["staff_id"],
        year=int(data.get("year", request.year)),
        month=int(data.get("month", request.month)),
        wishes=_parse_row(data.get("wishes", {})),
        notes=data.get("notes", ""),
        preferences=WishPreferences(
            priority1=prefs.get("priority1", ""),
            priority2=prefs.get("priority2", ""),
            priority3=prefs.get("priority3"),
        ),
        batch_preference=data.get("batch_preference"),
    )


def grid_from_dict(data: dict, carry_over_days: int = 6) -> ScheduleGrid:
    return ScheduleGrid(
        unit_id=data["unit_id"],
        year=int(data["year"]),
        month=int(data["month"]),
        assignments={sid: _parse_row(row) for sid, row in data.get("assignments", {}).items()},
        carry_over={sid: _parse_row(row) for sid, row in data.get("carry_over", {}).items()},
        status=GridStatus(data.get("status", "draft")),
        carry_over_days=carry_over_days,
    )


def _load_json(path: str) -> dict:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"{path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: expected a JSON object")
    return data


def _config_from(data: dict) -> EngineConfig:
    return EngineConfig.from_dict(data.get("config", {}))


def run_validate(
    snapshot_path: str,
    staff_id: str,
    today: Optional[date] = None,
    admin: bool = False,
) -> int:
    """Validate one staff member's wish set from a snapshot file."""
    data = _load_json(snapshot_path)
    config = _config_from(data)
    request = request_from_dict(data["request"])

    entries = {entry["staff_id"]: entry for entry in data.get("wish_sets", [])}
    if staff_id not in entries:
        raise ConfigError(f"No wish set for staff {staff_id!r} in {snapshot_path}")
    entry = entries[staff_id]
    wish_set = wish_set_from_dict(entry, request)
    capabilities = WriterCapabilities(
        can_batch=bool(entry.get("can_batch", False)),
        admin_override=admin,
    )

    result = config.validator().validate(wish_set, request, capabilities, today)

    print(f"Wishes of {staff_id} for {request.unit_id} {request.year:04d}-{request.month:02d}")
    if result.is_valid:
        print("  Validation: PASSED")
        return EXIT_OK

    print(f"  Validation: FAILED ({len(result.errors)} errors)")
    for error in result.errors:
        print(f"    - {error}")
    return EXIT_FAILED


def run_aggregate(snapshot_path: str, provisional_id: Optional[str] = None) -> int:
    """Print per-day wish counts against required headcount."""
    data = _load_json(snapshot_path)
    config = _config_from(data)
    catalog = config.catalog()
    request = request_from_dict(data["request"])
    wish_sets = [wish_set_from_dict(entry, request) for entry in data.get("wish_sets", [])]

    provisional = None
    accepted = wish_sets
    if provisional_id is not None:
        matches = [ws for ws in wish_sets if ws.staff_id == provisional_id]
        if not matches:
            raise ConfigError(f"No wish set for staff {provisional_id!r} in {snapshot_path}")
        provisional = matches[0]
        accepted = [ws for ws in wish_sets if ws.staff_id != provisional_id]

    demand = DemandAggregator(catalog).aggregate(accepted, request, provisional)

    print(f"Aggregate wishes for {request.unit_id} {request.year:04d}-{request.month:02d}")
    codes = sorted(
        {code for counts in demand.counts.values() for code in counts} | set(catalog.work_codes),
        key=catalog.sort_key,
    )
    print(f"{'Date':<12}" + "".join(f"{code:>7}" for code in codes))
    for day in month_dates(request.year, request.month):
        cells = []
        for code in codes:
            cell = str(demand.count(day, code))
            required = demand.required(day, code)
            if required:
                cell += "/" + str(required) + ("" if demand.met(day, code) else "!")
            cells.append(f"{cell:>7}")
        print(f"{day.isoformat():<12}" + "".join(cells))

    over = demand.over_capacity_dates()
    if over:
        print("\nRest wishes above off capacity on: " + ", ".join(d.isoformat() for d in over))

    progress = submission_progress(request, wish_sets)
    print(f"\nSubmitted: {len(progress.submitted)}  Pending: {len(progress.pending)}  "
          f"({progress.completion_rate:.0f}%)")
    if progress.pending:
        print("  Pending: " + ", ".join(progress.pending))
    return EXIT_OK


def run_stats(
    grid_path: str,
    pdf_path: Optional[str] = None,
    text_path: Optional[str] = None,
) -> int:
    """Print statistics for a finalized grid, optionally writing reports."""
    data = _load_json(grid_path)
    config = _config_from(data)
    catalog = config.catalog()
    calendar = config.calendar()
    grid = grid_from_dict(data, config.carry_over_days)
    demand_by_date = _parse_demand(data["demand_by_date"]) if "demand_by_date" in data else None

    text = TextReportGenerator(calendar=calendar, catalog=catalog)
    if text_path:
        text.generate(grid, text_path, demand_by_date)
    print(text.generate_to_string(grid, demand_by_date))

    if pdf_path:
        PDFGenerator(calendar=calendar, catalog=catalog).generate(grid, pdf_path, demand_by_date)
        print(f"\nPDF written to {pdf_path}")

    if "request" in data:
        request = request_from_dict(data["request"])
        for violation in check_group_limits(grid, request, catalog):
            print(f"Group limit: {violation}")

    if demand_by_date is not None:
        report = compute_completeness(grid, demand_by_date, catalog)
        if not report.complete:
            return EXIT_FAILED
    return EXIT_OK


def create_sample_month(year: int, month: int, staff_count: int = 8):
    """Create a sample request, wish sets and rotation grid for the demo."""
    days = month_dates(year, month)
    staff_ids = [f"N{i:02d}" for i in range(1, staff_count + 1)]
    participants = {sid: ("senior" if i < staff_count // 2 else "junior")
                    for i, sid in enumerate(staff_ids)}

    request = PreScheduleRequest(
        unit_id="ward-7",
        year=year,
        month=month,
        max_off_days=8,
        max_holiday=4,
        demand_by_date={day: {"D": 2, "E": 2, "N": 1} for day in days},
        participants=participants,
        group_limits={"senior": GroupLimit(min_per_shift={"D": 1})},
    )

    wish_sets = []
    for i, sid in enumerate(staff_ids):
        wishes = {days[(i * 3 + k) % len(days)]: "OFF" for k in range(4)}
        wishes[days[(i * 5 + 10) % len(days)]] = "NO_N"
        priorities = (["D", "E"], ["E", "D"], ["N", "D"])[i % 3]
        wish_sets.append(
            WishSet(
                staff_id=sid,
                year=year,
                month=month,
                wishes=wishes,
                preferences=WishPreferences(*priorities),
            )
        )

    # Fixed rotation for display only
    pattern = ["D", "D", "E", "E", "N", "OFF", "OFF"]
    assignments = {
        sid: {day: pattern[(i + offset) % len(pattern)] for i, day in enumerate(days)}
        for offset, sid in enumerate(staff_ids)
    }
    tail = prior_month_tail(year, month)
    carry_over = {
        sid: {day: pattern[(i + offset) % len(pattern)] for i, day in enumerate(tail)}
        for offset, sid in enumerate(staff_ids)
    }
    grid = ScheduleGrid(
        unit_id=request.unit_id,
        year=year,
        month=month,
        assignments=assignments,
        carry_over=carry_over,
    )
    return request, wish_sets, grid


def run_demo(staff_count: int = 8, output_path: Optional[str] = None) -> int:
    """Run a sample month through the whole pre-schedule flow."""
    today = date.today()
    year, month = (today.year + 1, 1) if today.month == 12 else (today.year, today.month + 1)
    print(f"Running demo pre-schedule for {year:04d}-{month:02d} with {staff_count} staff...")

    config = EngineConfig()
    request, wish_sets, grid = create_sample_month(year, month, staff_count)

    service = PreScheduleService(InMemorySubmissionStore(), validator=config.validator())
    service.create(request)
    service.open(request.key, close_date=today, open_date=today)

    for wish_set in wish_sets:
        result = service.submit(request.key, wish_set, WriterCapabilities(), today)
        status = "accepted" if result.is_valid else "rejected"
        print(f"  {wish_set.staff_id}: {status}")
        for error in result.errors:
            print(f"    - {error}")

    demand = service.preview_demand(request.key)
    unmet = demand.unmet()
    print(f"\nWish coverage: {len(unmet)} unmet (date, shift) requirements")

    service.close(request.key)
    service.lock(request.key)

    text = TextReportGenerator(calendar=config.calendar(), catalog=config.catalog())
    print()
    print(text.generate_to_string(grid, request.demand_by_date))

    if output_path:
        print(f"\nGenerating PDF: {output_path}")
        PDFGenerator(calendar=config.calendar(), catalog=config.catalog()).generate(
            grid, output_path, request.demand_by_date
        )
        print("  PDF created successfully!")
    return EXIT_OK


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for CLI."""
    parser = argparse.ArgumentParser(
        description="Ward Roster - monthly pre-schedule engine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s validate snapshot.json --staff N01      Check one staff member's wishes
  %(prog)s validate snapshot.json --staff N01 --admin
  %(prog)s aggregate snapshot.json                 Per-day wish counts
  %(prog)s aggregate snapshot.json --provisional N01
  %(prog)s stats grid.json --pdf month.pdf         Statistics of a final grid
  %(prog)s demo                                    Run a sample month
        """,
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    validate_parser = subparsers.add_parser("validate", help="Validate a wish set")
    validate_parser.add_argument("snapshot", help="Pre-schedule snapshot JSON file")
    validate_parser.add_argument("--staff", "-s", required=True, help="Staff ID to validate")
    validate_parser.add_argument("--today", type=str, help="Submission date (default: today)")
    validate_parser.add_argument(
        "--admin",
        action="store_true",
        help="Validate as a scheduler in administrative override mode",
    )

    aggregate_parser = subparsers.add_parser("aggregate", help="Aggregate wishes per day")
    aggregate_parser.add_argument("snapshot", help="Pre-schedule snapshot JSON file")
    aggregate_parser.add_argument(
        "--provisional", "-p",
        type=str,
        help="Treat this staff member's wish set as an uncommitted edit",
    )

    stats_parser = subparsers.add_parser("stats", help="Statistics of a finalized grid")
    stats_parser.add_argument("grid", help="Schedule grid JSON file")
    stats_parser.add_argument("--pdf", type=str, help="Output PDF file path")
    stats_parser.add_argument("--text", type=str, help="Output text report path")

    demo_parser = subparsers.add_parser("demo", help="Run a sample month end to end")
    demo_parser.add_argument(
        "--count", "-c",
        type=int,
        default=8,
        help="Number of staff to generate (default: 8)",
    )
    demo_parser.add_argument("--output", "-o", type=str, help="Output PDF file path")

    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    try:
        if args.command == "validate":
            today = parse_date(args.today) if args.today else None
            return run_validate(args.snapshot, args.staff, today, args.admin)
        elif args.command == "aggregate":
            return run_aggregate(args.snapshot, args.provisional)
        elif args.command == "stats":
            return run_stats(args.grid, args.pdf, args.text)
        elif args.command == "demo":
            return run_demo(args.count, args.output)
        else:
            parser.print_help()
            return EXIT_INPUT_ERROR
    except (WardRosterError, KeyError, ValueError, OSError) as e:
        logger.error("%s", e)
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_INPUT_ERROR


if __name__ == "__main__":
    sys.exit(main())
