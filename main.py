import argparse
import sys

from planora.core.errors import PreferenceValidationError
from planora.core.orchestrator import ItineraryOrchestrator


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Planora itinerary planner")
    parser.add_argument("--destination", type=str, required=True, help="Where to travel")
    parser.add_argument("--start-date", type=str, required=True, help="YYYY-MM-DD")
    parser.add_argument("--end-date", type=str, required=True, help="YYYY-MM-DD")
    parser.add_argument(
        "--budget", type=str, default="medium", help="low, medium or high (or saver/smart/luxe)"
    )
    parser.add_argument(
        "--interests",
        type=str,
        nargs="+",
        default=[],
        help="List of interests (e.g. food culture)",
    )
    parser.add_argument("--group-type", type=str, default=None)
    parser.add_argument("--special-requests", type=str, default=None)
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    request = {
        "destination": args.destination,
        "startDate": args.start_date,
        "endDate": args.end_date,
        "budget": args.budget,
        "interests": args.interests,
        "groupType": args.group_type,
        "specialRequests": args.special_requests,
    }

    print(f"--- Planning trip to {args.destination} ({args.start_date} to {args.end_date}) ---")
    if args.interests:
        print(f"Interests: {', '.join(args.interests)}")

    try:
        itinerary = ItineraryOrchestrator().plan(request)
    except PreferenceValidationError as e:
        print("Invalid trip request:", file=sys.stderr)
        for field, message in e.field_errors.items():
            print(f"  {field}: {message}", file=sys.stderr)
        return 2

    print("\n=== Final Itinerary ===")
    print(f"{itinerary.destination} | {itinerary.duration} | {itinerary.budget} budget")
    print(itinerary.overview)
    for day in itinerary.days:
        print(f"\n{day.title} ({day.date})")
        if day.summary:
            print(f"  {day.summary}")
        for act in day.activities:
            print(f"  - {act.time}  {act.title}")
    if itinerary.tips:
        print("\nTips:")
        for tip in itinerary.tips:
            print(f"  * {tip}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
