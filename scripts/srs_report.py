"""
Print the review dashboard for one user.

Shows aggregate statistics, the items due now and a day-by-day forecast.

Usage:
    python -m scripts.srs_report
    python -m scripts.srs_report --user alice --days 14
    python -m scripts.srs_report --catalogue data/words.json
"""

import argparse
import logging

from vocab_core import analytics, config, srs
from vocab_core.catalogue import InMemoryCatalogue


def main():
    parser = argparse.ArgumentParser(description="Show SRS review statistics")
    parser.add_argument("--user", default=None, help="User id (default: DEFAULT_USER_ID)")
    parser.add_argument("--days", type=int, default=7, help="Forecast window in days")
    parser.add_argument("--catalogue", default=None, help="JSON catalogue used to show words instead of ids")
    parser.add_argument("--log-level", default="WARNING", help="Logging level (default: WARNING)")
    args = parser.parse_args()

    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    store = srs.SqlRecordStore(user_id=args.user)
    service = srs.SRSService(store, settings=config.load_settings())
    catalogue = InMemoryCatalogue.from_json(args.catalogue) if args.catalogue else None

    dashboard = analytics.build_dashboard(service, days=args.days)
    stats = dashboard.statistics

    print("=" * 60)
    print(f"SRS report for user '{store.user_id}'")
    print("=" * 60)
    print(f"Tracked items:    {stats.total_items}")
    print(f"Due now:          {stats.due_today}")
    print(f"Due tomorrow:     {stats.due_tomorrow}")
    print(f"Total reviews:    {stats.total_reviews}")
    print(f"Average accuracy: {stats.average_accuracy:.1f}%")

    print("\nDue now (earliest first):")
    due_ids = service.get_due_items()
    if not due_ids:
        print("  (nothing due)")
    for item_id in due_ids:
        entry = catalogue.get(item_id) if catalogue else None
        label = f"{entry.word} [{item_id}]" if entry else item_id
        history = service.get_history(item_id)
        print(f"  {label}: {history.review_count} reviews, {history.accuracy:.0f}% correct")

    print(f"\nForecast (next {args.days} days):")
    for day, count in dashboard.due_forecast.items():
        print(f"  {day:%Y-%m-%d}: {count}")

    print("\nItems per level:")
    if dashboard.level_distribution.empty:
        print("  (no items)")
    for level, count in dashboard.level_distribution.items():
        print(f"  level {level}: {count}")


if __name__ == "__main__":
    main()
