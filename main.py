"""
This script provides a command-line interface for:
- Backfilling smart-meter consumption from the Geredis API
- Summarising the resulting statistics
- Visualizing consumption trends

Usage:
    python main.py --help
    python main.py fetch
    python main.py fetch --first-day 2024-01-01
    python main.py plot
    python main.py test
"""

import argparse
import logging
import sys
from datetime import datetime
from typing import Optional

from geredis_pipeline.config import LOG_LEVEL, PASSWORD, USER
from geredis_pipeline.format import statistics_to_dataframe
from geredis_pipeline.linky_data import LinkyGeredisClient


def parse_day(value: Optional[str]):
    if value is None:
        return None
    return datetime.strptime(value, "%Y-%m-%d").date()


def backfill(first_day: Optional[str]):
    if not USER or not PASSWORD:
        print("❌ GEREDIS_USER and GEREDIS_PASSWORD must be set (environment or .env file).")
        sys.exit(1)
    try:
        day = parse_day(first_day)
    except ValueError as e:
        print(f"❌ Invalid date format. Use YYYY-MM-DD: {e}")
        sys.exit(1)
    client = LinkyGeredisClient(USER, PASSWORD)
    return statistics_to_dataframe(client.get_energy_data(day))


def fetch_command(first_day: Optional[str] = None) -> None:
    """Backfill consumption and print a summary."""
    print("🔄 Fetching consumption history from Geredis...")
    try:
        df = backfill(first_day)
    except Exception as e:
        print(f"❌ Error fetching consumption: {e}")
        sys.exit(1)

    if df.empty:
        print("⚠️  No data returned from API.")
        return

    print(f"📊 Total records: {len(df):,}")
    print(f"📅 Date range: {df['start'].min().strftime('%Y-%m-%d')} to {df['start'].max().strftime('%Y-%m-%d')}")
    print(f"⚡ Total consumption: {df['sum'].iloc[-1] / 1000:,.1f} kWh")
    print()
    print("📈 RECENT DATA (Last 10 records):")
    for _, row in df.tail(10).iterrows():
        print(f"  {row['start']} | {row['state']:>10.1f} Wh | {row['sum'] / 1000:>10.1f} kWh")


def plot_command(first_day: Optional[str] = None) -> None:
    """Backfill consumption and plot it."""
    try:
        df = backfill(first_day)
        if df.empty:
            print("⚠️  No data returned from API.")
            return
        from geredis_pipeline.plotting import plot_statistics

        print(f"📊 Plotting {len(df)} data points...")
        plot_statistics(df)
    except Exception as e:
        print(f"❌ Error generating plot: {e}")
        sys.exit(1)


def test_command() -> None:
    """Run the test suite."""
    print("🧪 Running test suite...")
    import subprocess
    result = subprocess.run([sys.executable, "-m", "unittest", "-v"], capture_output=True, text=True)
    print(result.stdout)
    if result.stderr:
        print(result.stderr)
    if result.returncode != 0:
        print("❌ Tests failed!")
        sys.exit(1)
    else:
        print("✅ All tests passed!")


def main():
    """Main entry point with command-line argument parsing."""
    parser = argparse.ArgumentParser(
        description="Geredis Smart-Meter Consumption Backfill",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py fetch                         # Backfill as much history as available
  python main.py fetch --first-day 2024-06-01  # Stop at a given date
  python main.py plot                          # Plot the backfilled consumption
  python main.py test                          # Run test suite
        """
    )
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging')

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    fetch_parser = subparsers.add_parser('fetch', help='Backfill consumption history')
    fetch_parser.add_argument('--first-day', help='Earliest date to import (YYYY-MM-DD)')

    plot_parser = subparsers.add_parser('plot', help='Plot backfilled consumption')
    plot_parser.add_argument('--first-day', help='Earliest date to import (YYYY-MM-DD)')

    subparsers.add_parser('test', help='Run the test suite')

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else LOG_LEVEL,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    print("🌟 Geredis Consumption Backfill")
    print("=" * 50)

    if args.command == 'fetch':
        fetch_command(args.first_day)
    elif args.command == 'plot':
        plot_command(args.first_day)
    elif args.command == 'test':
        test_command()


if __name__ == "__main__":
    main()
