"""
Superior Surf: Lake Superior surf report

Polls NDBC buoys and weather stations, the NWS marine forecast, the Windy
point-forecast model and NOAA water stations concurrently, blends what
comes back, and prints a surf verdict for a spot (or a multi-day outlook).

Sources: NDBC buoys + NDBC stations + NWS GLFLS + Windy GFS/GFS Wave + NOAA CO-OPS
Confidence: Buoy/Station(0.9) > Water station(0.8) > Windy(0.7) > NWS prose(0.6)
Failures: any provider may fail or time out; the report is still produced.

Usage:
    python main.py --spot stoneypoint
    python main.py --spot parkpoint --forecast --hours 72
    python main.py --spot lesterriver --json
"""

import argparse
import asyncio
import json
import logging
import os
import sys
from datetime import datetime
from zoneinfo import ZoneInfo

from colorama import Fore, Style, init
from dotenv import load_dotenv

from superior_surf.config import Settings
from superior_surf.orchestrator import FetchOrchestrator
from superior_surf.spots import all_spot_ids

init()
logger = logging.getLogger(__name__)

LIKELIHOOD_COLORS = {
    "Flat": Fore.WHITE,
    "Maybe Surf": Fore.YELLOW,
    "Good": Fore.GREEN,
    "Firing": Fore.MAGENTA,
    "Blown Out": Fore.RED,
}


def parse_args(argv=None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description='Superior Surf - Lake Superior surf conditions from blended buoy, model and NWS data'
    )
    parser.add_argument('--spot', default='stoneypoint',
                        help=f"Spot id ({', '.join(all_spot_ids())})")
    parser.add_argument('--forecast', action='store_true',
                        help='Print the multi-day outlook instead of current conditions')
    parser.add_argument('--hours', type=int, default=168,
                        help='Forecast horizon in hours (default: 168)')
    parser.add_argument('--json', action='store_true',
                        help='Emit raw JSON records')
    return parser.parse_args(argv)


def log_handlers():
    """File log under logs/ plus the console on stderr. stdout carries only report output."""
    os.makedirs("logs", exist_ok=True)
    return [
        logging.FileHandler("logs/superior_surf.log", mode='a', encoding='utf-8'),
        logging.StreamHandler(sys.stderr)
    ]


def configure_logging(level: str):
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=log_handlers()
    )


def print_banner():
    """Print the system banner."""
    print(f"\n{Fore.CYAN}{'=' * 60}{Style.RESET_ALL}")
    print(f"{Fore.CYAN}   SUPERIOR SURF: LAKE SUPERIOR CONDITIONS{Style.RESET_ALL}")
    print(f"{Fore.CYAN}   Buoys + Stations + NWS Marine + Windy + NOAA CO-OPS{Style.RESET_ALL}")
    print(f"{Fore.CYAN}{'=' * 60}{Style.RESET_ALL}")
    print()


def print_record(record: dict, tz: ZoneInfo):
    """Pretty-print one conditions record."""
    when = datetime.fromisoformat(record["timestamp"]).astimezone(tz)
    color = LIKELIHOOD_COLORS.get(record["surfLikelihood"], Fore.WHITE)
    waves = record["waveHeight"]
    wind = record["wind"]

    print(f"{Fore.WHITE}{when:%a %b %d %I:%M %p}{Style.RESET_ALL}  "
          f"{color}{record['surfLikelihood']:<10}{Style.RESET_ALL} "
          f"rating {record['rating']:>2}/10  "
          f"waves {waves['min']:.1f}-{waves['max']:.1f}ft  "
          f"wind {wind['speed']:.0f}mph {wind['direction']}")
    print(f"      {record['surfReport']}")
    for note in record["notes"]:
        print(f"      {Fore.YELLOW}-{Style.RESET_ALL} {note}")
    if waves["conflicts"] or wind["conflicts"]:
        for conflict in waves["conflicts"] + wind["conflicts"]:
            print(f"      {Fore.RED}! {conflict}{Style.RESET_ALL}")


async def main(args=None, settings=None):
    """Main entry point for Superior Surf."""
    args = args or parse_args()
    settings = settings or Settings.from_env(load_dotenv_file=False)
    tz = ZoneInfo(settings.timezone)

    if not args.json:
        print_banner()

    logger.info("=" * 60)
    logger.info(f"[main] Superior Surf run: spot={args.spot} forecast={args.forecast}")
    logger.info("=" * 60)

    orchestrator = FetchOrchestrator(settings)

    if args.forecast:
        records = await orchestrator.fetch_forecast(args.spot, hours=args.hours)
        if args.json:
            print(json.dumps(records, indent=2))
            return 0
        if not records:
            print(f"{Fore.RED}No forecast data available for {args.spot}.{Style.RESET_ALL}")
            return 1
        print(f"{Fore.WHITE}OUTLOOK: {records[0]['spotName']} ({len(records)} time slots){Style.RESET_ALL}")
        print("-" * 40)
        for record in records:
            print_record(record, tz)
        return 0

    record = await orchestrator.fetch_current(args.spot)
    if args.json:
        print(json.dumps(record, indent=2))
        return 0

    print(f"{Fore.WHITE}NOW: {record['spotName']}{Style.RESET_ALL}")
    print("-" * 40)
    print_record(record, tz)
    print(f"      {record['conditions']}")
    if "waterTemp" in record:
        print(f"      Water: {record['waterTemp']['value']:.0f}°F")
    if "waterLevel" in record:
        print(f"      Lake level: {record['waterLevel']['level']:.2f}ft ({record['waterLevel']['trend']})")
    for rec in record["recommendations"]:
        print(f"      {Fore.CYAN}*{Style.RESET_ALL} {rec}")
    return 0


if __name__ == "__main__":
    load_dotenv()
    settings = Settings.from_env(load_dotenv_file=False)
    configure_logging(settings.log_level)
    exit_code = asyncio.run(main(parse_args(), settings))
    sys.exit(exit_code)
