#!/usr/bin/env python3
# backend/scripts/recalculate_snapshot.py
"""
Refresh-process entry point.

Reads a serialized RefreshSnapshot and a price file, writes the
recalculated PortfolioDisplay. Uses only the refresh path: it never sees
the ledger and never imports the accounting engine.

Exit codes: 0 on success, 2 if the snapshot or the price file cannot be read.

Price file format (decimal strings or numbers):
    {"bitcoin": "48000", "ethereum": "2500.5"}

Usage:
    python scripts/recalculate_snapshot.py \\
        --snapshot snapshot.json --prices prices.json --output display.json
"""
import argparse
import json
import logging
import sys
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from pathlib import Path

# Setup path to import folio_engine modules
backend_dir = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(backend_dir))

from folio_engine.models import AssetQuote
from folio_engine.services.exceptions import SnapshotError
from folio_engine.services.refresh.codec import decode_snapshot, encode_display
from folio_engine.services.refresh.recalculator import SnapshotRecalculator

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def load_prices(path: Path) -> dict[str, AssetQuote]:
    """Read {asset_id: price} into quotes; unparseable prices are skipped."""
    raw = json.loads(path.read_text(encoding="utf-8"), parse_float=Decimal)
    if not isinstance(raw, dict):
        raise ValueError(f"{path}: expected a JSON object of asset_id -> price")

    quotes: dict[str, AssetQuote] = {}
    for asset_id, value in raw.items():
        try:
            price = Decimal(str(value))
        except InvalidOperation:
            logger.warning(f"Ignoring unparseable price for {asset_id}: {value!r}")
            continue
        if not price.is_finite() or price < 0:
            logger.warning(f"Ignoring invalid price for {asset_id}: {value!r}")
            continue
        quotes[asset_id] = AssetQuote(asset_id=asset_id, current_price=price)
    return quotes


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Recalculate a portfolio display from a snapshot.")
    parser.add_argument("--snapshot", type=Path, required=True, help="Serialized RefreshSnapshot")
    parser.add_argument("--prices", type=Path, required=True, help="JSON object asset_id -> price")
    parser.add_argument("--output", type=Path, help="Where to write the display (default: stdout)")
    parser.add_argument("--max-holdings", type=int, default=5)
    parser.add_argument("--stale-after-minutes", type=int, default=60)
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    try:
        snapshot = decode_snapshot(args.snapshot.read_bytes())
    except (OSError, SnapshotError) as e:
        logger.error(f"Cannot read snapshot: {e}")
        return 2

    try:
        quotes = load_prices(args.prices)
    except (OSError, ValueError) as e:
        logger.error(f"Cannot read prices: {e}")
        return 2

    recalculator = SnapshotRecalculator(
        max_holdings=args.max_holdings,
        stale_after_minutes=args.stale_after_minutes,
    )
    display = recalculator.recalculate(snapshot, quotes, as_of=datetime.now(timezone.utc))

    payload = encode_display(display)
    if args.output:
        args.output.write_bytes(payload)
        logger.info(f"Wrote display to {args.output}")
    else:
        sys.stdout.write(payload.decode("utf-8") + "\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
