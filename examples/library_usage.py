"""Run a reconciliation from Python instead of the CLI."""

import asyncio
import sys
from pathlib import Path

from loguru import logger

from candlecheck import ReconciliationEngine
from candlecheck.core.config import ApiRegistry, load_settings
from candlecheck.core.http_client import ApiClient
from candlecheck.core.logging import configure_logging

EXAMPLES_DIR = Path(__file__).parent


async def main(instrument: str, periods: list[str]) -> int:
    settings = load_settings(EXAMPLES_DIR / "config.toml")
    registry = ApiRegistry.load(EXAMPLES_DIR / "api.json")

    async with ApiClient(registry, settings.http) as client:
        engine = ReconciliationEngine(client.get_trades, client.get_candlestick, polling=settings.polling)
        reports = await engine.run_many(instrument, periods)

    for report in reports:
        logger.info("Report", **report.summary())
        for row in report.to_rows():
            logger.warning("Mismatch", **row)
    return 0 if all(report.passed for report in reports) else 1


if __name__ == "__main__":
    configure_logging("INFO")
    sys.exit(asyncio.run(main(sys.argv[1] if len(sys.argv) > 1 else "BTC_USDT", sys.argv[2:] or ["1m", "5m"])))
