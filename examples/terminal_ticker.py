"""Example: keep a few prices refreshing in the terminal until Ctrl-C."""

import asyncio

from cryptoticker.config import configure_logging, get_settings
from cryptoticker.engine import build_service
from cryptoticker.models import PriceRecord
from cryptoticker.poller import WidgetRefresher
from cryptoticker.widgets import WidgetInstance


def _show(record: PriceRecord) -> None:
    ts = record.updated_at_datetime.strftime("%H:%M:%S")
    print(f"{record.symbol:>5}  {record.formatted:>20}  (updated {ts} UTC)")


async def main() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)
    service = build_service(settings)

    widgets = [
        WidgetInstance(symbol="BTC", refresh=30),
        WidgetInstance(symbol="ETH", currency="EUR", refresh=45),
        WidgetInstance(symbol="DOGE", refresh=60),
    ]
    refreshers = [WidgetRefresher(service, settings, w, _show) for w in widgets]
    for r in refreshers:
        r.start()

    try:
        await asyncio.Event().wait()
    finally:
        for r in refreshers:
            await r.stop()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass
