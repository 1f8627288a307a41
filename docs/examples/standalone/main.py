# Example: standalone async monitoring without a web framework.
# Uses the simulated prober, prints group status after every cycle
# and the incident projection on SIGINT/SIGTERM.
#
# Install:
#   pip install regionpulse
#
# Run:
#   python main.py

import asyncio
import contextlib
import json
import logging
import signal
from datetime import timedelta

from regionpulse.api import RegionPulse
from regionpulse.probes import SimulatedProber
from regionpulse.registry import registry_from_dict

REGISTRY = registry_from_dict(
    {
        "groups": [
            {
                "name": "EU (Prague)",
                "coordinates": {"lat": 50.0755, "lng": 14.4378},
                "endpoints": [{"address": "88.86.101.192/27", "is_range": True}],
            },
            {
                "name": "Japan (Tokyo)",
                "coordinates": {"lat": 35.6762, "lng": 139.6503},
                "endpoints": [{"address": "178.249.213.195"}, {"address": "178.249.213.193"}],
            },
        ]
    }
)

shutdown_event = asyncio.Event()


def _handle_signal() -> None:
    shutdown_event.set()


async def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")

    # A low success rate makes cautions and outages show up quickly.
    rp = RegionPulse(
        REGISTRY,
        SimulatedProber(success_rate=0.7),
        poll_interval=timedelta(seconds=5),
    )

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, _handle_signal)

    await rp.start()
    print("Monitoring started. Press Ctrl+C to stop.")

    while not shutdown_event.is_set():
        statuses = {name: str(status) for name, status in rp.group_statuses().items()}
        print(json.dumps(statuses))
        with contextlib.suppress(TimeoutError):
            await asyncio.wait_for(shutdown_event.wait(), timeout=5.0)

    await rp.stop()
    print(json.dumps(rp.report().to_dict()["projection"], indent=2))


if __name__ == "__main__":
    asyncio.run(main())
