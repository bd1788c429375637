"""Run the MedRestock API with uvicorn until interrupted."""
import signal
import sys

import uvicorn

from medrestock.core.config import settings


def handle_signal(sig, frame):
    print(f"\nReceived signal {sig}, shutting down gracefully...")
    sys.exit(0)


def main():
    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)

    print("=" * 50)
    print("  Starting MedRestock Backend")
    print(f"  Inventory service: {settings.INVENTORY_API_BASE_URL}")
    print(f"  Polling every {settings.RESTOCK_POLL_INTERVAL_SECONDS:g}s")
    print("=" * 50)
    uvicorn.run(
        "medrestock.main:app",
        host="127.0.0.1",
        port=8000,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
