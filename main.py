import asyncio
import os

from app.bootstrap.bootstrapper import bootstrap_relay
from app.services.RelayService.relay_service_interface import RelayServiceInterface


async def main():
    relay: RelayServiceInterface = await bootstrap_relay(
        env=os.getenv("APP_ENV", "development")
    )
    await relay.start()


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
