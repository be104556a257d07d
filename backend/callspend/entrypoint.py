import asyncio
import signal
from typing import Optional

import uvicorn

from callspend.config import configure_logging, settings
from callspend.main import app


def server_config(host: Optional[str] = None, port: Optional[int] = None) -> uvicorn.Config:
    return uvicorn.Config(
        app,
        host=host or settings.host,
        port=port or settings.port,
        log_level=settings.log_level.lower(),
    )


async def serve(config: uvicorn.Config) -> None:
    """Run uvicorn until SIGTERM or SIGINT, then let it finish in-flight requests."""
    server = uvicorn.Server(config)
    shutdown = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, shutdown.set)

    serving = asyncio.create_task(server.serve())
    stopping = asyncio.create_task(shutdown.wait())
    done, _ = await asyncio.wait({serving, stopping}, return_when=asyncio.FIRST_COMPLETED)
    if serving not in done:
        server.should_exit = True
        await serving
    stopping.cancel()


def main() -> None:
    configure_logging()
    asyncio.run(serve(server_config()))


if __name__ == "__main__":
    main()
