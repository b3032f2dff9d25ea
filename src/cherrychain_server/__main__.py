"""Run the CherryChain API server: ``python -m cherrychain_server``."""

import uvicorn

from cherrychain_server.config import settings


def main() -> None:
    uvicorn.run(
        "cherrychain_server.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    main()
