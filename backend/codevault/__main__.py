"""Run the API with uvicorn on the configured host and port: python -m codevault"""

import uvicorn

from codevault.config import settings


def main() -> None:
    uvicorn.run(
        "codevault.main:app",
        host=settings.backend_host,
        port=settings.backend_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
