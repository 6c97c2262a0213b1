"""Run the API with uvicorn: `python -m zstore`."""

import uvicorn

from zstore.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run("zstore.main:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
