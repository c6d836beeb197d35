"""Run the service with ``python -m secret_santa``."""
import uvicorn

from secret_santa.core.config import settings


def main():
    uvicorn.run("secret_santa.main:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
