"""Example: serve price widgets locally.

Open http://127.0.0.1:8000/widgets/price?symbol=ETH&currency=EUR&refresh=30
"""

from pathlib import Path

import uvicorn
from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent.parent / ".env")

from cryptoticker.config import configure_logging, get_settings
from cryptoticker.web import create_app


def main() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)
    uvicorn.run(create_app(settings), host="127.0.0.1", port=8000)


if __name__ == "__main__":
    main()
