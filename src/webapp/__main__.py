"""webapp entrypoint.

Run with:
  python -m webapp --config ./config/config.yaml
"""

import argparse
from pathlib import Path

import uvicorn

from webapp.app import create_app
from webapp.config import DEFAULT_CONFIG_PATH, load_config


def main() -> None:
    parser = argparse.ArgumentParser(prog="webapp")
    parser.add_argument("--config", default=str(DEFAULT_CONFIG_PATH), help="Path to configuration file")
    args = parser.parse_args()

    config = load_config(Path(args.config))
    host, port = config.bind_host_port()
    uvicorn.run(create_app(config), host=host, port=port)

if __name__ == "__main__":
    main()
