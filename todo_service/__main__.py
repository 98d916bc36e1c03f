"""
Todo Service - Process Entry Point
===================================

Usage:
    python -m todo_service [service_port [metrics_port]]

Positional ports override SERVICE_PORT / METRICS_PORT from the environment.
"""

import argparse
from typing import List, Optional

import uvicorn

from todo_service.config import settings
from todo_service.main import create_app


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="todo_service", description="Todo CRUD service")
    parser.add_argument("service_port", nargs="?", type=int, default=None)
    parser.add_argument("metrics_port", nargs="?", type=int, default=None)
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    cfg = settings.model_copy(
        update={
            key: value
            for key, value in (
                ("service_port", args.service_port),
                ("metrics_port", args.metrics_port),
            )
            if value is not None
        }
    )

    uvicorn.run(
        create_app(settings=cfg),
        host=cfg.service_host,
        port=cfg.service_port,
        log_config=None,
        timeout_keep_alive=max(1, int(cfg.idle_timeout)),
    )


if __name__ == "__main__":
    main()
