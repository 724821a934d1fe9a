# dao_governor/__main__.py
"""
Run the governor node:
    python -m dao_governor [--host 127.0.0.1] [--port 8000]
                           [--state ./governor_state.json] [--config-dir .]
Env toggles (see dao_governor/config.py):
  GOVERNOR_QUORUM, GOVERNOR_TOKEN, GOVERNOR_WEIGHT_ORDER,
  GOVERNOR_STATE_PATH, GOVERNOR_LOG_LEVEL, GOVERNOR_HOST, GOVERNOR_PORT
"""

from __future__ import annotations

import argparse
import logging
import os

import uvicorn

from . import config as cfg_mod
from .app import create_app
from .service import init_service

log = logging.getLogger("dao_governor")


def parse_args(argv=None):
    p = argparse.ArgumentParser(
        prog="dao-governor",
        description="Run the token-weighted DAO governor HTTP node",
    )
    p.add_argument("--config-dir", default=os.getcwd(), help="Directory holding governor_config.yaml")
    p.add_argument("--host", default=None, help="Bind address (default from config)")
    p.add_argument("--port", type=int, default=None, help="Port (default from config)")
    p.add_argument("--state", default=None, help="Path to state JSON (default from config)")
    return p.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)

    cfg = cfg_mod.load_config(args.config_dir)

    logging.basicConfig(
        level=getattr(logging, cfg_mod.get_log_level(cfg), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(message)s",
    )

    svc = init_service(args.config_dir, state_path=args.state)

    host = args.host or cfg_mod.get_bind_host(cfg)
    port = args.port or cfg_mod.get_bind_port(cfg)
    log.info("Governor node on http://%s:%s (state=%s)", host, port, svc.store.path)

    uvicorn.run(create_app(cfg_mod.get_cors_origins(cfg)), host=host, port=port)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
