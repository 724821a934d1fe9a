# dao_governor/config.py
import copy
import os
from typing import Any, Callable, Dict, Optional, Tuple

import yaml

from .errors import ConfigError
from .runtime.votes import WeightOrder

CONFIG_FILENAME = "governor_config.yaml"

# -------- Defaults --------
_DEFAULT: Dict[str, Any] = {
    "governance": {
        # percentage points of combined for+against weight
        "quorum": 50,
        "token": "@governance_token",
        "weight_order": WeightOrder.MULTIPLY_FIRST.value,
        # account whose balance funds executed proposals
        "treasury_account": "@dao_treasury",
    },
    "persistence": {"state_path": "governor_state.json", "keep_backups": 2},
    "logging": {"level": "INFO"},
    "server": {"host": "127.0.0.1", "port": 8000},
    "cors": {"origins": ["http://localhost:5173", "http://127.0.0.1:5173"]},
}

# -------- ENV overrides --------
_ENV_MAP: Dict[Tuple[str, str], Tuple[str, Callable[[str], Any]]] = {
    ("governance", "quorum"): ("GOVERNOR_QUORUM", int),
    ("governance", "token"): ("GOVERNOR_TOKEN", str),
    ("governance", "weight_order"): ("GOVERNOR_WEIGHT_ORDER", str),
    ("governance", "treasury_account"): ("GOVERNOR_TREASURY_ACCOUNT", str),
    ("persistence", "state_path"): ("GOVERNOR_STATE_PATH", str),
    ("logging", "level"): ("GOVERNOR_LOG_LEVEL", str),
    ("server", "host"): ("GOVERNOR_HOST", str),
    ("server", "port"): ("GOVERNOR_PORT", int),
}


def _deep_merge(base: Dict[str, Any], overlay: Dict[str, Any]) -> Dict[str, Any]:
    out = dict(base)
    for k, v in (overlay or {}).items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = v
    return out


def _apply_env_overrides(cfg: Dict[str, Any]) -> Dict[str, Any]:
    for (section, key), (env_name, cast) in _ENV_MAP.items():
        val = os.getenv(env_name)
        if val is None:
            continue
        try:
            casted = cast(val)
        except ValueError as exc:
            raise ConfigError(f"{env_name}={val!r} is not a valid {cast.__name__}") from exc
        cfg.setdefault(section, {})
        cfg[section][key] = casted
    return cfg


def _validate(cfg: Dict[str, Any]) -> None:
    gov = cfg.get("governance", {})
    try:
        quorum = int(gov.get("quorum"))
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"governance.quorum must be an integer, got {gov.get('quorum')!r}") from exc
    if not 0 <= quorum <= 255:
        raise ConfigError(f"governance.quorum must be within 0..255, got {quorum}")
    try:
        WeightOrder(gov.get("weight_order"))
    except ValueError as exc:
        raise ConfigError(f"unknown governance.weight_order {gov.get('weight_order')!r}") from exc
    if not gov.get("token"):
        raise ConfigError("governance.token is required")


def load_config(repo_root: Optional[str] = None) -> Dict[str, Any]:
    """
    Loads repo_root/governor_config.yaml over the defaults, then applies
    GOVERNOR_* environment overrides.

    A missing file means defaults. A file that exists but is not valid
    YAML, or values out of range, raise ConfigError.
    """
    cfg = copy.deepcopy(_DEFAULT)

    path = os.path.join(repo_root or os.getcwd(), CONFIG_FILENAME)
    if os.path.exists(path):
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"cannot parse {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigError(f"{path} must contain a mapping")
        cfg = _deep_merge(cfg, data)

    cfg = _apply_env_overrides(cfg)

    origins = cfg.get("cors", {}).get("origins")
    if isinstance(origins, str):
        cfg["cors"]["origins"] = [origins]

    _validate(cfg)
    return cfg


# -------- Small helpers --------
def get_quorum(cfg: Dict[str, Any]) -> int:
    return int(cfg.get("governance", {}).get("quorum", 50))


def get_token(cfg: Dict[str, Any]) -> str:
    return str(cfg.get("governance", {}).get("token", "@governance_token"))


def get_weight_order(cfg: Dict[str, Any]) -> WeightOrder:
    return WeightOrder(cfg.get("governance", {}).get("weight_order", WeightOrder.MULTIPLY_FIRST.value))


def get_treasury_account(cfg: Dict[str, Any]) -> str:
    return str(cfg.get("governance", {}).get("treasury_account", "@dao_treasury"))


def get_state_path(cfg: Dict[str, Any]) -> str:
    return str(cfg.get("persistence", {}).get("state_path", "governor_state.json"))


def get_keep_backups(cfg: Dict[str, Any]) -> int:
    return int(cfg.get("persistence", {}).get("keep_backups", 2))


def get_log_level(cfg: Dict[str, Any]) -> str:
    return str(cfg.get("logging", {}).get("level", "INFO")).upper()


def get_bind_host(cfg: Dict[str, Any]) -> str:
    return str(cfg.get("server", {}).get("host", "127.0.0.1"))


def get_bind_port(cfg: Dict[str, Any]) -> int:
    return int(cfg.get("server", {}).get("port", 8000))


def get_cors_origins(cfg: Dict[str, Any]) -> list:
    return list(cfg.get("cors", {}).get("origins", []))
