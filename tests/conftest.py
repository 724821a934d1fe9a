import pathlib
import sys

import pytest

# Ensure repo root (containing the dao_governor package) is on sys.path
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from dao_governor.governor import Governor
from dao_governor.runtime.clock import ManualClock
from dao_governor.runtime.token import GovernanceToken, TokenLedger

TREASURY = "@dao_treasury"
START_TS = 1_700_000_000


@pytest.fixture
def clock():
    return ManualClock(current=START_TS)


@pytest.fixture
def ledger():
    """Treasury holds 1000, so accounts get minted on top of that."""
    tl = TokenLedger(token_id="@gov")
    tl.mint(TREASURY, 1000)
    return tl


@pytest.fixture
def token(ledger):
    return GovernanceToken(ledger, TREASURY)


@pytest.fixture
def governor(token, clock):
    return Governor(governance_token="@gov", quorum=50, token=token, clock=clock)


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    for name in (
        "GOVERNOR_QUORUM",
        "GOVERNOR_TOKEN",
        "GOVERNOR_WEIGHT_ORDER",
        "GOVERNOR_TREASURY_ACCOUNT",
        "GOVERNOR_STATE_PATH",
        "GOVERNOR_LOG_LEVEL",
        "GOVERNOR_HOST",
        "GOVERNOR_PORT",
    ):
        monkeypatch.delenv(name, raising=False)
