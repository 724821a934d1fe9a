import logging

import pytest

from dao_governor import config
from dao_governor.errors import AlreadyVoted, ProposalAlreadyExecuted, TxFailed
from dao_governor.runtime.clock import ManualClock
from dao_governor.service import GovernorService

from conftest import START_TS


def _service(tmp_path, clock, **gov_overrides):
    cfg = config.load_config(str(tmp_path))
    cfg["governance"].update(gov_overrides)
    return GovernorService(cfg, state_path=str(tmp_path / "state.json"), clock=clock)


def test_fresh_service_uses_config(tmp_path, clock):
    svc = _service(tmp_path, clock, quorum=40)
    assert svc.governor.quorum == 40
    assert svc.governor.governance_token == "@governance_token"
    assert svc.treasury_account == "@dao_treasury"
    assert svc.governor.next_proposal_id() == 0


def test_state_survives_restart(tmp_path, clock):
    svc = _service(tmp_path, clock)
    svc.mint("@dao_treasury", 1000)
    svc.mint("@alice", 1500)
    pid = svc.propose("@bob", 100, 1)
    svc.vote("@alice", pid, "for")
    svc.execute(pid)

    again = _service(tmp_path, ManualClock(current=START_TS + 10))
    assert again.governor.next_proposal_id() == 1
    assert again.governor.get_proposal(1).executed is True
    assert again.ledger.balance_of("@bob") == 100
    assert again.ledger.balance_of("@dao_treasury") == 900
    with pytest.raises(ProposalAlreadyExecuted):
        again.execute(1)


def test_snapshot_parameters_win_over_config(tmp_path, clock):
    svc = _service(tmp_path, clock, quorum=50)
    svc.propose("@bob", 1, 1)

    again = _service(tmp_path, clock, quorum=10)
    assert again.governor.quorum == 50


@pytest.mark.parametrize(
    "override,name",
    [({"quorum": 10}, "quorum"), ({"token": "@other"}, "token"), ({"weight_order": "divide_first"}, "weight_order")],
)
def test_config_drift_is_logged(tmp_path, clock, caplog, override, name):
    svc = _service(tmp_path, clock)
    svc.propose("@bob", 1, 1)

    with caplog.at_level(logging.WARNING, logger="dao_governor.service"):
        again = _service(tmp_path, clock, **override)

    assert again.governor.governance_token == "@governance_token"
    assert again.governor.weight_order.value == "multiply_first"
    drift = [r.getMessage() for r in caplog.records if "ignored" in r.getMessage()]
    assert len(drift) == 1
    assert drift[0].startswith(f"Configured {name} ")


def test_matching_config_logs_no_drift(tmp_path, clock, caplog):
    _service(tmp_path, clock).propose("@bob", 1, 1)
    with caplog.at_level(logging.WARNING, logger="dao_governor.service"):
        _service(tmp_path, clock)
    assert not [r for r in caplog.records if "ignored" in r.getMessage()]


def test_failed_payout_is_persisted(tmp_path, clock):
    svc = _service(tmp_path, clock)
    svc.mint("@alice", 100)  # treasury is empty
    pid = svc.propose("@bob", 100, 1)
    svc.vote("@alice", pid, "for")

    with pytest.raises(TxFailed):
        svc.execute(pid)

    again = _service(tmp_path, clock)
    assert again.governor.get_proposal(pid).executed is True
    assert again.governor.unpaid_proposals() == [pid]


def test_consumed_vote_is_persisted(tmp_path, clock):
    svc = _service(tmp_path, clock)
    pid = svc.propose("@bob", 100, 1)

    # nothing minted yet: supply is zero
    with pytest.raises(TxFailed):
        svc.vote("@alice", pid, "for")

    again = _service(tmp_path, clock)
    again.mint("@alice", 10)
    with pytest.raises(AlreadyVoted):
        again.vote("@alice", pid, "for")
