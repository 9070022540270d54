import pytest
from sqlalchemy.exc import SQLAlchemyError

from runes_api.runes.identifiers import ByAddress, ByBlockHeight, ById, ByName
from runes_api.runes.store import RuneQueryStore, compile_filter, read_snapshot

from conftest import SAMPLE_ADDRESS, SAMPLE_RUNE_ID, tx_id


def _store_call(engine, method, *args):
    with read_snapshot(engine) as conn:
        return getattr(RuneQueryStore(conn), method)(*args)


@pytest.fixture()
def busy_address(seed):
    seed.rune()
    for n in range(7):
        seed.ledger_entry(block_height=n + 1, tx_id=tx_id(n + 1), operation="send")
    return SAMPLE_ADDRESS


@pytest.mark.parametrize(
    "offset, limit",
    [(0, 1), (0, 7), (0, 60), (2, 3), (5, 5), (6, 1), (7, 1), (50, 20)],
)
def test_page_length_matches_total_and_window(engine, busy_address, offset, limit):
    page = _store_call(engine, "get_address_activity", busy_address, offset, limit)

    assert page.total == 7
    assert len(page.results) == min(limit, max(0, page.total - offset))


def test_activity_is_newest_first(engine, seed):
    seed.rune()
    seed.ledger_entry(block_height=3, tx_index=1, event_index=0, tx_id=tx_id(31))
    seed.ledger_entry(block_height=3, tx_index=1, event_index=1, tx_id=tx_id(31), operation="send")
    seed.ledger_entry(block_height=3, tx_index=0, tx_id=tx_id(30))
    seed.ledger_entry(block_height=1, tx_id=tx_id(10))

    page = _store_call(engine, "get_rune_activity", ById(SAMPLE_RUNE_ID), 0, 20)

    keys = [(int(e.block_height), e.tx_index, e.event_index) for e in page.results]
    assert keys == [(3, 1, 1), (3, 1, 0), (3, 0, 0), (1, 0, 0)]
    assert page.results[0].rune.spaced_name == "Sample•Rune"


def test_balances_use_latest_change_per_address(engine, seed):
    seed.rune()
    seed.balance_change(address="addr-a", block_height="1", balance="100")
    seed.balance_change(address="addr-a", block_height="5", balance="40")
    seed.balance_change(address="addr-b", block_height="2", balance="70")

    page = _store_call(engine, "get_rune_holders", ById(SAMPLE_RUNE_ID), 0, 20)

    assert page.total == 2
    assert [(b.address, b.balance) for b in page.results] == [("addr-b", "70"), ("addr-a", "40")]


def test_balance_ties_order_by_address(engine, seed):
    seed.rune()
    seed.balance_change(address="addr-z", balance="10")
    seed.balance_change(address="addr-m", balance="10")

    page = _store_call(engine, "get_rune_holders", ById(SAMPLE_RUNE_ID), 0, 20)

    assert [b.address for b in page.results] == ["addr-m", "addr-z"]


def test_single_address_balance(engine, seed):
    seed.rune()
    seed.balance_change(block_height="1", balance="100")
    seed.balance_change(block_height="2", balance="250")

    balance = _store_call(engine, "get_rune_address_balance", ByName("Sample Rune"), SAMPLE_ADDRESS)
    assert balance is not None
    assert balance.balance == "250"

    missing = _store_call(engine, "get_rune_address_balance", ById(SAMPLE_RUNE_ID), "nobody")
    assert missing is None


def test_etching_joins_latest_supply(engine, seed):
    seed.rune()
    seed.supply_change(block_height="1", minted="100", total_mints="1")
    seed.supply_change(block_height="4", minted="300", total_mints="3", burned="20", total_burns="2")

    etching = _store_call(engine, "get_etching", ById(SAMPLE_RUNE_ID))

    assert etching.supply.minted == "300"
    assert etching.supply.total_mints == "3"
    assert etching.supply.burned == "20"


def test_etching_without_supply_rows_has_zero_supply(engine, seed):
    seed.rune()

    etching = _store_call(engine, "get_etching", ById(SAMPLE_RUNE_ID))

    assert etching.premine == "1000"
    assert etching.supply.minted == "0"
    assert etching.supply.total_mints == "0"


def test_etchings_listing_total(engine, seed):
    for n in range(3):
        seed.rune(
            id=f"{n + 1}:0",
            number=n,
            name=f"RUNE{'A' * (n + 1)}",
            spaced_name=f"RUNE•{'A' * (n + 1)}",
            block_height=str(n + 1),
        )

    page = _store_call(engine, "get_etchings", 1, 1)

    assert page.total == 3
    assert [e.id for e in page.results] == ["2:0"]


def test_chain_tip(engine, seed):
    assert _store_call(engine, "get_chain_tip") is None

    seed.rune()
    seed.ledger_entry(block_height=2)
    seed.ledger_entry(block_height=9, tx_id=tx_id(9))

    tip = _store_call(engine, "get_chain_tip")
    assert tip.block_height == "9"
    assert tip.block_hash.endswith("9")


def test_block_activity_by_height(engine, seed):
    seed.rune()
    seed.ledger_entry(block_height=2)
    seed.ledger_entry(block_height=3, tx_id=tx_id(3))

    page = _store_call(engine, "get_block_activity", ByBlockHeight(3), 0, 20)

    assert page.total == 1
    assert page.results[0].tx_id == tx_id(3)


def test_window_bounds_are_enforced(engine):
    with pytest.raises(ValueError):
        _store_call(engine, "get_etchings", 0, 61)
    with pytest.raises(ValueError):
        _store_call(engine, "get_etchings", -1, 10)


def test_row_filters_need_a_row_source():
    with pytest.raises(ValueError):
        compile_filter(ByAddress("addr"))


def test_wide_balances_keep_numeric_order(engine, seed):
    seed.rune()
    seed.balance_change(address="addr-nine", balance="9")
    seed.balance_change(address="addr-ten", balance="10")
    seed.balance_change(address="addr-wide", balance=str(2**100))
    seed.balance_change(address="addr-max", balance=str(2**128 - 1))

    page = _store_call(engine, "get_rune_holders", ById(SAMPLE_RUNE_ID), 0, 20)

    assert [b.balance for b in page.results] == [str(2**128 - 1), str(2**100), "10", "9"]


def test_amounts_outside_u128_are_rejected(seed, engine):
    with pytest.raises(SQLAlchemyError):
        seed.rune(premine=str(2**128))
    with pytest.raises(SQLAlchemyError):
        seed.rune(premine="-1")
