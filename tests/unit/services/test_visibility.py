import pytest

from stockwatch.core.enums import VisibilityTransition
from stockwatch.services.visibility import VisibilityStateMachine
from tests.mocks import make_override, make_product, make_store, make_tracked


@pytest.fixture
def machine(memory_store, catalog):
    return VisibilityStateMachine(memory_store, catalog)


async def test_hide_on_zero(machine, memory_store, catalog, free_store):
    catalog.add(make_product(100, (1, 11, 0, "A")))
    tracked = await memory_store.save_tracked_product(make_tracked(free_store.id, "100", quantity=0))

    transition = await machine.evaluate(free_store, tracked, 0)

    assert transition == VisibilityTransition.HIDE
    assert catalog.visibility_calls == [("100", False)]
    assert tracked.is_hidden is True
    assert catalog.products["100"].status == "draft"


async def test_already_hidden_makes_no_call(machine, memory_store, catalog, free_store):
    tracked = await memory_store.save_tracked_product(make_tracked(free_store.id, "100", quantity=0, is_hidden=True))

    transition = await machine.evaluate(free_store, tracked, 0)

    assert transition == VisibilityTransition.NONE
    assert catalog.visibility_calls == []


def test_auto_hide_disabled_keeps_product_visible(machine):
    store = make_store(auto_hide_enabled=False)
    tracked = make_tracked(1, "100", quantity=0)

    assert machine.decide(store, tracked, 0) == VisibilityTransition.NONE


def test_override_excludes_from_auto_hide(machine):
    store = make_store()
    tracked = make_tracked(1, "100", quantity=0)
    override = make_override(1, "100", exclude_from_auto_hide=True)

    assert machine.decide(store, tracked, 0, override) == VisibilityTransition.NONE


def test_republish_requires_auto_republish(machine):
    tracked = make_tracked(1, "100", quantity=3, is_hidden=True)

    assert machine.decide(make_store(auto_republish_enabled=False), tracked, 3) == VisibilityTransition.NONE
    assert machine.decide(make_store(auto_republish_enabled=True), tracked, 3) == VisibilityTransition.REPUBLISH


def test_override_blocks_republish(machine):
    store = make_store(auto_republish_enabled=True)
    tracked = make_tracked(1, "100", quantity=3, is_hidden=True)
    override = make_override(1, "100", exclude_from_auto_hide=True)

    assert machine.decide(store, tracked, 3, override) == VisibilityTransition.NONE


def test_visible_product_with_stock_stays(machine):
    store = make_store(auto_republish_enabled=True)
    tracked = make_tracked(1, "100", quantity=3)

    assert machine.decide(store, tracked, 3) == VisibilityTransition.NONE


async def test_republish_persists_after_success(machine, memory_store, catalog):
    store = await memory_store.save_store(make_store(auto_republish_enabled=True))
    tracked = await memory_store.save_tracked_product(make_tracked(store.id, "100", quantity=4, is_hidden=True))

    transition = await machine.evaluate(store, tracked, 4)

    assert transition == VisibilityTransition.REPUBLISH
    assert catalog.visibility_calls == [("100", True)]
    assert tracked.is_hidden is False


async def test_mutation_failure_leaves_local_state(machine, memory_store, catalog, free_store):
    catalog.fail_mutation = True
    tracked = await memory_store.save_tracked_product(make_tracked(free_store.id, "100", quantity=0))

    transition = await machine.evaluate(free_store, tracked, 0)

    assert transition == VisibilityTransition.NONE
    assert catalog.visibility_calls == [("100", False)]
    assert tracked.is_hidden is False
