import pytest

from stockwatch.core.enums import InventoryStatus
from stockwatch.services.reconciler import InventoryReconciler, classify_quantity, effective_threshold
from tests.mocks import make_override, make_product, make_store, make_tracked


@pytest.fixture
def reconciler(memory_store):
    return InventoryReconciler(memory_store)


async def test_aggregate_is_sum_of_all_variants(reconciler, memory_store, free_store):
    product = make_product(100, (1, 11, 3, "A"), (2, 12, 4, ""), (3, 13, 0, "C"))

    result = await reconciler.reconcile(free_store, product)

    assert result.created is True
    assert result.current_quantity == 7
    assert result.previous_quantity == 0
    tracked = await memory_store.get_tracked_product(free_store.id, "100")
    assert tracked.current_quantity == 7
    assert tracked.sku == "A, C"
    assert tracked.inventory_status == InventoryStatus.IN_STOCK.value


async def test_negative_variant_quantities_count_as_reported(reconciler, free_store):
    product = make_product(100, (1, 11, 5, "A"), (2, 12, -2, "B"))

    result = await reconciler.reconcile(free_store, product)

    assert result.current_quantity == 3


async def test_previous_is_last_recorded_quantity(reconciler, memory_store, free_store):
    await memory_store.save_tracked_product(make_tracked(free_store.id, "100", quantity=10))

    result = await reconciler.reconcile(free_store, make_product(100, (1, 11, 4, "A")))

    assert result.previous_quantity == 10
    assert result.current_quantity == 4
    assert result.tracked.previous_quantity == 10
    assert result.tracked.inventory_status == InventoryStatus.LOW_STOCK.value


async def test_reconcile_is_idempotent(reconciler, free_store):
    product = make_product(100, (1, 11, 4, "A"), (2, 12, 2, "B"))

    await reconciler.reconcile(free_store, product)
    first = await reconciler.reconcile(free_store, product)
    second = await reconciler.reconcile(free_store, product)

    assert first.previous_quantity == first.current_quantity == 6
    assert second.previous_quantity == second.current_quantity == 6


async def test_hidden_flag_is_preserved(reconciler, memory_store, free_store):
    await memory_store.save_tracked_product(make_tracked(free_store.id, "100", quantity=0, is_hidden=True))

    result = await reconciler.reconcile(free_store, make_product(100, (1, 11, 0, "A")))

    assert result.tracked.is_hidden is True
    assert result.tracked.inventory_status == InventoryStatus.OUT_OF_STOCK.value


async def test_deactivated_row_is_skipped(reconciler, memory_store, free_store):
    tracked = make_tracked(free_store.id, "100", quantity=8, inventory_status=InventoryStatus.DEACTIVATED.value)
    await memory_store.save_tracked_product(tracked)
    updated_before = tracked.updated_at

    result = await reconciler.reconcile(free_store, make_product(100, (1, 11, 2, "A")))

    assert result.skipped is True
    assert result.should_continue is False
    assert tracked.current_quantity == 8
    assert tracked.updated_at == updated_before


async def test_new_product_over_quota_is_recorded_deactivated(reconciler, memory_store, free_store):
    for n in range(10):
        await memory_store.save_tracked_product(make_tracked(free_store.id, str(n + 1)))

    result = await reconciler.reconcile(free_store, make_product(500, (1, 11, 3, "A")))

    assert result.deactivated is True
    assert result.should_continue is False
    tracked = await memory_store.get_tracked_product(free_store.id, "500")
    assert tracked.inventory_status == InventoryStatus.DEACTIVATED.value
    assert tracked.deactivated_at is not None
    assert await memory_store.count_active_products(free_store.id) == 10


async def test_pro_plan_admits_beyond_free_limit(reconciler, memory_store, pro_store):
    for n in range(25):
        await memory_store.save_tracked_product(make_tracked(pro_store.id, str(n + 1)))

    result = await reconciler.reconcile(pro_store, make_product(500, (1, 11, 3, "A")))

    assert result.deactivated is False
    assert result.created is True


async def test_override_threshold_drives_classification(reconciler, free_store):
    override = make_override(free_store.id, "100", custom_threshold=20)

    result = await reconciler.reconcile(free_store, make_product(100, (1, 11, 15, "A")), override)

    assert result.threshold == 20
    assert result.tracked.inventory_status == InventoryStatus.LOW_STOCK.value


def test_effective_threshold_precedence():
    store = make_store(low_stock_threshold=7)

    assert effective_threshold(store) == 7
    assert effective_threshold(store, make_override(1, "1", custom_threshold=2)) == 2
    assert effective_threshold(store, make_override(1, "1", custom_threshold=0)) == 0
    assert effective_threshold(store, make_override(1, "1")) == 7
    assert effective_threshold(make_store(low_stock_threshold=None)) == 5


@pytest.mark.parametrize("quantity,expected", [
    (0, InventoryStatus.OUT_OF_STOCK),
    (-1, InventoryStatus.OUT_OF_STOCK),
    (1, InventoryStatus.LOW_STOCK),
    (5, InventoryStatus.LOW_STOCK),
    (6, InventoryStatus.IN_STOCK),
])
def test_classify_quantity(quantity, expected):
    assert classify_quantity(quantity, 5) == expected


async def test_row_created_by_concurrent_event_is_updated(reconciler, memory_store, free_store, mocker):
    async def other_event_inserts_first(account):
        await memory_store.save_tracked_product(make_tracked(free_store.id, "100", quantity=7))
        return True

    mocker.patch.object(reconciler.quota, "can_add_product", side_effect=other_event_inserts_first)

    result = await reconciler.reconcile(free_store, make_product(100, (1, 11, 4, "A")))

    assert result.created is False
    assert (result.previous_quantity, result.current_quantity) == (7, 4)
    assert len(memory_store.tracked) == 1
    assert memory_store.tracked[0].current_quantity == 4
