# stockwatch/cli/enforce_quotas.py
import asyncio
import logging
from typing import List, Optional

import click

from stockwatch.core.logging_config import configure_logging
from stockwatch.database import async_session
from stockwatch.schemas.results import EnforcementResult
from stockwatch.services.inventory_store import InventoryStore, SqlAlchemyInventoryStore
from stockwatch.services.quota import PlanQuotaEnforcer
from stockwatch.services.store_lifecycle import StoreLifecycleService

logger = logging.getLogger(__name__)


async def run_enforcement(store: InventoryStore, shop: Optional[str] = None) -> List[EnforcementResult]:
    """Enforce plan quotas for one shop, or every active store when ``shop`` is None."""
    if shop:
        accounts = [await StoreLifecycleService(store).get_active_store(shop)]
    else:
        accounts = await store.list_active_stores()

    enforcer = PlanQuotaEnforcer(store)
    results = []
    for account in accounts:
        results.append(await enforcer.enforce(account))
    await store.commit()
    return results


@click.command()
@click.option('--shop', default=None, help='Shop domain to enforce (default: all active stores)')
def enforce_quotas(shop):
    """Deactivate or restore tracked products so each store fits its plan"""
    configure_logging()

    async def _enforce():
        async with async_session() as session:
            return await run_enforcement(SqlAlchemyInventoryStore(session), shop)

    results = asyncio.run(_enforce())
    for result in results:
        limit = "unlimited" if result.max_allowed is None else result.max_allowed
        click.echo(
            f"store {result.store_id} [{result.plan}, limit {limit}]: "
            f"{result.active_count} active, -{result.deactivated_count} +{result.reactivated_count}"
        )
    click.echo(f"Enforced {len(results)} store(s)")


if __name__ == "__main__":
    enforce_quotas()
