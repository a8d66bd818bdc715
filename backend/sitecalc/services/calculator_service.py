"""
CalculatorService — load → apply → save around the EstimateEngine.

The engine is pure and synchronous; this layer owns the only suspension
points (store round trips and the product lookup) and keeps at most one
mutation in flight per calculator with a per-calculator asyncio.Lock.
A second request for the same calculator waits for the first to be saved,
so neither overwrites the other's effect.
"""
import asyncio
import logging
import time
from contextlib import asynccontextmanager
from typing import Any, Optional

from sitecalc.config import FIELD_ALIASES, Variant
from sitecalc.models.actor import Actor, owner_key
from sitecalc.models.estimate_models import Estimate
from sitecalc.services.document_store import DocumentStore
from sitecalc.services.errors import EstimatorError, NotFoundError, ValidationError
from sitecalc.services.estimate_engine import EstimateEngine
from sitecalc.services.perf_monitor import tracker
from sitecalc.services.product_catalog import ProductCatalog

logger = logging.getLogger("sitecalc-api")


class CalculatorService:
    def __init__(
        self,
        store: DocumentStore,
        catalog: ProductCatalog,
        engine: Optional[EstimateEngine] = None,
    ):
        self.store = store
        self.catalog = catalog
        self.engine = engine or EstimateEngine()
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_users: dict[str, int] = {}

    @asynccontextmanager
    async def _exclusive(self, estimate_id: str):
        """
        Hold the calculator's lock. The entry is dropped once nobody holds
        or waits on it, so unknown ids leave nothing behind.
        """
        lock = self._locks.setdefault(estimate_id, asyncio.Lock())
        self._lock_users[estimate_id] = self._lock_users.get(estimate_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[estimate_id] -= 1
            if not self._lock_users[estimate_id]:
                del self._lock_users[estimate_id]
                del self._locks[estimate_id]

    # ------------------------------------------------------------------
    # Reads / create
    # ------------------------------------------------------------------

    async def _require_project(self, actor: Actor, project_id: str) -> None:
        if await self.store.load_project(actor, project_id) is None:
            raise NotFoundError("Project", project_id)

    async def create_calculator(self, actor: Actor, project_id: str, name: str, variant: Any) -> Estimate:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Calculator name is required")
        try:
            variant = Variant(variant)
        except ValueError:
            raise ValidationError(f"Unknown calculator variant: {variant}")
        await self._require_project(actor, project_id)

        estimate = Estimate(
            name=name,
            variant=variant,
            project_id=project_id,
            owner_id=owner_key(actor),
        )
        await self.store.save_estimate(actor, estimate)
        logger.info(
            f"Calculator '{name}' ({variant.value}) created",
            extra={"estimate_id": estimate.id, "project_id": project_id},
        )
        return estimate

    async def list_calculators(self, actor: Actor, project_id: str) -> list[Estimate]:
        await self._require_project(actor, project_id)
        return await self.store.list_estimates(actor, project_id)

    async def get_calculator(self, actor: Actor, estimate_id: str) -> Estimate:
        estimate = await self.store.load_estimate(actor, estimate_id)
        if estimate is None:
            raise NotFoundError("Calculator", estimate_id)
        return estimate

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def _mutate(self, actor: Actor, estimate_id: str, operation: str, *args, **kwargs) -> Estimate:
        async with self._exclusive(estimate_id):
            start = time.perf_counter()
            try:
                estimate = await self.get_calculator(actor, estimate_id)
                updated = getattr(self.engine, operation)(estimate, *args, **kwargs)
                if updated is not estimate:
                    await self.store.save_estimate(actor, updated)
            except EstimatorError:
                tracker.record_error(operation)
                raise
            duration_ms = round((time.perf_counter() - start) * 1000, 2)
            tracker.record_mutation(operation, duration_ms)
            logger.debug(
                "mutation applied",
                extra={"estimate_id": estimate_id, "operation": operation, "duration_ms": duration_ms},
            )
            return updated

    async def add_section(self, actor: Actor, estimate_id: str) -> Estimate:
        return await self._mutate(actor, estimate_id, "add_section")

    async def delete_section(self, actor: Actor, estimate_id: str, section_id: str) -> Estimate:
        return await self._mutate(actor, estimate_id, "delete_section", section_id)

    async def rename_section(self, actor: Actor, estimate_id: str, section_id: str, title: str) -> Estimate:
        return await self._mutate(actor, estimate_id, "rename_section", section_id, title)

    async def add_line(self, actor: Actor, estimate_id: str, section_id: str) -> Estimate:
        return await self._mutate(actor, estimate_id, "add_line", section_id)

    async def add_ten_lines(self, actor: Actor, estimate_id: str, section_id: str) -> Estimate:
        return await self._mutate(actor, estimate_id, "add_ten_lines", section_id)

    async def delete_line(self, actor: Actor, estimate_id: str, section_id: str, line_id: str) -> Estimate:
        return await self._mutate(actor, estimate_id, "delete_line", section_id, line_id)

    async def delete_ten_lines(self, actor: Actor, estimate_id: str, section_id: str) -> Estimate:
        return await self._mutate(actor, estimate_id, "delete_ten_lines", section_id)

    async def update_field(
        self, actor: Actor, estimate_id: str, section_id: str, line_id: str, field: str, value: Any
    ) -> Estimate:
        lookup = None
        if FIELD_ALIASES.get(field, field) == "product_code":
            product = await self.catalog.lookup_product_code(None if value is None else str(value))
            lookup = {product.code: product}.get if product else (lambda _code: None)
        return await self._mutate(
            actor, estimate_id, "update_field", section_id, line_id, field, value,
            product_lookup=lookup,
        )

    async def rename_calculator(self, actor: Actor, estimate_id: str, name: str) -> Estimate:
        return await self._mutate(actor, estimate_id, "rename_calculator", name)

    async def delete_calculator(self, actor: Actor, estimate_id: str) -> Estimate:
        """Terminal. Returns the emptied, deleted-state calculator."""
        async with self._exclusive(estimate_id):
            estimate = await self.get_calculator(actor, estimate_id)
            deleted = self.engine.delete_estimate(estimate)
            await self.store.delete_estimate(actor, estimate_id)
        logger.info("Calculator deleted", extra={"estimate_id": estimate_id})
        return deleted
