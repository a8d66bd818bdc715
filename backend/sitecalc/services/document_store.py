"""
Document store — where calculators, projects and products are kept.

Two implementations share one async interface:

  InMemoryDocumentStore : dev mode and tests
  SqlDocumentStore      : async SQLAlchemy; each calculator is a JSONB document

Calculator and project reads are scoped by actor: guests see documents with
no owner, a signed-in user sees their own. Products are shared.
Every save writes the whole document.
"""
import abc
import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from sitecalc.models.actor import Actor, owner_key
from sitecalc.models.estimate_models import Estimate, ProductRecord, Project
from sitecalc.models.orm_models import CalculatorRow, ProductRow, ProjectRow

logger = logging.getLogger("sitecalc-db")


class DocumentStore(abc.ABC):
    # ── calculators ──────────────────────────────────────────────────────────
    @abc.abstractmethod
    async def load_estimate(self, actor: Actor, estimate_id: str) -> Optional[Estimate]: ...

    @abc.abstractmethod
    async def save_estimate(self, actor: Actor, estimate: Estimate) -> None: ...

    @abc.abstractmethod
    async def delete_estimate(self, actor: Actor, estimate_id: str) -> bool: ...

    @abc.abstractmethod
    async def list_estimates(self, actor: Actor, project_id: str) -> list[Estimate]: ...

    # ── projects ─────────────────────────────────────────────────────────────
    @abc.abstractmethod
    async def load_project(self, actor: Actor, project_id: str) -> Optional[Project]: ...

    @abc.abstractmethod
    async def save_project(self, actor: Actor, project: Project) -> None: ...

    @abc.abstractmethod
    async def delete_project(self, actor: Actor, project_id: str) -> bool:
        """Remove the project and every calculator under it."""

    @abc.abstractmethod
    async def list_projects(self, actor: Actor) -> list[Project]: ...

    # ── products ─────────────────────────────────────────────────────────────
    @abc.abstractmethod
    async def get_product(self, product_id: str) -> Optional[ProductRecord]: ...

    @abc.abstractmethod
    async def find_product_by_code(self, code: str) -> Optional[ProductRecord]: ...

    @abc.abstractmethod
    async def list_products(self) -> list[ProductRecord]: ...

    @abc.abstractmethod
    async def save_product(self, product: ProductRecord) -> None: ...

    @abc.abstractmethod
    async def delete_product(self, product_id: str) -> bool: ...

    @abc.abstractmethod
    async def search_products(self, term: str) -> list[ProductRecord]:
        """Products whose name or code starts with ``term``, each listed once."""


# ---------------------------------------------------------------------------
# In-memory
# ---------------------------------------------------------------------------

class InMemoryDocumentStore(DocumentStore):
    """Dict-backed store. Copies on the way in and out, like a real round trip."""

    def __init__(self):
        self._estimates: dict[str, Estimate] = {}
        self._projects: dict[str, Project] = {}
        self._products: dict[str, ProductRecord] = {}

    async def load_estimate(self, actor, estimate_id):
        doc = self._estimates.get(estimate_id)
        if doc is None or doc.owner_id != owner_key(actor):
            return None
        return doc.model_copy(deep=True)

    async def save_estimate(self, actor, estimate):
        doc = estimate.model_copy(deep=True)
        doc.owner_id = owner_key(actor)
        self._estimates[doc.id] = doc

    async def delete_estimate(self, actor, estimate_id):
        doc = self._estimates.get(estimate_id)
        if doc is None or doc.owner_id != owner_key(actor):
            return False
        del self._estimates[estimate_id]
        return True

    async def list_estimates(self, actor, project_id):
        owner = owner_key(actor)
        docs = [
            d for d in self._estimates.values()
            if d.project_id == project_id and d.owner_id == owner
        ]
        docs.sort(key=lambda d: d.created_at)
        return [d.model_copy(deep=True) for d in docs]

    async def load_project(self, actor, project_id):
        project = self._projects.get(project_id)
        if project is None or project.owner_id != owner_key(actor):
            return None
        return project.model_copy()

    async def save_project(self, actor, project):
        stored = project.model_copy()
        stored.owner_id = owner_key(actor)
        self._projects[stored.id] = stored

    async def delete_project(self, actor, project_id):
        project = self._projects.get(project_id)
        if project is None or project.owner_id != owner_key(actor):
            return False
        del self._projects[project_id]
        for estimate_id in [k for k, d in self._estimates.items() if d.project_id == project_id]:
            del self._estimates[estimate_id]
        return True

    async def list_projects(self, actor):
        owner = owner_key(actor)
        projects = [p for p in self._projects.values() if p.owner_id == owner]
        projects.sort(key=lambda p: p.created_at)
        return [p.model_copy() for p in projects]

    async def get_product(self, product_id):
        product = self._products.get(product_id)
        return product.model_copy() if product else None

    async def find_product_by_code(self, code):
        for product in self._products.values():
            if product.code == code:
                return product.model_copy()
        return None

    async def list_products(self):
        return [p.model_copy() for p in self._products.values()]

    async def save_product(self, product):
        self._products[product.id] = product.model_copy()

    async def delete_product(self, product_id):
        return self._products.pop(product_id, None) is not None

    async def search_products(self, term):
        if not term:
            return []
        hits = [p for p in self._products.values() if p.name.startswith(term)]
        hits += [p for p in self._products.values() if p.code.startswith(term)]
        unique = {p.id: p for p in hits}
        return [p.model_copy() for p in unique.values()]


# ---------------------------------------------------------------------------
# SQL (async SQLAlchemy)
# ---------------------------------------------------------------------------

def _owner_clause(column, actor: Actor):
    owner = owner_key(actor)
    return column.is_(None) if owner is None else column == owner


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive timestamps; Postgres keeps the zone
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def _project_from_row(row: ProjectRow) -> Project:
    return Project(
        id=row.id,
        name=row.name,
        owner_id=row.owner_id,
        created_at=_as_utc(row.created_at),
        date_sent=row.date_sent or "",
        job_address=row.job_address or "",
        to_address=row.to_address or "",
    )


def _product_from_row(row: ProductRow) -> ProductRecord:
    return ProductRecord(id=row.id, code=row.code, name=row.name, price=float(row.price or 0))


class SqlDocumentStore(DocumentStore):
    """Full-document read-modify-write against Postgres via async SQLAlchemy."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._sessions = session_factory

    async def load_estimate(self, actor, estimate_id):
        async with self._sessions() as session:
            result = await session.execute(
                select(CalculatorRow).where(
                    CalculatorRow.id == estimate_id,
                    _owner_clause(CalculatorRow.owner_id, actor),
                )
            )
            row = result.scalar_one_or_none()
            return Estimate.model_validate(row.document) if row else None

    async def save_estimate(self, actor, estimate):
        doc = estimate.model_copy(deep=True)
        doc.owner_id = owner_key(actor)
        payload = doc.model_dump(mode="json")
        async with self._sessions() as session, session.begin():
            row = await session.get(CalculatorRow, doc.id)
            if row is None:
                row = CalculatorRow(id=doc.id, created_at=doc.created_at)
                session.add(row)
            row.project_id = doc.project_id
            row.owner_id = doc.owner_id
            row.name = doc.name
            row.variant = doc.variant.value
            row.grand_total = doc.grand_total
            row.document = payload
        logger.debug("calculator saved", extra={"estimate_id": doc.id})

    async def delete_estimate(self, actor, estimate_id):
        async with self._sessions() as session, session.begin():
            result = await session.execute(
                delete(CalculatorRow).where(
                    CalculatorRow.id == estimate_id,
                    _owner_clause(CalculatorRow.owner_id, actor),
                )
            )
            return result.rowcount > 0

    async def list_estimates(self, actor, project_id):
        async with self._sessions() as session:
            result = await session.execute(
                select(CalculatorRow)
                .where(
                    CalculatorRow.project_id == project_id,
                    _owner_clause(CalculatorRow.owner_id, actor),
                )
                .order_by(CalculatorRow.created_at)
            )
            return [Estimate.model_validate(row.document) for row in result.scalars()]

    async def load_project(self, actor, project_id):
        async with self._sessions() as session:
            result = await session.execute(
                select(ProjectRow).where(
                    ProjectRow.id == project_id,
                    _owner_clause(ProjectRow.owner_id, actor),
                )
            )
            row = result.scalar_one_or_none()
            return _project_from_row(row) if row else None

    async def save_project(self, actor, project):
        async with self._sessions() as session, session.begin():
            row = await session.get(ProjectRow, project.id)
            if row is None:
                row = ProjectRow(id=project.id, created_at=project.created_at)
                session.add(row)
            row.owner_id = owner_key(actor)
            row.name = project.name
            row.date_sent = project.date_sent
            row.job_address = project.job_address
            row.to_address = project.to_address

    async def delete_project(self, actor, project_id):
        async with self._sessions() as session, session.begin():
            result = await session.execute(
                select(ProjectRow.id).where(
                    ProjectRow.id == project_id,
                    _owner_clause(ProjectRow.owner_id, actor),
                )
            )
            if result.scalar_one_or_none() is None:
                return False
            await session.execute(delete(CalculatorRow).where(CalculatorRow.project_id == project_id))
            await session.execute(delete(ProjectRow).where(ProjectRow.id == project_id))
            return True

    async def list_projects(self, actor):
        async with self._sessions() as session:
            result = await session.execute(
                select(ProjectRow)
                .where(_owner_clause(ProjectRow.owner_id, actor))
                .order_by(ProjectRow.created_at)
            )
            return [_project_from_row(row) for row in result.scalars()]

    async def get_product(self, product_id):
        async with self._sessions() as session:
            row = await session.get(ProductRow, product_id)
            return _product_from_row(row) if row else None

    async def find_product_by_code(self, code):
        async with self._sessions() as session:
            result = await session.execute(select(ProductRow).where(ProductRow.code == code).limit(1))
            row = result.scalar_one_or_none()
            return _product_from_row(row) if row else None

    async def list_products(self):
        async with self._sessions() as session:
            result = await session.execute(select(ProductRow).order_by(ProductRow.code))
            return [_product_from_row(row) for row in result.scalars()]

    async def save_product(self, product):
        async with self._sessions() as session, session.begin():
            row = await session.get(ProductRow, product.id)
            if row is None:
                row = ProductRow(id=product.id)
                session.add(row)
            row.code = product.code
            row.name = product.name
            row.price = product.price

    async def delete_product(self, product_id):
        async with self._sessions() as session, session.begin():
            result = await session.execute(delete(ProductRow).where(ProductRow.id == product_id))
            return result.rowcount > 0

    async def search_products(self, term):
        if not term:
            return []
        async with self._sessions() as session:
            result = await session.execute(
                select(ProductRow).where(
                    or_(
                        ProductRow.name.startswith(term, autoescape=True),
                        ProductRow.code.startswith(term, autoescape=True),
                    )
                )
            )
            unique = {row.id: _product_from_row(row) for row in result.scalars()}
            return list(unique.values())
