"""Bulk fetch of every source collection from the hosted backend (PostgREST)."""

import asyncio
import logging
from dataclasses import dataclass, field

import httpx

from src.core.config import settings
from src.modules.collections.schemas import DataBag
from src.shared.schemas import Notice, Severity

logger = logging.getLogger(__name__)

# DataBag field -> (table, select expression)
COLLECTION_TABLES: dict[str, tuple[str, str]] = {
    "orders": ("client_orders", "*,clients(*)"),
    "inventory": ("inventory", "*"),
    "employees": ("employees", "*"),
    "attendance": ("attendance", "*"),
    "payroll": ("payroll", "*"),
    "machinery": ("machinery", "*"),
    "maintenance_records": ("maintenance_records", "*"),
    "clients": ("clients", "*"),
    "suppliers": ("suppliers", "*"),
}


@dataclass
class LoadResult:
    bag: DataBag
    notices: list[Notice] = field(default_factory=list)


class CollectionLoader:
    """
    Fetch all collections concurrently and assemble a DataBag.

    A failed table is logged and reported as an error notice; its collection
    stays empty while the others keep their results.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls) -> "CollectionLoader":
        return cls(
            settings.data_source_url or "",
            settings.data_source_key or "",
            timeout=settings.data_source_timeout_seconds,
        )

    def _headers(self) -> dict[str, str]:
        return {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
            "Accept": "application/json",
        }

    async def _fetch_table(self, client: httpx.AsyncClient, table: str, select: str) -> list[dict]:
        response = await client.get(f"/rest/v1/{table}", params={"select": select})
        response.raise_for_status()
        rows = response.json()
        if not isinstance(rows, list):
            raise ValueError(f"expected a list of rows from '{table}', got {type(rows).__name__}")
        return rows

    async def load(self) -> LoadResult:
        async with httpx.AsyncClient(
            base_url=self.base_url,
            headers=self._headers(),
            timeout=self.timeout,
            transport=self._transport,
        ) as client:
            names = list(COLLECTION_TABLES)
            results = await asyncio.gather(
                *(self._fetch_table(client, *COLLECTION_TABLES[name]) for name in names),
                return_exceptions=True,
            )

        raw: dict[str, list[dict]] = {}
        notices: list[Notice] = []
        for name, result in zip(names, results):
            table = COLLECTION_TABLES[name][0]
            if isinstance(result, BaseException):
                logger.error("Failed to fetch %s: %s", table, result)
                notices.append(
                    Notice(severity=Severity.ERROR, message=f"Failed to load {table}: {result}")
                )
                raw[name] = []
            else:
                raw[name] = result
        logger.info(
            "Loaded collections: %s",
            ", ".join(f"{name}={len(rows)}" for name, rows in raw.items()),
        )
        return LoadResult(bag=DataBag.model_validate(raw), notices=notices)


async def resolve_bag(data: DataBag | None) -> LoadResult:
    """The posted bag if any, else a fresh load from the configured backend."""
    if data is not None:
        return LoadResult(bag=data)
    if settings.use_data_source:
        return await CollectionLoader.from_settings().load()
    return LoadResult(
        bag=DataBag(),
        notices=[
            Notice(
                severity=Severity.WARNING,
                message="No data supplied and no data source configured.",
            )
        ],
    )
