from src.modules.collections.schemas import DataBag
from src.modules.collections.service import CollectionLoader, LoadResult, resolve_bag

__all__ = ["DataBag", "CollectionLoader", "LoadResult", "resolve_bag"]
