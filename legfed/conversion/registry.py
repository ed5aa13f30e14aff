"""
Entity registry.

Named mappings from natural key to Item, one mapping per entity kind,
used to deduplicate entities across the record stream of a run (and
across several files in the same run). A registry belongs to exactly
one converter invocation and is not thread-safe.
"""

from typing import Callable, Iterator, Optional

from legfed.models.item import Item


class EntityRegistry:
    """
    Get-or-create store of Items keyed by (kind, natural key).

    Using the same key under two different kinds for what the caller
    means to be one entity is a caller bug; it is not detected here.
    """

    def __init__(self):
        self._maps: dict[str, dict[str, Item]] = {}

    def resolve(
        self,
        kind: str,
        key: str,
        factory: Callable[[], Item],
    ) -> tuple[Item, bool]:
        """
        Return the Item for a key, creating it on first use.

        Args:
            kind: Entity kind (usually the Item class name)
            key: Natural key
            factory: Builds the new Item; called at most once per key and
                must not store anything

        Returns:
            Tuple of (item, created)
        """
        mapping = self._maps.setdefault(kind, {})
        existing = mapping.get(key)
        if existing is not None:
            return existing, False
        item = factory()
        mapping[key] = item
        return item, True

    def get_or_create(self, kind: str, key: str, factory: Callable[[], Item]) -> Item:
        item, _ = self.resolve(kind, key, factory)
        return item

    def get(self, kind: str, key: str) -> Optional[Item]:
        return self._maps.get(kind, {}).get(key)

    def contains(self, kind: str, key: str) -> bool:
        return key in self._maps.get(kind, {})

    def all(self, kind: str) -> list[Item]:
        """All Items of a kind, in insertion order."""
        return list(self._maps.get(kind, {}).values())

    def keys(self, kind: str) -> list[str]:
        return list(self._maps.get(kind, {}).keys())

    def kinds(self) -> list[str]:
        return list(self._maps.keys())

    def count(self, kind: str) -> int:
        return len(self._maps.get(kind, {}))

    def __len__(self) -> int:
        return sum(len(mapping) for mapping in self._maps.values())

    def __iter__(self) -> Iterator[Item]:
        for mapping in self._maps.values():
            yield from mapping.values()

    def summary(self) -> dict[str, int]:
        return {kind: len(mapping) for kind, mapping in self._maps.items()}
