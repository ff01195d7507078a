"""Immutable registry of quality standards.

Standards are added or removed by building a new registry, so the
aggregation code never sees a registry change underneath it.
"""

from collections.abc import Iterable, Iterator

from suite_doctor.models.quality_models import Standard, StandardCategory


def normalize_standard_id(standard_id: str) -> str:
    """Normalize a standard id for lookup (case and surrounding space)."""
    return standard_id.strip().lower()


class StandardRegistry:
    """Ordered, read-only collection of :class:`Standard` descriptors."""

    def __init__(self, standards: Iterable[Standard] = ()) -> None:
        ordered: dict[str, Standard] = {}
        for standard in standards:
            key = normalize_standard_id(standard.standard_id)
            if key in ordered:
                raise ValueError(f"Duplicate standard id: {standard.standard_id}")
            ordered[key] = standard
        self._standards = ordered

    def __iter__(self) -> Iterator[Standard]:
        return iter(self._standards.values())

    def __len__(self) -> int:
        return len(self._standards)

    def __contains__(self, standard_id: object) -> bool:
        return isinstance(standard_id, str) and self.has(standard_id)

    @property
    def standards(self) -> tuple[Standard, ...]:
        return tuple(self._standards.values())

    def has(self, standard_id: str) -> bool:
        return normalize_standard_id(standard_id) in self._standards

    def get(self, standard_id: str) -> Standard:
        key = normalize_standard_id(standard_id)
        if key not in self._standards:
            raise KeyError(f"Unknown standard: {standard_id}")
        return self._standards[key]

    def with_standard(self, standard: Standard) -> "StandardRegistry":
        """Return a new registry with ``standard`` appended."""
        return StandardRegistry([*self._standards.values(), standard])

    def without(self, standard_id: str) -> "StandardRegistry":
        """Return a new registry lacking ``standard_id``."""
        key = normalize_standard_id(standard_id)
        if key not in self._standards:
            raise KeyError(f"Unknown standard: {standard_id}")
        return StandardRegistry(s for k, s in self._standards.items() if k != key)

    def select(self, categories: Iterable[StandardCategory | str]) -> "StandardRegistry":
        """Return a new registry restricted to the given categories."""
        wanted = {StandardCategory(category) for category in categories}
        return StandardRegistry(s for s in self._standards.values() if s.category in wanted)

    def by_category(self) -> dict[StandardCategory, list[Standard]]:
        grouped: dict[StandardCategory, list[Standard]] = {}
        for standard in self._standards.values():
            grouped.setdefault(standard.category, []).append(standard)
        return grouped
