"""Quality standards and the registry that holds them."""

from suite_doctor.rules.quality_standards import DEFAULT_STANDARDS
from suite_doctor.rules.registry import StandardRegistry, normalize_standard_id

DEFAULT_REGISTRY = StandardRegistry(DEFAULT_STANDARDS)

__all__ = [
    "DEFAULT_REGISTRY",
    "DEFAULT_STANDARDS",
    "StandardRegistry",
    "normalize_standard_id",
]
