from typing import Dict

from ..registry import MethodRegistry
from .legacy import LEGACY
from .standard import STANDARD

CATALOGS: Dict[str, MethodRegistry] = {
    STANDARD.name: STANDARD,
    LEGACY.name: LEGACY,
}


def get_registry(name: str) -> MethodRegistry:
    try:
        return CATALOGS[name]
    except KeyError:
        raise ValueError(
            f"Unknown catalog '{name}', expected one of: {', '.join(CATALOGS)}"
        ) from None
