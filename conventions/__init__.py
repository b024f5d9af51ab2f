from .base import Convention
from .h_group import HGroup
from .ref_sieve import RefSieve

CONVENTIONS: dict[str, type[Convention]] = {
    "HGroup": HGroup,
    "RefSieve": RefSieve,
}

__all__ = ["CONVENTIONS", "Convention", "HGroup", "RefSieve"]
