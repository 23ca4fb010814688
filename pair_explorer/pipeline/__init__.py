from .pair_resolver import PairResolver, ResolverState
from .session import PairExplorerSession, SessionSnapshot

__all__ = [
    "PairResolver",
    "ResolverState",
    "PairExplorerSession",
    "SessionSnapshot",
]
