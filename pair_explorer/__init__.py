"""
pair-explorer: read Uniswap V2 style pair state through a Multicall aggregator.

Example:
    from pair_explorer import PairExplorerSession, PairResolver

    session = PairExplorerSession(PairResolver.from_config())
    session.pair_address = "0xB4e16d0168e52d35CaCD2c6185b44281Ec28C9Dc"
    result = await session.fetch_pair_data()
"""

from .models import (
    CallDescriptor,
    DecodedField,
    ErrorKind,
    PairFetchResult,
    PairRecord,
    ReserveRecord,
    TokenRecord,
)
from .pipeline import PairExplorerSession, PairResolver, ResolverState, SessionSnapshot

__version__ = "0.1.0"

__all__ = [
    "CallDescriptor",
    "DecodedField",
    "ErrorKind",
    "PairFetchResult",
    "PairRecord",
    "ReserveRecord",
    "TokenRecord",
    "PairExplorerSession",
    "PairResolver",
    "ResolverState",
    "SessionSnapshot",
]
