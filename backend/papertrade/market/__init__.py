"""Live price feed for the PaperTrade dashboard.

Public API:
    PriceUpdate         - Immutable price snapshot dataclass
    PriceTick           - One decoded trade price for a dashboard symbol
    PriceCache          - Thread-safe latest-price table with listeners
    MarketDataSource    - Abstract interface for price feeds
    BinanceStreamSource - Live feed over the Binance combined trade stream
    SubscriptionSync    - Keeps a feed subscribed to the ledger's symbols
    create_market_data_source - Factory that selects Binance or the simulator
    create_stream_router - FastAPI router factory for price endpoints
    normalize, stream_name, match_symbol, build_stream_path - Symbol mapping
    decode_frame        - Combined-stream frame demultiplexer
"""

from .binance_client import BinanceStreamSource, ConnectionState
from .cache import PriceCache
from .factory import create_market_data_source
from .frames import decode_frame
from .interface import MarketDataSource
from .models import PriceTick, PriceUpdate
from .stream import create_stream_router
from .symbols import build_stream_path, match_symbol, normalize, stream_name
from .sync import SubscriptionSync

__all__ = [
    "BinanceStreamSource",
    "ConnectionState",
    "PriceCache",
    "PriceTick",
    "PriceUpdate",
    "MarketDataSource",
    "SubscriptionSync",
    "build_stream_path",
    "create_market_data_source",
    "create_stream_router",
    "decode_frame",
    "match_symbol",
    "normalize",
    "stream_name",
]
