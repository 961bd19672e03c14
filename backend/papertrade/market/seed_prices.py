"""Seed prices and per-pair parameters for the offline price simulator.

Keyed by Binance pair (normalized symbol), so "BTC/USDT", "$BTC" and "BTC"
all start from the same price.
"""

SEED_PRICES: dict[str, float] = {
    "btcusdt": 67000.00,
    "ethusdt": 3500.00,
    "bnbusdt": 580.00,
    "solusdt": 150.00,
    "xrpusdt": 0.60,
    "adausdt": 0.45,
    "dogeusdt": 0.15,
    "atomusdt": 8.50,
    "linkusdt": 17.00,
    "avaxusdt": 35.00,
}

# Per-pair GBM parameters
# sigma: annualized volatility
# mu: annualized drift
PAIR_PARAMS: dict[str, dict[str, float]] = {
    "btcusdt": {"sigma": 0.60, "mu": 0.10},
    "ethusdt": {"sigma": 0.75, "mu": 0.10},
    "bnbusdt": {"sigma": 0.70, "mu": 0.05},
    "solusdt": {"sigma": 1.00, "mu": 0.10},
    "xrpusdt": {"sigma": 0.90, "mu": 0.00},
    "adausdt": {"sigma": 0.95, "mu": 0.00},
    "dogeusdt": {"sigma": 1.20, "mu": 0.00},  # Meme coin
}

# Default parameters for pairs not in the list above (dynamically added)
DEFAULT_PARAMS: dict[str, float] = {"sigma": 0.90, "mu": 0.05}

# Correlation groups for the simulator's Cholesky decomposition
CORRELATION_GROUPS: dict[str, set[str]] = {
    "majors": {"btcusdt", "ethusdt"},
}

INTRA_MAJORS_CORR = 0.8  # BTC and ETH move together
MAJOR_ALT_CORR = 0.6  # Alts follow the majors
DEFAULT_CORR = 0.5  # Alt vs alt, unknown pairs
