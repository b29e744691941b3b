"""Per-instrument price profiles used to seed synthetic data."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass


@dataclass(frozen=True)
class InstrumentProfile:
    """Base price and typical daily swing of an instrument.

    ``volatility`` is a fraction: 0.01 means a 1% typical daily move.
    ``reference_change_percent`` is the typical day change used when
    fabricating a single quote.
    """

    base_price: float
    volatility: float
    reference_change_percent: float = 0.0


DEFAULT_PROFILE = InstrumentProfile(base_price=1000.0, volatility=0.02)

BUILTIN_PROFILES: dict[str, InstrumentProfile] = {
    # Banking, low volatility blue chips
    "BBCA": InstrumentProfile(9900, 0.012, -0.50),
    "BBRI": InstrumentProfile(5600, 0.015, -1.14),
    "BMRI": InstrumentProfile(6350, 0.014, -1.52),
    "BBNI": InstrumentProfile(5025, 0.016, -0.80),
    "BRIS": InstrumentProfile(2750, 0.018, 0.75),
    "BTPS": InstrumentProfile(1305, 0.018, -0.38),
    # Infrastructure and telco
    "TLKM": InstrumentProfile(3800, 0.018, -1.47),
    "EXCL": InstrumentProfile(2380, 0.022, -0.92),
    "ISAT": InstrumentProfile(9875, 0.020, 0.50),
    "TOWR": InstrumentProfile(755, 0.020, -0.66),
    # Consumer and retail
    "ASII": InstrumentProfile(5100, 0.020, -1.27),
    "UNVR": InstrumentProfile(2980, 0.015, -0.56),
    "INDF": InstrumentProfile(6675, 0.017, -0.77),
    "ICBP": InstrumentProfile(11025, 0.015, -0.95),
    "MYOR": InstrumentProfile(2560, 0.018, 0.44),
    "GGRM": InstrumentProfile(15975, 0.020, -2.43),
    "HMSP": InstrumentProfile(665, 0.020, -1.48),
    "KLBF": InstrumentProfile(1420, 0.018, -0.70),
    "ACES": InstrumentProfile(600, 0.022, -1.64),
    "ERAA": InstrumentProfile(394, 0.025, -2.96),
    "AMRT": InstrumentProfile(3110, 0.020, 2.98),
    # Mining and energy
    "ANTM": InstrumentProfile(1485, 0.035, -3.00),
    "PTBA": InstrumentProfile(2700, 0.028, -1.58),
    "ADRO": InstrumentProfile(2650, 0.030, -0.79),
    "INCO": InstrumentProfile(4200, 0.032, 1.69),
    "MEDC": InstrumentProfile(1320, 0.028, -0.83),
    "ITMG": InstrumentProfile(25500, 0.028, -1.16),
    "MDKA": InstrumentProfile(2370, 0.032, -0.84),
    "TPIA": InstrumentProfile(8375, 0.025, -0.30),
    # Tech, high volatility
    "GOTO": InstrumentProfile(82, 0.050, -1.52),
    "BUKA": InstrumentProfile(210, 0.045, -2.54),
    "EMTK": InstrumentProfile(475, 0.038, -3.90),
    "DCII": InstrumentProfile(35000, 0.035, 0.58),
    "SCMA": InstrumentProfile(119, 0.035, -0.83),
    # Property and construction
    "BSDE": InstrumentProfile(1025, 0.025, -0.51),
    "SMRA": InstrumentProfile(695, 0.028, -0.83),
    "CTRA": InstrumentProfile(1190, 0.026, -1.00),
    "WIKA": InstrumentProfile(394, 0.030, -1.50),
    "PTPP": InstrumentProfile(478, 0.030, -0.83),
    # US
    "AAPL": InstrumentProfile(195.50, 0.015, 0.85),
    "MSFT": InstrumentProfile(425.20, 0.014, 1.10),
    "GOOGL": InstrumentProfile(175.80, 0.017, -0.45),
    "AMZN": InstrumentProfile(185.30, 0.018, 0.92),
    "TSLA": InstrumentProfile(255.10, 0.035, -1.20),
    "NVDA": InstrumentProfile(495.90, 0.030, 2.30),
    "META": InstrumentProfile(585.40, 0.022, 1.15),
    "NFLX": InstrumentProfile(895.60, 0.022, 0.78),
    "AMD": InstrumentProfile(138.20, 0.030, 1.45),
    "INTC": InstrumentProfile(21.10, 0.025, -0.85),
    # Crypto
    "BTC-USD": InstrumentProfile(106500.00, 0.035, 2.15),
    "ETH-USD": InstrumentProfile(3950.20, 0.040, 1.85),
    "BNB-USD": InstrumentProfile(720.10, 0.035, 0.95),
    "XRP-USD": InstrumentProfile(2.45, 0.050, 3.20),
    "ADA-USD": InstrumentProfile(1.05, 0.050, 2.15),
    "SOL-USD": InstrumentProfile(225.20, 0.055, 4.80),
    "DOGE-USD": InstrumentProfile(0.40, 0.060, 1.55),
}


def normalize_symbol(symbol: str) -> str:
    """Upper-case a symbol and strip the Jakarta exchange suffix."""
    cleaned = symbol.strip().upper()
    if cleaned.endswith(".JK"):
        cleaned = cleaned[: -len(".JK")]
    return cleaned


class ProfileRegistry:
    """Resolves instrument profiles with a generic default."""

    def __init__(
        self,
        profiles: Mapping[str, InstrumentProfile] | None = None,
        default: InstrumentProfile = DEFAULT_PROFILE,
    ) -> None:
        source = BUILTIN_PROFILES if profiles is None else profiles
        self._profiles = {normalize_symbol(symbol): profile for symbol, profile in source.items()}
        self.default = default

    def resolve(self, symbol: str) -> InstrumentProfile:
        return self._profiles.get(normalize_symbol(symbol), self.default)

    def __contains__(self, symbol: object) -> bool:
        return isinstance(symbol, str) and normalize_symbol(symbol) in self._profiles

    def register(self, symbol: str, profile: InstrumentProfile) -> None:
        self._profiles[normalize_symbol(symbol)] = profile


__all__ = [
    "BUILTIN_PROFILES",
    "DEFAULT_PROFILE",
    "InstrumentProfile",
    "ProfileRegistry",
    "normalize_symbol",
]
