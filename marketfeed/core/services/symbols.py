"""Static symbol directory: company names, sectors, search and trending lists."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from marketfeed.core.services.profiles import normalize_symbol

DEFAULT_SECTOR = "Other"
SEARCH_LIMIT = 10


@dataclass(frozen=True)
class SymbolInfo:
    """Directory entry for a listed instrument."""

    symbol: str
    name: str
    sector: str = DEFAULT_SECTOR


_IDX_LISTINGS: Sequence[tuple[str, str, str]] = (
    ("BBCA", "Bank Central Asia", "Finance"),
    ("BBRI", "Bank Rakyat Indonesia", "Finance"),
    ("BMRI", "Bank Mandiri", "Finance"),
    ("BBNI", "Bank Negara Indonesia", "Finance"),
    ("BRIS", "Bank Syariah Indonesia", "Finance"),
    ("BTPS", "Bank BTPN Syariah", "Finance"),
    ("TLKM", "Telkom Indonesia", "Infrastructure"),
    ("EXCL", "XL Axiata", "Infrastructure"),
    ("ISAT", "Indosat Ooredoo", "Infrastructure"),
    ("TOWR", "Sarana Menara Nusantara", "Infrastructure"),
    ("ASII", "Astra International", "Consumer"),
    ("UNVR", "Unilever Indonesia", "Consumer"),
    ("INDF", "Indofood Sukses Makmur", "Consumer"),
    ("ICBP", "Indofood CBP", "Consumer"),
    ("MYOR", "Mayora Indah", "Consumer"),
    ("GGRM", "Gudang Garam", "Consumer"),
    ("HMSP", "HM Sampoerna", "Consumer"),
    ("KLBF", "Kalbe Farma", "Healthcare"),
    ("ANTM", "Aneka Tambang", "Mining"),
    ("PTBA", "Bukit Asam", "Mining"),
    ("ADRO", "Adaro Energy", "Mining"),
    ("INCO", "Vale Indonesia", "Mining"),
    ("MEDC", "Medco Energi", "Energy"),
    ("ITMG", "Indo Tambangraya", "Mining"),
    ("MDKA", "Merdeka Copper Gold", "Mining"),
    ("GOTO", "GoTo Gojek Tokopedia", "Tech"),
    ("BUKA", "Bukalapak", "Tech"),
    ("EMTK", "Elang Mahkota", "Tech"),
    ("DCII", "DCI Indonesia", "Tech"),
    ("BSDE", "Bumi Serpong Damai", "Property"),
    ("SMRA", "Summarecon Agung", "Property"),
    ("CTRA", "Ciputra Development", "Property"),
    ("WIKA", "Wijaya Karya", "Infrastructure"),
    ("PTPP", "PP (Persero)", "Infrastructure"),
    ("ACES", "Ace Hardware Indonesia", "Retail"),
    ("ERAA", "Erajaya Swasembada", "Retail"),
    ("TPIA", "Chandra Asri", "Chemicals"),
    ("AMRT", "Sumber Alfaria", "Retail"),
    ("SCMA", "Surya Citra Media", "Media"),
)

# Most active IDX names.
TRENDING_SYMBOLS: tuple[str, ...] = ("BBCA", "BBRI", "TLKM", "ASII", "GOTO", "BMRI", "ANTM", "UNVR")


class SymbolDirectory:
    """Name and sector lookup for known symbols."""

    def __init__(self, listings: Mapping[str, SymbolInfo] | None = None) -> None:
        if listings is None:
            listings = {symbol: SymbolInfo(symbol, name, sector) for symbol, name, sector in _IDX_LISTINGS}
        self._listings = dict(listings)

    def lookup(self, symbol: str) -> SymbolInfo:
        """Directory entry for ``symbol``; unknown symbols use the symbol as name."""
        normalized = normalize_symbol(symbol)
        return self._listings.get(normalized) or SymbolInfo(normalized, normalized)

    def search(self, query: str, limit: int = SEARCH_LIMIT) -> list[SymbolInfo]:
        """Match ``query`` against symbols and company names, case-insensitively."""
        needle = query.strip().upper()
        if not needle:
            return []
        matches = [
            info for symbol, info in self._listings.items() if needle in symbol or needle in info.name.upper()
        ]
        return matches[:limit]

    def trending(self) -> list[str]:
        return list(TRENDING_SYMBOLS)

    def __contains__(self, symbol: object) -> bool:
        return isinstance(symbol, str) and normalize_symbol(symbol) in self._listings

    def __len__(self) -> int:
        return len(self._listings)


__all__ = ["DEFAULT_SECTOR", "SEARCH_LIMIT", "SymbolDirectory", "SymbolInfo", "TRENDING_SYMBOLS"]
