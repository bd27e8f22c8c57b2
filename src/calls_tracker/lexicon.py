"""Asset and category lexicon.

Static lookup tables that map aliases (tickers, coin names, team names, keyword sets)
to canonical assets and market categories. Kept as plain data so the tables can be
extended and tested independently of the parser.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from calls_tracker.models import Asset, Category

# alias (lower-case) -> (ticker, display name)
CRYPTO_ASSETS: dict[str, tuple[str, str]] = {
    "btc": ("BTC", "Bitcoin"),
    "bitcoin": ("BTC", "Bitcoin"),
    "eth": ("ETH", "Ethereum"),
    "ethereum": ("ETH", "Ethereum"),
    "sol": ("SOL", "Solana"),
    "solana": ("SOL", "Solana"),
    "bnb": ("BNB", "BNB"),
    "xrp": ("XRP", "XRP"),
    "ada": ("ADA", "Cardano"),
    "cardano": ("ADA", "Cardano"),
    "doge": ("DOGE", "Dogecoin"),
    "dogecoin": ("DOGE", "Dogecoin"),
    "dot": ("DOT", "Polkadot"),
    "polkadot": ("DOT", "Polkadot"),
    "avax": ("AVAX", "Avalanche"),
    "link": ("LINK", "Chainlink"),
    "chainlink": ("LINK", "Chainlink"),
    "matic": ("MATIC", "Polygon"),
    "uni": ("UNI", "Uniswap"),
    "atom": ("ATOM", "Cosmos"),
    "near": ("NEAR", "NEAR Protocol"),
    "arb": ("ARB", "Arbitrum"),
    "op": ("OP", "Optimism"),
    "sui": ("SUI", "Sui"),
    "apt": ("APT", "Aptos"),
    "sei": ("SEI", "Sei"),
    "jup": ("JUP", "Jupiter"),
    "jto": ("JTO", "Jito"),
    "bonk": ("BONK", "Bonk"),
    "wif": ("WIF", "dogwifhat"),
    "pepe": ("PEPE", "Pepe"),
}

STOCK_ASSETS: dict[str, tuple[str, str]] = {
    "nvda": ("NVDA", "NVIDIA"),
    "nvidia": ("NVDA", "NVIDIA"),
    "aapl": ("AAPL", "Apple"),
    "apple": ("AAPL", "Apple"),
    "msft": ("MSFT", "Microsoft"),
    "microsoft": ("MSFT", "Microsoft"),
    "googl": ("GOOGL", "Alphabet"),
    "goog": ("GOOGL", "Alphabet"),
    "google": ("GOOGL", "Alphabet"),
    "amzn": ("AMZN", "Amazon"),
    "amazon": ("AMZN", "Amazon"),
    "meta": ("META", "Meta"),
    "tsla": ("TSLA", "Tesla"),
    "tesla": ("TSLA", "Tesla"),
}

SPORTS_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(
        r"\b(Lakers|Celtics|Warriors|Bucks|76ers|Heat|Nuggets|Suns|Nets|Knicks|Clippers|"
        r"Mavericks|Grizzlies|Cavaliers|Kings|Timberwolves|Thunder|Pelicans|Hawks|Bulls|"
        r"Raptors|Pacers|Magic|Hornets|Pistons|Wizards|Spurs|Trail\s*Blazers|Jazz|Rockets)\b",
        re.IGNORECASE,
    ),
    re.compile(
        r"\b(Patriots|Chiefs|Eagles|49ers|Bills|Cowboys|Dolphins|Ravens|Bengals|Lions|Packers|"
        r"Seahawks|Chargers|Jaguars|Texans|Vikings|Steelers|Broncos|Raiders|Commanders|Bears|"
        r"Saints|Falcons|Browns|Rams|Jets|Panthers|Giants|Buccaneers|Colts|Titans|Cardinals)\b",
        re.IGNORECASE,
    ),
    re.compile(
        r"\b(Super\s*Bowl|NBA\s*Finals|World\s*Series|Stanley\s*Cup|Champions\s*League|"
        r"World\s*Cup|Olympics)\b",
        re.IGNORECASE,
    ),
    re.compile(r"\bGame\s+[1-7]\b", re.IGNORECASE),
    re.compile(r"will\s+(?:beat|defeat|win\s+against|lose\s+to|dominate)", re.IGNORECASE),
)

# Checked in order after tickers and sports; first match wins.
KEYWORD_CATEGORIES: tuple[tuple[Category, re.Pattern[str]], ...] = (
    (
        Category.STREAMING,
        re.compile(
            r"\b(stream|streaming|netflix|disney|hulu|hbo|prime\s+video|spotify|youtube)\b",
            re.IGNORECASE,
        ),
    ),
    (
        Category.MUSIC,
        re.compile(r"\b(billboard|grammy|album|song|artist|chart)\b", re.IGNORECASE),
    ),
    (
        Category.WEATHER,
        re.compile(
            r"\b(weather|temperature|rain|snow|hurricane|forecast|celsius|fahrenheit)\b",
            re.IGNORECASE,
        ),
    ),
    (
        Category.ELECTIONS,
        re.compile(
            r"\b(election|vote|poll|candidate|president|governor|senator|congress)\b",
            re.IGNORECASE,
        ),
    ),
    (
        Category.TECHNOLOGY,
        re.compile(
            r"\b(github|npm|pypi|framework|library|language|stack\s*overflow|ai|ml|llm)\b",
            re.IGNORECASE,
        ),
    ),
    (
        Category.ECONOMIC,
        re.compile(
            r"\b(gdp|inflation|interest\s+rate|fed|employment|stock|market\s+cap|revenue|earnings)\b",
            re.IGNORECASE,
        ),
    ),
)

# Prediction markets skew crypto, so an unclassifiable call defaults there.
DEFAULT_CATEGORY = Category.CRYPTO


@dataclass(frozen=True)
class DataSource:
    """Where a market in a category is resolved."""

    name: str
    url: str


DATA_SOURCES: dict[Category, DataSource] = {
    Category.CRYPTO: DataSource("CoinGecko", "https://www.coingecko.com"),
    Category.SPORTS: DataSource("ESPN", "https://www.espn.com"),
    Category.ECONOMIC: DataSource("FRED", "https://fred.stlouisfed.org"),
    Category.WEATHER: DataSource("NOAA", "https://www.weather.gov"),
    Category.STREAMING: DataSource("Netflix Top 10", "https://top10.netflix.com"),
    Category.MUSIC: DataSource("Billboard", "https://www.billboard.com"),
    Category.ELECTIONS: DataSource("Associated Press", "https://apnews.com"),
    Category.TECHNOLOGY: DataSource("GitHub Trending", "https://github.com/trending"),
}


def _alias_pattern(alias: str) -> re.Pattern[str]:
    return re.compile(rf"\b{re.escape(alias)}\b", re.IGNORECASE)


def _build_alias_index() -> tuple[tuple[re.Pattern[str], Asset], ...]:
    entries: list[tuple[str, Asset]] = [
        (alias, Asset(ticker=ticker, name=name, is_crypto=False))
        for alias, (ticker, name) in STOCK_ASSETS.items()
    ]
    entries.extend(
        (alias, Asset(ticker=ticker, name=name, is_crypto=True))
        for alias, (ticker, name) in CRYPTO_ASSETS.items()
    )
    # Longest alias first so "ethereum" wins over "eth" and short aliases never
    # fire inside a longer match.
    entries.sort(key=lambda item: len(item[0]), reverse=True)
    return tuple((_alias_pattern(alias), asset) for alias, asset in entries)


_ASSET_INDEX = _build_alias_index()
_CRYPTO_PATTERNS = tuple(_alias_pattern(alias) for alias in CRYPTO_ASSETS)
_STOCK_PATTERNS = tuple(_alias_pattern(alias) for alias in STOCK_ASSETS)


def is_sports_text(text: str) -> bool:
    """Return True if the text mentions a team, competition, or head-to-head phrasing."""
    return any(pattern.search(text) for pattern in SPORTS_PATTERNS)


def detect_category(text: str) -> Category:
    """Classify prediction text into a market category.

    Precedence: crypto tickers, stock tickers (economic), sports, then keyword sets.
    Falls back to `DEFAULT_CATEGORY` when nothing matches.
    """
    if any(pattern.search(text) for pattern in _CRYPTO_PATTERNS):
        return Category.CRYPTO
    if any(pattern.search(text) for pattern in _STOCK_PATTERNS):
        return Category.ECONOMIC
    if is_sports_text(text):
        return Category.SPORTS
    for category, pattern in KEYWORD_CATEGORIES:
        if pattern.search(text):
            return category
    return DEFAULT_CATEGORY


def detect_asset(text: str) -> Asset | None:
    """Find the first known asset alias in the text (longest alias first)."""
    for pattern, asset in _ASSET_INDEX:
        if pattern.search(text):
            return asset
    return None


def data_source_for(category: Category, asset: Asset | None = None) -> DataSource:
    """Pick the resolution data source for a category.

    Crypto assets resolve against their own CoinGecko coin page.
    """
    if asset is not None and asset.is_crypto:
        slug = re.sub(r"\s+", "-", asset.name.strip().lower())
        return DataSource("CoinGecko", f"https://www.coingecko.com/en/coins/{slug}")
    return DATA_SOURCES.get(category, DATA_SOURCES[DEFAULT_CATEGORY])
