from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

import requests
from web3 import Web3
from web3.exceptions import Web3Exception

# Ошибки RPC/контрактов, которые считаем ожидаемыми при обращении к сети
# (web3 v6 отдает ошибки JSON-RPC как ValueError)
CHAIN_ERRORS = (Web3Exception, requests.RequestException, ValueError, TimeoutError)


class Direction(str, Enum):
    NATIVE_TO_TOKEN = "native_to_token"
    TOKEN_TO_NATIVE = "token_to_native"

    def label(self, native_symbol: str = "NATIVE") -> str:
        if self is Direction.NATIVE_TO_TOKEN:
            return f"{native_symbol} → TOKEN"
        return f"TOKEN → {native_symbol}"


@dataclass(frozen=True)
class TokenMeta:
    symbol: str
    decimals: int
    name: str
    volume24h: float = 0.0


@dataclass(frozen=True)
class RegistryEntry:
    """Запись реестра токенов; decimals=None если поле отсутствует или битое"""
    address: str
    symbol: str
    decimals: Optional[int]
    name: str
    volume24h: float = 0.0

    def to_meta(self) -> TokenMeta:
        return TokenMeta(
            symbol=self.symbol,
            decimals=self.decimals,
            name=self.name,
            volume24h=self.volume24h,
        )


@dataclass(frozen=True)
class RouteHop:
    from_address: str
    to_address: str
    stable: bool = False


Route = Tuple[RouteHop, ...]


def route_to_abi(route: Route) -> List[Tuple[str, str, bool]]:
    return [
        (Web3.to_checksum_address(hop.from_address), Web3.to_checksum_address(hop.to_address), hop.stable)
        for hop in route
    ]


def route_connects(route: Route, source: str, destination: str) -> bool:
    """Маршрут начинается в source, заканчивается в destination и не рвется"""
    if not route:
        return False
    if route[0].from_address.lower() != source.lower():
        return False
    if route[-1].to_address.lower() != destination.lower():
        return False
    return all(
        prev.to_address.lower() == nxt.from_address.lower()
        for prev, nxt in zip(route, route[1:])
    )


@dataclass(frozen=True)
class SwapPlan:
    direction: Optional[Direction] = None
    amount_in: int = 0
    route: Route = ()
    token_address: str = ""
    token_meta: Optional[TokenMeta] = None
    amount_in_disp: str = ""
    skip: bool = False
    reason: str = ""

    @classmethod
    def skipped(cls, reason: str) -> "SwapPlan":
        return cls(skip=True, reason=reason)


@dataclass(frozen=True)
class Quote:
    ok: bool
    amounts: Tuple[int, ...] = ()
    out: int = 0

    @classmethod
    def failed(cls) -> "Quote":
        return cls(ok=False, amounts=(), out=0)

    @classmethod
    def from_amounts(cls, amounts) -> "Quote":
        amounts = tuple(int(a) for a in amounts)
        if not amounts:
            return cls.failed()
        return cls(ok=True, amounts=amounts, out=amounts[-1])


@dataclass(frozen=True)
class Fetched:
    """Результат обращения к внешней системе: значение или запасное значение"""
    value: Any
    ok: bool = True
    error: Optional[str] = None

    @classmethod
    def fallback(cls, value: Any, error: Any = None) -> "Fetched":
        return cls(value=value, ok=False, error=str(error) if error is not None else None)


@dataclass(frozen=True)
class VolumeShare:
    symbol: str
    volume_percent: float


@dataclass
class CycleState:
    balances: Dict[str, str] = field(default_factory=dict)
    volume_data: Optional[List[VolumeShare]] = None
    routes: List[RouteHop] = field(default_factory=list)
    direction: Optional[str] = None
    amount_in_disp: Optional[str] = None
    quote_out_disp: Optional[str] = None
    min_out_disp: Optional[str] = None
    gas_price_disp: Optional[str] = None
    gas_limit_disp: Optional[str] = None
    deadline_disp: Optional[str] = None
    status: str = "Preparing…"
