import asyncio
import math
from typing import Dict, List, Optional

import aiohttp

from config.constants import DEFAULT_DECIMALS, PLACEHOLDER_SYMBOL
from core.models import CHAIN_ERRORS, Fetched, RegistryEntry, TokenMeta, VolumeShare
from utils.formatting import format_token_amount
from utils.logger import setup_logger


def parse_registry_payload(payload) -> Dict[str, RegistryEntry]:
    """Разбор ответа реестра {"data": [...]} в словарь address.lower() -> запись"""
    if not isinstance(payload, dict):
        return {}

    items = payload.get("data")
    if not isinstance(items, list):
        return {}

    registry = {}
    for item in items:
        if not isinstance(item, dict):
            continue
        address = item.get("address")
        if not isinstance(address, str) or not address:
            continue

        try:
            decimals = int(item.get("decimals"))
            if decimals < 0:
                decimals = None
        except (TypeError, ValueError):
            decimals = None

        try:
            volume = float(item.get("volume24h") or 0)
        except (TypeError, ValueError):
            volume = 0.0
        # float() принимает "NaN" и "Infinity"
        if not math.isfinite(volume):
            volume = 0.0

        symbol = str(item.get("symbol") or PLACEHOLDER_SYMBOL)
        registry[address.lower()] = RegistryEntry(
            address=address,
            symbol=symbol,
            decimals=decimals,
            name=str(item.get("name") or symbol),
            volume24h=max(volume, 0.0),
        )

    return registry


class TokenRegistry:
    """Снимок реестра токенов с REST API (весь список за один GET)"""

    def __init__(self, config):
        self.config = config
        self.logger = setup_logger("TokenRegistry")

    async def _fetch_json(self):
        timeout = aiohttp.ClientTimeout(total=self.config.registry_timeout)
        headers = {'Accept': 'application/json'}

        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.get(self.config.token_api_url, headers=headers) as response:
                response.raise_for_status()
                return await response.json(content_type=None)

    async def fetch(self) -> Fetched:
        """Реестр никогда не бросает исключение: при ошибке - пустой словарь"""
        try:
            payload = await self._fetch_json()
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            self.logger.warning(f"⚠️ Token registry unavailable: {e}")
            return Fetched.fallback({}, e)

        registry = parse_registry_payload(payload)
        self.logger.debug(f"🔍 Token registry snapshot: {len(registry)} tokens")
        return Fetched(registry)


class TokenMetaResolver:
    def __init__(self, wallet, registry: TokenRegistry):
        self.wallet = wallet
        self.registry = registry
        self.logger = setup_logger("TokenMetaResolver")

    def _read_decimals(self, token_address: str) -> Fetched:
        try:
            decimals = int(self.wallet.contract(token_address).functions.decimals().call())
            return Fetched(decimals or DEFAULT_DECIMALS)
        except CHAIN_ERRORS as e:
            return Fetched.fallback(DEFAULT_DECIMALS, e)

    def _read_symbol(self, token_address: str) -> Fetched:
        try:
            return Fetched(self.wallet.contract(token_address).functions.symbol().call())
        except CHAIN_ERRORS as e:
            return Fetched.fallback(PLACEHOLDER_SYMBOL, e)

    async def get_token_meta(self, token_address: str) -> TokenMeta:
        """Метаданные токена: сначала реестр, затем чтение контракта"""
        registry = await self.registry.fetch()
        entry = registry.value.get(token_address.lower())
        if entry is not None and entry.decimals is not None:
            return entry.to_meta()

        decimals = self._read_decimals(token_address)
        symbol = self._read_symbol(token_address)
        if not decimals.ok or not symbol.ok:
            self.logger.warning(
                f"⚠️ On-chain metadata fallback for {token_address}: "
                f"decimals={decimals.value}, symbol={symbol.value}"
            )

        return TokenMeta(
            symbol=symbol.value,
            decimals=decimals.value,
            name=symbol.value,
            volume24h=0.0,
        )


class BalanceService:
    """Снимок балансов кошелька и долей объема торгов для дашборда"""

    def __init__(self, wallet, config, registry: TokenRegistry):
        self.wallet = wallet
        self.config = config
        self.registry = registry
        self.logger = setup_logger("BalanceService")

    async def get_balances(self) -> Dict[str, str]:
        balances = {}

        native = self.wallet.get_balance()
        balances[self.config.native_symbol] = format_token_amount(
            native, 18, self.config.native_symbol
        )

        # Обернутый нативный токен показываем последним
        symbols = [s for s in self.config.tokens if s != self.config.wrapped_native_symbol]
        symbols.append(self.config.wrapped_native_symbol)

        for symbol in symbols:
            address = self.config.tokens[symbol]
            try:
                contract = self.wallet.contract(address)
                balance = contract.functions.balanceOf(self.wallet.address).call()
                decimals = contract.functions.decimals().call()
                balances[symbol] = format_token_amount(balance, decimals, symbol)
            except CHAIN_ERRORS as e:
                self.logger.warning(f"⚠️ Failed to read {symbol} balance: {e}")
                balances[symbol] = "Error"

        return balances

    async def get_volume_data(self) -> Optional[List[VolumeShare]]:
        """Доля 24h объема каждого торгуемого токена среди торгуемых токенов"""
        registry = await self.registry.fetch()
        tradeable = set(self.config.tradeable_symbols)
        entries = [e for e in registry.value.values() if e.symbol in tradeable]
        if not entries:
            return None

        total = sum(e.volume24h for e in entries)
        if not math.isfinite(total) or total <= 0:
            return None

        return [VolumeShare(e.symbol, e.volume24h / total * 100) for e in entries]
