import asyncio

from config.constants import BPS_DENOMINATOR, ROUTER_ABI
from core.models import CHAIN_ERRORS, Quote, Route, route_to_abi
from utils.logger import setup_logger


def min_amount_out(amount_out: int, slippage_bps: int) -> int:
    """Минимальный выход с учетом проскальзывания, целочисленно с усечением"""
    return amount_out * (BPS_DENOMINATOR - slippage_bps) // BPS_DENOMINATOR


class QuoteService:
    """Котировки через getAmountsOut роутера и ожидание ликвидности"""

    def __init__(self, wallet, config, sleep=asyncio.sleep):
        self.wallet = wallet
        self.config = config
        self.sleep = sleep
        self.logger = setup_logger("QuoteService")
        self.router_contract = wallet.contract(config.router_address, ROUTER_ABI)

    async def get_quote(self, amount_in: int, route: Route) -> Quote:
        """Котировка маршрута; ошибка котировки - штатная ситуация, не исключение"""
        try:
            amounts = self.router_contract.functions.getAmountsOut(
                amount_in,
                route_to_abi(route)
            ).call()
            return Quote.from_amounts(amounts)
        except CHAIN_ERRORS as e:
            self.logger.debug(f"🔍 Quote failed for amount {amount_in}: {e}")
            return Quote.failed()

    async def has_liquidity(self, amount_in: int, route: Route) -> bool:
        quote = await self.get_quote(amount_in, route)
        return quote.ok and quote.out > 0

    async def wait_liquidity(self, amount_in: int, route: Route,
                             max_attempts: int = 12, interval_ms: int = 3000) -> bool:
        """Опрос ликвидности: не более max_attempts попыток с фиксированной паузой"""
        for attempt in range(1, max_attempts + 1):
            if await self.has_liquidity(amount_in, route):
                self.logger.info(f"✅ Liquidity found on attempt {attempt}/{max_attempts}")
                return True

            if attempt < max_attempts:
                await self.sleep(interval_ms / 1000)

        self.logger.warning(f"⚠️ No liquidity after {max_attempts} attempts")
        return False
