from web3 import Web3

from config.constants import MODE_RANDOM
from core.models import Direction, RouteHop, SwapPlan, route_connects
from utils.formatting import format_token_amount
from utils.logger import setup_logger
from utils.randomizer import Randomizer


class PlanBuilder:
    """Случайный план свапа на один цикл: направление, токен, сумма, маршрут"""

    def __init__(self, wallet, config, resolver, randomizer: Randomizer = None):
        self.wallet = wallet
        self.config = config
        self.resolver = resolver
        self.randomizer = randomizer or Randomizer()
        self.logger = setup_logger("PlanBuilder")

    def resolve_direction(self) -> Direction:
        if self.config.mode == MODE_RANDOM:
            if self.randomizer.coin_flip():
                return Direction.NATIVE_TO_TOKEN
            return Direction.TOKEN_TO_NATIVE
        return Direction(self.config.mode)

    def native_to_token_route(self, token_symbol: str, token_address: str):
        return (
            RouteHop(self.config.wrapped_native, self.config.intermediate, False),
            RouteHop(self.config.intermediate, token_address,
                     token_symbol in self.config.stable_hop_symbols),
        )

    def token_to_native_route(self, token_address: str):
        return (
            RouteHop(token_address, self.config.intermediate, False),
            RouteHop(self.config.intermediate, self.config.wrapped_native, False),
        )

    async def build_random_plan(self) -> SwapPlan:
        pick = self.randomizer.choice(self.config.tradeable_tokens())
        token_meta = await self.resolver.get_token_meta(pick.address)
        direction = self.resolve_direction()

        if direction is Direction.NATIVE_TO_TOKEN:
            low, high = self.config.native_amount_range
            amount_in = Web3.to_wei(self.randomizer.get_random_amount(low, high), 'ether')
            plan = SwapPlan(
                direction=direction,
                amount_in=amount_in,
                route=self.native_to_token_route(pick.symbol, pick.address),
                token_address=pick.address,
                token_meta=token_meta,
                amount_in_disp=format_token_amount(amount_in, 18, self.config.native_symbol),
            )
        else:
            balance = self.wallet.get_token_balance(pick.address)
            if balance <= 0:
                self.logger.info(f"ℹ️ No {pick.symbol} balance, skipping cycle")
                return SwapPlan.skipped(f"No {pick.symbol} balance")

            low_pct, high_pct = self.config.token_percent_range
            percent = self.randomizer.get_random_percentage(low_pct, high_pct)
            # Минимум 1 единица, чтобы сумма не обнулилась на пыльных балансах
            amount_in = max(balance * percent // 100, 1)
            plan = SwapPlan(
                direction=direction,
                amount_in=amount_in,
                route=self.token_to_native_route(pick.address),
                token_address=pick.address,
                token_meta=token_meta,
                amount_in_disp=format_token_amount(amount_in, token_meta.decimals, pick.symbol),
            )

        if plan.direction is Direction.NATIVE_TO_TOKEN:
            source, destination = self.config.wrapped_native, pick.address
        else:
            source, destination = pick.address, self.config.wrapped_native
        if not route_connects(plan.route, source, destination):
            raise ValueError(f"Broken route for {pick.symbol}: {plan.route}")

        self.logger.info(f"🎯 Plan: {direction.value} {plan.amount_in_disp} ({pick.symbol})")
        return plan
