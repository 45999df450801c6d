from config.constants import ROUTER_ABI
from core.models import Direction, SwapPlan, route_to_abi
from utils.logger import setup_logger


class SwapService:
    """Вызовы свапа через роутер: оценка газа, отправка, ожидание receipt"""

    def __init__(self, wallet, config):
        self.wallet = wallet
        self.config = config
        self.logger = setup_logger("SwapService")
        self.router_address = config.router_address
        self.router_contract = wallet.contract(config.router_address, ROUTER_ABI)

    def _build_call(self, plan: SwapPlan, min_out: int, deadline: int):
        routes = route_to_abi(plan.route)
        if plan.direction is Direction.NATIVE_TO_TOKEN:
            return self.router_contract.functions.swapExactETHForTokens(
                min_out,
                routes,
                self.wallet.address,
                deadline
            ), plan.amount_in

        return self.router_contract.functions.swapExactTokensForETH(
            plan.amount_in,
            min_out,
            routes,
            self.wallet.address,
            deadline
        ), 0

    def estimate_swap_gas(self, plan: SwapPlan, min_out: int, deadline: int) -> int:
        """Оценка газа свапа; ошибка оценки пробрасывается (ревертнет и сама транзакция)"""
        call, value = self._build_call(plan, min_out, deadline)
        return call.estimate_gas({'from': self.wallet.address, 'value': value})

    async def submit_swap(self, plan: SwapPlan, min_out: int, deadline: int,
                          gas_price: int, gas_limit: int, nonce: int) -> str:
        call, value = self._build_call(plan, min_out, deadline)
        tx_hash = await self.wallet.send_transaction(
            call,
            gas_price=gas_price,
            gas_limit=gas_limit,
            nonce=nonce,
            value=value
        )
        self.logger.info(f"📤 {plan.direction.value} swap sent: {tx_hash}")
        return tx_hash

    async def wait_for_receipt(self, tx_hash: str):
        return await self.wallet.wait_for_receipt(tx_hash)
