import time

from core.gas_monitor import GasMonitor
from core.models import CycleState, Direction
from services.quote_service import min_amount_out
from utils.formatting import format_token_amount
from utils.logger import setup_logger


class TransactionEngine:
    """Один торговый цикл: план -> ликвидность -> котировка -> газ -> approve -> свап.

    После каждого изменения состояния вызывается render(state). Любое
    исключение внутри цикла превращается в статус и не выходит наружу.
    """

    def __init__(self, config, wallet, balance_service, resolver, plan_builder,
                 quote_service, approval_manager, swap_service, gas_monitor: GasMonitor,
                 render=None, clock=time.time):
        self.config = config
        self.wallet = wallet
        self.balance_service = balance_service
        self.resolver = resolver
        self.plan_builder = plan_builder
        self.quote_service = quote_service
        self.approval_manager = approval_manager
        self.swap_service = swap_service
        self.gas_monitor = gas_monitor
        self.render = render or (lambda _state: None)
        self.clock = clock
        self.logger = setup_logger("TransactionEngine")

        self.stats = {
            'cycles': 0,
            'skipped': 0,
            'successful_swaps': 0,
            'failed_swaps': 0,
            'errors': 0
        }

    def _set_status(self, state: CycleState, status: str):
        state.status = status
        self.render(state)

    async def execute_cycle(self) -> CycleState:
        self.stats['cycles'] += 1
        state = CycleState()

        try:
            await self._run_cycle(state)
        except Exception as e:
            self.stats['errors'] += 1
            self.logger.error(f"❌ Cycle failed: {e}", exc_info=True)
            state.status = f"Error: {e}"
            try:
                self.render(state)
            except Exception as render_error:
                # Ошибка отрисовки не выходит за границу цикла
                self.logger.error(f"❌ Dashboard render failed: {render_error}", exc_info=True)

        return state

    async def _run_cycle(self, state: CycleState):
        # 1. Снимок балансов и объемов
        state.balances = await self.balance_service.get_balances()
        state.volume_data = await self.balance_service.get_volume_data()
        self.render(state)

        # 2. План
        plan = await self.plan_builder.build_random_plan()
        if plan.skip:
            self.stats['skipped'] += 1
            self._set_status(state, f"Skip: {plan.reason}")
            return

        state.routes = list(plan.route)
        state.direction = plan.direction.label(self.config.native_symbol)
        state.amount_in_disp = plan.amount_in_disp

        # 3. Ликвидность
        self._set_status(state, "Checking liquidity…")
        liquid = await self.quote_service.wait_liquidity(
            plan.amount_in,
            plan.route,
            self.config.liquidity_attempts,
            self.config.liquidity_interval_ms
        )
        if not liquid:
            self.stats['skipped'] += 1
            self._set_status(state, "No liquidity. Skipping.")
            return

        # 4. Котировка
        self._set_status(state, "Quoting…")
        quote = await self.quote_service.get_quote(plan.amount_in, plan.route)
        if not quote.ok or quote.out == 0:
            self.stats['skipped'] += 1
            self._set_status(state, "Invalid quote. Skipping.")
            return

        # 5. Выходной токен, minOut, газ, дедлайн
        if plan.direction is Direction.NATIVE_TO_TOKEN:
            out_meta = plan.token_meta
        else:
            out_meta = await self.resolver.get_token_meta(self.config.wrapped_native)

        min_out = min_amount_out(quote.out, self.config.slippage_bps)
        state.quote_out_disp = format_token_amount(quote.out, out_meta.decimals, out_meta.symbol)
        state.min_out_disp = format_token_amount(min_out, out_meta.decimals, out_meta.symbol)

        gas_price = self.gas_monitor.get_gas_price().value
        state.gas_price_disp = self.gas_monitor.format_gwei(gas_price)

        deadline = int(self.clock()) + self.config.deadline_seconds
        state.deadline_disp = f"{deadline} (in {self.config.deadline_seconds // 60}m)"

        # 6. Approve строго до оценки газа и nonce свапа
        if plan.direction is Direction.TOKEN_TO_NATIVE:
            await self.approval_manager.ensure_approval(
                plan.token_address,
                self.config.router_address,
                plan.amount_in,
                on_submit=lambda: self._set_status(state, f"Approving {plan.token_meta.symbol}…")
            )

        # 7. Газ свапа с запасом и свежий nonce
        self._set_status(state, "Estimating gas…")
        gas_estimate = self.swap_service.estimate_swap_gas(plan, min_out, deadline)
        gas_limit = self.gas_monitor.buffered(gas_estimate)
        state.gas_limit_disp = str(gas_limit)
        self.render(state)

        nonce = self.wallet.get_nonce()

        # 8. Отправка legacy-транзакции
        self._set_status(state, "Sending transaction (legacy)…")
        tx_hash = await self.swap_service.submit_swap(
            plan, min_out, deadline, gas_price, gas_limit, nonce
        )
        self._set_status(state, f"Sent: {tx_hash}")

        # 9. Подтверждение
        receipt = await self.swap_service.wait_for_receipt(tx_hash)
        if receipt.status == 1:
            self.stats['successful_swaps'] += 1
            self._set_status(state, f"Success • Block {receipt.blockNumber}")
        else:
            self.stats['failed_swaps'] += 1
            self._set_status(state, f"Failed • Block {receipt.blockNumber}")
