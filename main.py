import asyncio
import signal
import sys
import os

sys.path.append(os.path.dirname(__file__))

from dotenv import load_dotenv

from config.settings import load_config
from core.gas_monitor import GasMonitor
from core.scheduler import LoopScheduler
from core.transaction_engine import TransactionEngine
from core.wallet_manager import Wallet
from services.approval_service import ApprovalManager
from services.plan_service import PlanBuilder
from services.quote_service import QuoteService
from services.swap_service import SwapService
from services.token_service import BalanceService, TokenMetaResolver, TokenRegistry
from utils.dashboard import Dashboard, DashboardHeader
from utils.logger import DEFAULT_LOG_FILE, configure_logging, setup_logger
from utils.randomizer import Randomizer
from utils.security import load_signing_key


class SwapBot:
    def __init__(self, config):
        self.config = config
        self.logger = setup_logger("SwapBot")
        self.wallet = None
        self.dashboard = None
        self.transaction_engine = None
        self.scheduler = None

    def initialize(self, private_key: str) -> bool:
        """Сборка всех компонентов из одной конфигурации"""
        self.logger.info("🔄 Initializing swap bot...")

        self.wallet = Wallet.from_private_key(
            private_key,
            self.config.rpc_url,
            self.config.chain_id,
            self.config.receipt_timeout
        )
        if not self.wallet.is_connected():
            self.logger.warning(f"⚠️ RPC not reachable yet: {self.config.rpc_url}")

        registry = TokenRegistry(self.config)
        resolver = TokenMetaResolver(self.wallet, registry)
        gas_monitor = GasMonitor(self.wallet, self.config)

        self.dashboard = Dashboard(
            DashboardHeader(
                network_name=self.config.network_name,
                chain_id=self.config.chain_id,
                router_address=self.config.router_address,
                wallet_address=self.wallet.address,
                mode=self.config.mode,
                loop_seconds=self.config.loop_seconds,
            ),
            labels={address: symbol for symbol, address in self.config.tokens.items()},
        )

        self.transaction_engine = TransactionEngine(
            config=self.config,
            wallet=self.wallet,
            balance_service=BalanceService(self.wallet, self.config, registry),
            resolver=resolver,
            plan_builder=PlanBuilder(self.wallet, self.config, resolver, Randomizer()),
            quote_service=QuoteService(self.wallet, self.config),
            approval_manager=ApprovalManager(self.wallet, self.config, gas_monitor),
            swap_service=SwapService(self.wallet, self.config),
            gas_monitor=gas_monitor,
            render=self.dashboard.draw,
        )

        self.scheduler = LoopScheduler(
            self.transaction_engine.execute_cycle,
            self.config.loop_seconds,
            on_tick=self.dashboard.draw_countdown,
            on_error=self.dashboard.show_fatal,
        )

        self.logger.info(f"✅ Swap bot initialized for wallet {self.wallet.address}")
        return True

    async def run(self):
        loop = asyncio.get_running_loop()
        try:
            loop.add_signal_handler(signal.SIGINT, self.shutdown)
            loop.add_signal_handler(signal.SIGTERM, self.shutdown)
        except (NotImplementedError, RuntimeError):
            # Windows: остается KeyboardInterrupt
            pass

        await self.scheduler.run()

    def shutdown(self):
        """Корректное завершение работы"""
        self.logger.info("🛑 Shutting down swap bot...")
        if self.scheduler:
            self.scheduler.stop()

    @property
    def stats(self) -> dict:
        return dict(self.transaction_engine.stats) if self.transaction_engine else {}


def main():
    # Обработчики нужны уже при загрузке конфигурации; после нее - файл из конфига
    load_dotenv()
    configure_logging(os.getenv("LOG_FILE", DEFAULT_LOG_FILE), os.getenv("LOG_LEVEL", "INFO"))

    try:
        config = load_config()
        private_key = load_signing_key()
    except ValueError as e:
        print(f"❌ Startup error: {e}")
        sys.exit(1)

    configure_logging(config.log_file, config.log_level)

    bot = SwapBot(config)
    bot.initialize(private_key)

    try:
        asyncio.run(bot.run())
    except KeyboardInterrupt:
        print("\n\n🛑 Программа прервана пользователем")

    stats = bot.stats
    print(
        f"\n📊 Cycles: {stats.get('cycles', 0)} | ✅ {stats.get('successful_swaps', 0)} | "
        f"❌ {stats.get('failed_swaps', 0)} | ⏭️ {stats.get('skipped', 0)} | 💥 {stats.get('errors', 0)}"
    )


if __name__ == "__main__":
    print("🌐 Injective Swap Bot - Automated Pumex Router Swaps")
    main()
