import asyncio
from typing import Awaitable, Callable, Optional

from utils.logger import setup_logger


class LoopScheduler:
    """Периодический запуск цикла с фиксированным интервалом.

    Запуск цикла (управление) отделен от отсчета до следующего запуска
    (отображение): on_tick получает число оставшихся секунд, 0 в конце паузы.
    """

    def __init__(self, run_cycle: Callable[[], Awaitable], interval_seconds: int,
                 on_tick: Optional[Callable[[int], None]] = None,
                 on_error: Optional[Callable[[BaseException], None]] = None,
                 sleep=asyncio.sleep, max_cycles: Optional[int] = None):
        self.run_cycle = run_cycle
        self.interval_seconds = interval_seconds
        self.on_tick = on_tick
        self.on_error = on_error
        self.sleep = sleep
        self.max_cycles = max_cycles
        self.cycles_run = 0
        self.is_running = False
        self.logger = setup_logger("LoopScheduler")
        self._task: Optional[asyncio.Task] = None
        self._stop_requested = False

    async def _countdown(self):
        for seconds_left in range(self.interval_seconds, 0, -1):
            if self.on_tick:
                self.on_tick(seconds_left)
            await self.sleep(1)
        if self.on_tick:
            self.on_tick(0)

    async def _loop(self):
        self.is_running = True
        self.logger.info(f"🚀 Loop started, interval {self.interval_seconds}s")

        while self.is_running:
            try:
                await self.run_cycle()
            except Exception as e:
                # Цикл никогда не останавливает главный цикл
                self.logger.error(f"❌ Fatal cycle error: {e}", exc_info=True)
                if self.on_error:
                    self.on_error(e)

            self.cycles_run += 1
            if self.max_cycles is not None and self.cycles_run >= self.max_cycles:
                break
            if not self.is_running:
                break

            await self._countdown()

        self.is_running = False
        self.logger.info(f"🛑 Loop stopped after {self.cycles_run} cycles")

    async def run(self):
        """Запуск и ожидание завершения (stop() или max_cycles)"""
        self._task = asyncio.create_task(self._loop())
        try:
            await self._task
        except asyncio.CancelledError:
            self.is_running = False
            if not self._stop_requested:
                raise
            self.logger.info("🛑 Loop cancelled")

    def stop(self):
        """Отмена: текущий цикл прерывается в ближайшей точке ожидания"""
        self.is_running = False
        self._stop_requested = True
        if self._task and not self._task.done():
            self._task.cancel()
