import math
import sys
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Mapping, Optional

from core.models import CycleState
from utils.formatting import short_address

WIDTH = 70
BAR_WIDTH = 15
CLEAR_SCREEN = "\033[2J\033[H"


@dataclass(frozen=True)
class DashboardHeader:
    network_name: str
    chain_id: int
    router_address: str
    wallet_address: str
    mode: str
    loop_seconds: int
    title: str = "INJECTIVE EVM SWAP BOT (PUMEX)"


def volume_bar(value: float, max_value: float = 100, width: int = BAR_WIDTH) -> str:
    """Пропорциональная полоса из блоков + процент"""
    if not math.isfinite(value):
        value = 0.0
    ratio = min(max(value / max_value, 0.0), 1.0) if max_value else 0.0
    filled = round(ratio * width)
    return "█" * filled + "░" * (width - filled) + f" {value:.2f}%"


def _border(left: str, right: str) -> str:
    return left + "─" * (WIDTH - 2) + right


def _title_line(title: str) -> str:
    return "│" + title.center(WIDTH - 2) + "│"


def _separator() -> str:
    return "─" * WIDTH


def _label(address: str, labels: Mapping[str, str]) -> str:
    return labels.get(address.lower()) or short_address(address)


def render_dashboard(state: CycleState, header: DashboardHeader,
                     labels: Optional[Mapping[str, str]] = None,
                     now: Optional[datetime] = None) -> str:
    """Чистая функция: состояние цикла -> текстовая панель. State не изменяется."""
    labels = labels or {}
    now = now or datetime.now()
    lines = [
        _border("┌", "┐"),
        _title_line(header.title),
        _border("├", "┤"),
        f" Network:  {header.network_name} (chainId {header.chain_id})",
        f" Router:   {header.router_address}",
        f" Wallet:   {header.wallet_address}",
        f" Mode:     {header.mode}",
        f" Loop:     {header.loop_seconds}s",
        _separator(),
        " Balances:",
    ]

    if state.balances:
        for symbol, balance in state.balances.items():
            lines.append(f"   {symbol:<6}: {balance}")
    else:
        lines.append("   -")
    lines.append(_separator())

    lines.append(f" Swap:     {state.direction or '-'}")
    lines.append(f" Amount:   {state.amount_in_disp or '-'}")
    if state.routes:
        lines.append(" Route:")
        for index, hop in enumerate(state.routes, 1):
            arrow = "──(stable)──→" if hop.stable else "─(volatile)─→"
            lines.append(
                f"   {index:02d}. {_label(hop.from_address, labels)} {arrow} {_label(hop.to_address, labels)}"
            )
    else:
        lines.append(" Route:    -")
    lines.append(f" Quote:    {state.quote_out_disp or '-'}")
    lines.append(f" Min Out:  {state.min_out_disp or '-'}")
    lines.append(f" Gas:      {state.gas_price_disp or '-'} | Limit: {state.gas_limit_disp or '-'}")
    lines.append(f" Deadline: {state.deadline_disp or '-'}")
    lines.append(_separator())

    if state.volume_data:
        lines.append(" Market Volume (24h):")
        for share in state.volume_data:
            lines.append(f"   {share.symbol:<6}: {volume_bar(share.volume_percent)}")
        lines.append(_separator())

    lines.append(f" Status: {state.status or 'Idle'}")
    lines.append(f" Last update: {now.strftime('%Y-%m-%d %H:%M:%S')}")
    lines.append(_border("└", "┘"))
    return "\n".join(lines)


class Dashboard:
    """Вывод панели в терминал: очистка экрана и перерисовка"""

    def __init__(self, header: DashboardHeader, labels: Optional[Mapping[str, str]] = None,
                 write: Callable[[str], None] = None):
        self.header = header
        self.labels = {address.lower(): symbol for address, symbol in (labels or {}).items()}
        self.write = write or self._write_stdout

    @staticmethod
    def _write_stdout(text: str):
        sys.stdout.write(text)
        sys.stdout.flush()

    def draw(self, state: CycleState):
        self.write(CLEAR_SCREEN + render_dashboard(state, self.header, self.labels) + "\n")

    def draw_countdown(self, seconds_left: int):
        if seconds_left > 0:
            self.write(f"\rNext run in {seconds_left:02d}s   ")
        else:
            self.write("\r" + " " * 25 + "\r")

    def show_fatal(self, error: BaseException):
        self.write(CLEAR_SCREEN + f"❌ Fatal: {error}\n")
