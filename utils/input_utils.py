import os
import sys
from getpass import getpass
from typing import Callable, Optional


def _hidden_input_supported() -> bool:
    # В PyCharm и при перенаправленном stdin getpass не скрывает ввод
    return 'PYCHARM_HOSTED' not in os.environ and sys.stdin.isatty()


def safe_getpass(prompt: str) -> str:
    """Ввод секрета (приватный ключ, ключ шифрования) без эха, если терминал позволяет"""
    if _hidden_input_supported():
        return getpass(f"{prompt}: ").strip()

    print(f"🚨 ВНИМАНИЕ: {prompt} будет виден при вводе!")
    value = input(f"{prompt}: ").strip()
    clear_console_line()
    return value


def prompt_secret(prompt: str, validator: Optional[Callable[[str], bool]] = None,
                  attempts: int = 3) -> str:
    """Повторный запрос секрета, пока validator не примет значение"""
    for attempt in range(1, attempts + 1):
        value = safe_getpass(prompt)
        if validator is None or validator(value):
            return value
        print(f"❌ Неверный формат ({attempt}/{attempts})")

    raise ValueError(f"{prompt}: no valid value after {attempts} attempts")


def clear_console_line():
    """Стираем строку с введенным секретом (ANSI)"""
    print("\033[F\033[K", end="")
