import random
from decimal import Decimal
from typing import Any, Optional, Sequence


class Randomizer:
    """Источник случайности для планировщика свапов.

    Все выборы идут через экземпляр random.Random, поэтому тесты могут
    подставить засеянный генератор и получить детерминированный план.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def choice(self, items: Sequence[Any]) -> Any:
        """Равновероятный выбор элемента"""
        return self.rng.choice(items) if items else None

    def coin_flip(self) -> bool:
        """50/50"""
        return self.rng.random() > 0.5

    def get_random_amount(self, min_value: float, max_value: float, digits: int = 4) -> Decimal:
        """Случайная сумма в диапазоне, округленная до digits знаков"""
        value = self.rng.random() * (max_value - min_value) + min_value
        return Decimal(f"{value:.{digits}f}")

    def get_random_percentage(self, min_percent: int, max_percent: int) -> int:
        """Целый процент в полуинтервале [min_percent, max_percent)"""
        return int(self.rng.random() * (max_percent - min_percent) + min_percent)
