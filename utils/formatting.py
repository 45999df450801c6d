from decimal import Decimal, InvalidOperation, ROUND_DOWN


def format_units(amount: int, decimals: int = 18, digits: int = 6) -> str:
    """Перевод сырых единиц в строку с фиксированным числом знаков"""
    try:
        value = Decimal(int(amount)).scaleb(-int(decimals))
        quantum = Decimal(1).scaleb(-digits)
        return str(value.quantize(quantum, rounding=ROUND_DOWN))
    except (InvalidOperation, TypeError, ValueError):
        return "0"


def format_token_amount(amount: int, decimals: int, symbol: str, digits: int = 6) -> str:
    return f"{format_units(amount, decimals, digits)} {symbol}"


def short_address(address: str, head: int = 6, tail: int = 4) -> str:
    if not address or len(address) <= head + tail + 2:
        return address or "-"
    return f"{address[:head]}…{address[-tail:]}"
