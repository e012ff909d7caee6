# billtracker/services/formatting.py
# pt-BR display helpers shared by reminder e-mails and reports
from datetime import date, datetime
from decimal import Decimal
from typing import Union

STATUS_LABELS = {"paid": "Pago", "pending": "Pendente"}
NO_CATEGORY = "Sem categoria"
YES, NO = "Sim", "Não"


def format_brl(amount: Union[Decimal, float, int]) -> str:
    return f"R$ {Decimal(str(amount)):.2f}"


def format_date(value: Union[date, datetime]) -> str:
    return value.strftime("%d/%m/%Y")


def format_datetime(value: datetime) -> str:
    return value.strftime("%d/%m/%Y %H:%M:%S")


def yes_no(flag: bool) -> str:
    return YES if flag else NO
