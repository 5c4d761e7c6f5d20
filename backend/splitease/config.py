from __future__ import annotations

import os


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() not in ("0", "false", "no", "off")


class Config:
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    CURRENCY = os.getenv("CURRENCY", "INR").strip()
    CURRENCY_SYMBOL = os.getenv("CURRENCY_SYMBOL", "₹")
    # a payer may cover an expense without sharing in it
    ALLOW_PAYER_EXCLUDED = _env_flag("ALLOW_PAYER_EXCLUDED", "true")
