"""Tabela de cupons, carregada da configuração e injetada onde é usada."""

from __future__ import annotations

import json
from decimal import Decimal
from pathlib import Path
from typing import Any, Mapping, Optional

from pdv.domain.models import Coupon, DiscountType


DEFAULT_COUPONS: dict[str, dict[str, Any]] = {
    "PROMO10": {"type": "percent", "value": 10, "label": "10% OFF"},
    "DESC5": {"type": "value", "value": 5, "label": "R$ 5,00 OFF"},
}


def normalize_code(code: Optional[str]) -> str:
    return (code or "").strip().upper()


class CouponTable:
    """Consulta de cupons por código (sem diferenciar maiúsculas)."""

    def __init__(self, coupons: Mapping[str, Coupon]):
        self._coupons = {normalize_code(code): c for code, c in coupons.items()}

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Mapping[str, Any]]) -> "CouponTable":
        coupons = {}
        for code, data in raw.items():
            key = normalize_code(code)
            coupons[key] = Coupon(
                code=key,
                type=DiscountType(data["type"]),
                value=Decimal(str(data["value"])),
                label=str(data.get("label", "")),
            )
        return cls(coupons)

    @classmethod
    def from_file(cls, path: str | Path) -> "CouponTable":
        with open(path, encoding="utf-8") as fh:
            return cls.from_mapping(json.load(fh))

    @classmethod
    def default(cls) -> "CouponTable":
        return cls.from_mapping(DEFAULT_COUPONS)

    def lookup(self, code: Optional[str]) -> Optional[Coupon]:
        return self._coupons.get(normalize_code(code))

    def __contains__(self, code: object) -> bool:
        return isinstance(code, str) and normalize_code(code) in self._coupons

    def __len__(self) -> int:
        return len(self._coupons)
