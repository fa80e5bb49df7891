import json
from decimal import Decimal

from pdv.domain.coupons import CouponTable
from pdv.domain.models import DiscountType


def test_default_table():
    table = CouponTable.default()
    assert len(table) == 2
    promo = table.lookup(" promo10 ")
    assert promo.type == DiscountType.PERCENT
    assert promo.value == Decimal("10")
    assert "desc5" in table
    assert table.lookup("XYZ") is None
    assert table.lookup(None) is None


def test_table_from_file(tmp_path):
    path = tmp_path / "coupons.json"
    path.write_text(json.dumps({"frete": {"type": "value", "value": 7.5, "label": "Frete"}}), encoding="utf-8")

    table = CouponTable.from_file(path)

    coupon = table.lookup("FRETE")
    assert coupon.code == "FRETE"
    assert coupon.value == Decimal("7.5")
    assert "PROMO10" not in table
