from decimal import Decimal

import pytest

from pdv.domain import cart as cart_ops
from pdv.domain.cart import Cart
from pdv.domain.errors import SizeSelectionRequired, UnknownSizeError
from pdv.domain.models import Combo, Order, OrderItem, OrderStatus, Product, SizeVariant


@pytest.fixture
def shake():
    return Product(
        id="shake",
        name="Milkshake",
        category_id="cat",
        sizes=[SizeVariant("P", Decimal("8")), SizeVariant("G", Decimal("14"))],
    )


@pytest.fixture
def cookie():
    return Product(id="cookie", name="Cookie", category_id="cat", price=Decimal("6"))


def test_sizes_add_scenario(shake):
    cart = Cart()
    cart = cart_ops.add_to_cart(cart, shake, "P")
    cart = cart_ops.add_to_cart(cart, shake, "P")
    cart = cart_ops.add_to_cart(cart, shake, "G")

    assert [(line.id, line.quantity) for line in cart] == [("shake-P", 2), ("shake-G", 1)]
    assert cart.get("shake-P").name == "Milkshake (P)"
    assert cart.get("shake-G").price == Decimal("14")


def test_repeated_add_merges_into_one_line(cookie):
    cart = Cart()
    for _ in range(5):
        cart = cart_ops.add_to_cart(cart, cookie)
    assert len(cart) == 1
    assert cart.get("cookie").quantity == 5
    assert cart.item_count == 5


def test_merge_keeps_snapshot_price(cookie):
    cart = cart_ops.add_to_cart(Cart(), cookie)
    cookie.price = Decimal("9")
    cart = cart_ops.add_to_cart(cart, cookie)
    assert cart.get("cookie").price == Decimal("6")


def test_mutations_return_new_cart(cookie):
    before = Cart()
    after = cart_ops.add_to_cart(before, cookie)
    assert before is not after
    assert len(before) == 0


def test_multiple_sizes_require_choice(shake):
    with pytest.raises(SizeSelectionRequired) as info:
        cart_ops.add_to_cart(Cart(), shake)
    assert info.value.sizes == ["P", "G"]


def test_single_size_is_picked_automatically():
    product = Product(id="x", name="Açaí", sizes=[SizeVariant("500ml", Decimal("18"))])
    cart = cart_ops.add_to_cart(Cart(), product)
    assert cart.get("x-500ml").price == Decimal("18")


def test_unknown_size(shake):
    with pytest.raises(UnknownSizeError):
        cart_ops.add_to_cart(Cart(), shake, "GG")


def test_combo_line():
    combo = Combo(id="combo", name="Combo", final_price=Decimal("15"))
    cart = cart_ops.add_to_cart(Cart(), combo)
    line = cart.get("combo")
    assert line.is_combo
    assert line.price == Decimal("15")


@pytest.mark.parametrize("delta", [-1, -3, -100])
def test_quantity_never_below_one(cookie, delta):
    cart = cart_ops.add_to_cart(Cart(), cookie)
    cart = cart_ops.add_to_cart(cart, cookie)
    cart = cart_ops.change_quantity(cart, "cookie", delta)
    assert cart.get("cookie").quantity == 1


def test_change_quantity_unknown_line_is_noop(cookie):
    cart = cart_ops.add_to_cart(Cart(), cookie)
    assert cart_ops.change_quantity(cart, "nope", 3).lines == cart.lines


def test_remove_and_clear(cookie, shake):
    cart = cart_ops.add_to_cart(Cart(), cookie)
    cart = cart_ops.add_to_cart(cart, shake, "G")
    cart = cart_ops.remove_from_cart(cart, "cookie")
    assert [line.id for line in cart] == ["shake-G"]
    assert not cart_ops.clear_cart()


def test_cart_from_order():
    order = Order(
        id="o1",
        status=OrderStatus.SOLICITADO,
        itens=[
            OrderItem("shake", "Milkshake (G)", 2, Decimal("14"), Decimal("28"), size="G"),
            OrderItem("cookie", "Cookie", 1, Decimal("6"), Decimal("6")),
        ],
    )
    cart = cart_ops.cart_from_order(order)
    assert [(line.id, line.quantity) for line in cart] == [("shake-G", 2), ("cookie", 1)]
