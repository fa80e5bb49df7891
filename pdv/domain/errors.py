"""Domain exceptions. `message` is the text shown to the operator."""

from __future__ import annotations

from typing import Optional


class PDVError(Exception):
    """Base class for business-rule violations."""

    default_message = "Operação inválida."

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidCouponError(PDVError):
    default_message = "Cupom inválido."


class EmptyCartError(PDVError):
    default_message = "Carrinho vazio."


class MissingPaymentMethodError(PDVError):
    default_message = "Selecione a forma de pagamento."


class InvalidPaymentMethodError(PDVError):
    default_message = "Forma de pagamento inválida."


class SizeSelectionRequired(PDVError):
    """Raised when a product with several sizes is added without a chosen size."""

    default_message = "Selecione um tamanho."

    def __init__(self, product_id: str, sizes: list[str]):
        super().__init__()
        self.product_id = product_id
        self.sizes = sizes


class UnknownSizeError(PDVError):
    default_message = "Tamanho inválido para o produto."


class OrderFinalizedError(PDVError):
    default_message = "Pedido finalizado não pode ser alterado."


class InvalidStatusTransition(PDVError):
    def __init__(self, current: str, target: str):
        super().__init__(f"Transição de status inválida: {current} -> {target}.")
        self.current = current
        self.target = target


class CatalogValidationError(PDVError):
    default_message = "Dados do catálogo inválidos."


class CheckoutSaveError(PDVError):
    default_message = "Erro ao finalizar venda."


class CheckoutInProgressError(PDVError):
    default_message = "Venda já está sendo finalizada."
