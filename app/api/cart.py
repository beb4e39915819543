"""Shopping cart API routes."""

from fastapi import APIRouter, Depends, status

from app.api.auth import require_token
from app.api.schemas import (
    CartAddRequest,
    CartAddResponse,
    CartClearedResponse,
    CartItemResponse,
    MessageResponse,
)
from app.services.cart import CartRepository, get_cart_repository

router = APIRouter(
    prefix="/cart",
    tags=["cart"],
    dependencies=[Depends(require_token)],
)


@router.get("", response_model=list[CartItemResponse])
async def list_cart(
    cart: CartRepository = Depends(get_cart_repository),
) -> list[CartItemResponse]:
    """List every cart item."""
    return [CartItemResponse.model_validate(item) for item in await cart.list_cart()]


@router.post("", response_model=CartAddResponse, status_code=status.HTTP_201_CREATED)
async def add_to_cart(
    request: CartAddRequest,
    cart: CartRepository = Depends(get_cart_repository),
) -> CartAddResponse:
    """Add a book to the cart."""
    item = await cart.add_to_cart(request.book_id, request.quantity)
    return CartAddResponse(message="Added to cart", item=CartItemResponse.model_validate(item))


@router.delete("", response_model=CartClearedResponse)
async def clear_cart(
    cart: CartRepository = Depends(get_cart_repository),
) -> CartClearedResponse:
    """Remove every item from the cart."""
    deleted = await cart.clear_cart()
    return CartClearedResponse(message="Cart cleared", deleted_count=deleted)


@router.delete("/{item_id}", response_model=MessageResponse)
async def remove_cart_item(
    item_id: str,
    cart: CartRepository = Depends(get_cart_repository),
) -> MessageResponse:
    """Remove one item from the cart."""
    await cart.remove_cart_item(item_id)
    return MessageResponse(message="Cart item removed")
