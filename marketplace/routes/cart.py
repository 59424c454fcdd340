from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session
from marketplace.database import get_session
from marketplace.exceptions import BookNotAvailable, CartLineNotFound
from marketplace.models.user import User
from marketplace.schemas.cart_schemas import CartAddRequest, CartOut, CartUpdateRequest
from marketplace.services import cart_service
from marketplace.utils.token import require_buyer


router = APIRouter()

# View Cart

@router.get("", response_model=CartOut)
def get_cart(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_buyer)
):
    return cart_service.get_cart(session, current_user.id)

# Add to Cart

@router.post("", status_code=201)
def add_to_cart(
    data: CartAddRequest,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_buyer)
):
    try:
        item = cart_service.add_to_cart(session, current_user.id, data.book_id, data.quantity)
    except BookNotAvailable as e:
        raise HTTPException(400, str(e))

    session.commit()
    session.refresh(item)

    return {"message": "Added to cart", "item": item}

# Update Cart

@router.put("/{item_id}")
def update_cart_item(
    item_id: str,
    data: CartUpdateRequest,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_buyer)
):
    try:
        item = cart_service.update_quantity(session, current_user.id, item_id, data.quantity)
    except CartLineNotFound as e:
        raise HTTPException(404, str(e))
    except BookNotAvailable as e:
        raise HTTPException(400, str(e))

    session.commit()
    session.refresh(item)

    return {"message": "Quantity updated", "item": item}

# Remove Cart

@router.delete("/{item_id}")
def remove_item(
    item_id: str,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_buyer)
):
    try:
        cart_service.remove_line(session, current_user.id, item_id)
    except CartLineNotFound as e:
        raise HTTPException(404, str(e))

    session.commit()

    return {"message": "Item removed from cart"}

# Clear Cart

@router.delete("")
def clear_cart_endpoint(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_buyer)
):
    cart_service.clear_cart(session, current_user.id)
    session.commit()
    return {"message": "Cart cleared"}
