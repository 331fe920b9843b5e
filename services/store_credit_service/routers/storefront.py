"""Customer-facing store credit page."""

from typing import Optional

from fastapi import APIRouter, Depends, status
from fastapi.responses import HTMLResponse, RedirectResponse
from libs.auth.dependencies import get_optional_user
from libs.auth.models import AuthUser
from libs.common.config import get_settings
from libs.common.logging import get_logger
from services.store_credit_service.dependencies import (
    get_store_credit_manager,
    get_store_credit_repository,
)
from services.store_credit_service.services.repository import (
    SqlAlchemyStoreCreditRepository,
)
from services.store_credit_service.services.store_credit_manager import (
    StoreCreditManager,
)
from services.store_credit_service.templates.account import render_store_credit_page

logger = get_logger(__name__)
router = APIRouter(prefix="/account", tags=["storefront"])


def _login_redirect() -> RedirectResponse:
    return RedirectResponse(
        url=get_settings().STORE_CREDIT_LOGIN_PATH,
        status_code=status.HTTP_303_SEE_OTHER,
    )


@router.get("/store-credit", response_class=HTMLResponse)
async def store_credit_page(
    current_user: Optional[AuthUser] = Depends(get_optional_user),
    repository: SqlAlchemyStoreCreditRepository = Depends(get_store_credit_repository),
    manager: StoreCreditManager = Depends(get_store_credit_manager),
):
    """Balance and transaction history of the signed-in customer."""
    if current_user is None:
        return _login_redirect()

    customer = await repository.get_customer_by_auth_id(current_user.user_id)
    if customer is None:
        logger.info("No customer for auth id %s, redirecting", current_user.user_id)
        return _login_redirect()

    store_credit = await repository.get_store_credit(customer.id)
    balance = await manager.get_credit_balance(customer.id)
    history = await repository.list_history(store_credit.id) if store_credit else []

    return HTMLResponse(
        render_store_credit_page(
            customer_name=customer.full_name,
            balance_credits=balance.balance_credits,
            balance_amount=balance.balance_amount,
            history=history,
            currency_id=balance.currency_id,
        )
    )
