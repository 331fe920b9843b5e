"""Admin store credit endpoints backing the balance-management grid."""

import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from libs.auth.dependencies import require_admin
from libs.auth.models import AuthUser
from libs.common.currency import credits_to_money
from libs.common.logging import get_logger
from services.store_credit_service.dependencies import (
    get_store_credit_manager,
    get_store_credit_repository,
    get_system_config,
)
from services.store_credit_service.models import DeductFailureKind
from services.store_credit_service.schemas import (
    AdminCustomerListResponse,
    AdminCustomerOption,
    AdminStoreCreditListResponse,
    AdminStoreCreditRow,
    BalanceResponse,
    StoreCreditConfigResponse,
    StoreCreditConfigUpdateRequest,
    StoreCreditHistoryListResponse,
    StoreCreditHistoryResponse,
    StoreCreditMutationRequest,
    StoreCreditMutationResponse,
)
from services.store_credit_service.services.repository import (
    SqlAlchemyStoreCreditRepository,
)
from services.store_credit_service.services.store_credit_manager import (
    CustomerNotFoundError,
    DeductFailure,
    InvalidAmountError,
    StoreCreditManager,
    resolve_value_per_credit,
)
from services.store_credit_service.services.system_config import (
    DEFAULT_VALUE_PER_CREDIT_KEY,
    SystemConfigService,
)

logger = get_logger(__name__)
router = APIRouter(prefix="/api/store-credit", tags=["admin-store-credit"])

ADMIN_DEFAULT_REASON = "Admin update"

_DEDUCT_FAILURE_STATUS = {
    DeductFailureKind.NO_STORE_CREDIT: status.HTTP_404_NOT_FOUND,
    DeductFailureKind.INSUFFICIENT_BALANCE: status.HTTP_400_BAD_REQUEST,
    DeductFailureKind.INVALID_AMOUNT: status.HTTP_400_BAD_REQUEST,
}


async def _mutation_response(
    manager: StoreCreditManager, customer_id: uuid.UUID, history_id: uuid.UUID
) -> StoreCreditMutationResponse:
    balance = await manager.get_credit_balance(customer_id)
    return StoreCreditMutationResponse(
        success=True,
        history_id=history_id,
        balance_credits=balance.balance_credits,
        balance_amount=balance.balance_amount,
        value_per_credit=balance.value_per_credit,
    )


# ---------------------------------------------------------------------------
# Balance mutations
# ---------------------------------------------------------------------------


@router.post("/add", response_model=StoreCreditMutationResponse)
async def add_store_credit(
    body: StoreCreditMutationRequest,
    admin: AuthUser = Depends(require_admin),
    manager: StoreCreditManager = Depends(get_store_credit_manager),
):
    """Credit a money amount to a customer's store credit."""
    try:
        history_id = await manager.add_credit(
            body.customer_id,
            body.amount,
            order_id=body.order_id,
            currency_id=body.currency_id,
            reason=body.reason or ADMIN_DEFAULT_REASON,
        )
    except CustomerNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Customer not found",
        )
    except InvalidAmountError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))

    logger.info(
        "Admin %s added %.2f to customer %s", admin.user_id, body.amount, body.customer_id
    )
    return await _mutation_response(manager, body.customer_id, history_id)


@router.post("/deduct", response_model=StoreCreditMutationResponse)
async def deduct_store_credit(
    body: StoreCreditMutationRequest,
    admin: AuthUser = Depends(require_admin),
    manager: StoreCreditManager = Depends(get_store_credit_manager),
):
    """Deduct a money amount from a customer's store credit."""
    result = await manager.deduct_credit(
        body.customer_id,
        body.amount,
        order_id=body.order_id,
        currency_id=body.currency_id,
        reason=body.reason or ADMIN_DEFAULT_REASON,
    )
    if isinstance(result, DeductFailure):
        raise HTTPException(
            status_code=_DEDUCT_FAILURE_STATUS[result.kind],
            detail=result.message,
        )

    logger.info(
        "Admin %s deducted %.2f from customer %s",
        admin.user_id,
        body.amount,
        body.customer_id,
    )
    return await _mutation_response(manager, body.customer_id, result.history_id)


# ---------------------------------------------------------------------------
# Balances grid
# ---------------------------------------------------------------------------


@router.get("/balances", response_model=AdminStoreCreditListResponse)
async def list_store_credits(
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    _admin: AuthUser = Depends(require_admin),
    repository: SqlAlchemyStoreCreditRepository = Depends(get_store_credit_repository),
    config: SystemConfigService = Depends(get_system_config),
):
    """List all customers holding a balance, with the money equivalent."""
    store_credits, total = await repository.list_store_credits(skip=skip, limit=limit)
    configured_default = await config.get(DEFAULT_VALUE_PER_CREDIT_KEY)

    rows: list[AdminStoreCreditRow] = []
    for store_credit in store_credits:
        value_per_credit = resolve_value_per_credit(
            store_credit.customer, configured_default
        )
        rows.append(
            AdminStoreCreditRow(
                id=store_credit.id,
                customer_id=store_credit.customer_id,
                customer_full_name=store_credit.customer.full_name,
                credits=store_credit.balance,
                balance=credits_to_money(store_credit.balance, value_per_credit),
                value_per_credit=value_per_credit,
                currency_id=store_credit.currency_id,
                updated_at=store_credit.updated_at,
            )
        )

    return AdminStoreCreditListResponse(
        store_credits=rows, total=total, skip=skip, limit=limit
    )


@router.get(
    "/balances/{store_credit_id}/history",
    response_model=StoreCreditHistoryListResponse,
)
async def get_store_credit_history(
    store_credit_id: uuid.UUID,
    _admin: AuthUser = Depends(require_admin),
    repository: SqlAlchemyStoreCreditRepository = Depends(get_store_credit_repository),
):
    """Ledger of one balance row, newest first."""
    if await repository.get_store_credit_by_id(store_credit_id) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Store credit not found",
        )
    entries = await repository.list_history(store_credit_id)
    return StoreCreditHistoryListResponse(
        entries=[StoreCreditHistoryResponse.model_validate(e) for e in entries],
        total=len(entries),
    )


@router.delete("/balances/{store_credit_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_store_credit(
    store_credit_id: uuid.UUID,
    admin: AuthUser = Depends(require_admin),
    repository: SqlAlchemyStoreCreditRepository = Depends(get_store_credit_repository),
):
    """Delete a balance row and its history."""
    if await repository.get_store_credit_by_id(store_credit_id) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Store credit not found",
        )
    await repository.delete_store_credit(store_credit_id)
    await repository.commit()
    logger.info("Admin %s deleted store credit %s", admin.user_id, store_credit_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/customers/{customer_id}/balance", response_model=BalanceResponse)
async def get_customer_balance(
    customer_id: uuid.UUID,
    _admin: AuthUser = Depends(require_admin),
    manager: StoreCreditManager = Depends(get_store_credit_manager),
):
    """Current balance for one customer (zero when none exists)."""
    balance = await manager.get_credit_balance(customer_id)
    return BalanceResponse(
        customer_id=customer_id,
        store_credit_id=await manager.get_store_credit_id(customer_id),
        balance_credits=balance.balance_credits,
        balance_amount=balance.balance_amount,
        currency_id=balance.currency_id,
        value_per_credit=balance.value_per_credit,
    )


@router.get("/customers", response_model=AdminCustomerListResponse)
async def list_customers(
    _admin: AuthUser = Depends(require_admin),
    repository: SqlAlchemyStoreCreditRepository = Depends(get_store_credit_repository),
    config: SystemConfigService = Depends(get_system_config),
):
    """Customers by last name with their effective value per credit."""
    customers = await repository.list_customers()
    configured_default = await config.get(DEFAULT_VALUE_PER_CREDIT_KEY)
    return AdminCustomerListResponse(
        customers=[
            AdminCustomerOption(
                id=customer.id,
                name=customer.full_name,
                value_per_credit=resolve_value_per_credit(customer, configured_default),
            )
            for customer in customers
        ]
    )


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


@router.get("/config", response_model=StoreCreditConfigResponse)
async def get_store_credit_config(
    _admin: AuthUser = Depends(require_admin),
    config: SystemConfigService = Depends(get_system_config),
):
    configured = await config.get(DEFAULT_VALUE_PER_CREDIT_KEY)
    return StoreCreditConfigResponse(
        default_value_per_credit=resolve_value_per_credit(None, configured),
        configured_value=configured,
    )


@router.put("/config", response_model=StoreCreditConfigResponse)
async def update_store_credit_config(
    body: StoreCreditConfigUpdateRequest,
    admin: AuthUser = Depends(require_admin),
    config: SystemConfigService = Depends(get_system_config),
):
    await config.set(DEFAULT_VALUE_PER_CREDIT_KEY, body.default_value_per_credit)
    await config.db.commit()
    logger.info(
        "Admin %s set default value per credit to %s",
        admin.user_id,
        body.default_value_per_credit,
    )
    return StoreCreditConfigResponse(
        default_value_per_credit=body.default_value_per_credit,
        configured_value=body.default_value_per_credit,
    )
