"""Management API routes for accounts and their labels."""

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlmodel import Session

from identity.core.config import get_settings
from identity.core.database import get_session
from identity.engine.recompute import LabelRecomputer
from identity.events.publisher import get_publisher
from identity.policy.source import FilePolicySource, PolicyError
from .models import Account, Label
from .schemas import (
    AccountCreate,
    AccountRead,
    AccountWithLabels,
    LabelCreate,
    LabelRead,
    LabelUpdate,
)
from .service import AccountError, AccountService, LabelService
from .validation import LabelScope, LabelValidationError

router = APIRouter(prefix="/management/accounts", tags=["accounts"])


def get_recomputer() -> LabelRecomputer:
    return LabelRecomputer(FilePolicySource(get_settings().policy_path), get_publisher())


def get_account_service(session: Session = Depends(get_session)) -> AccountService:
    return AccountService(session)


def get_label_service(
    session: Session = Depends(get_session),
    recomputer: LabelRecomputer = Depends(get_recomputer),
) -> LabelService:
    return LabelService(session, recomputer)


def _get_account_or_404(uid: str, service: AccountService) -> Account:
    account = service.get_account(uid)
    if not account:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Account '{uid}' not found")
    return account


def _get_label_or_404(account: Account, key: str, scope: LabelScope, service: LabelService) -> Label:
    label = service.get_label(account, key, scope.value)
    if not label:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Label '{key}' ({scope.value}) not found for account '{account.uid}'",
        )
    return label


def _invalid(e: LabelValidationError) -> HTTPException:
    return HTTPException(status_code=422, detail={"errors": e.errors})


def _policy_unavailable(e: PolicyError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail=f"Label saved, account not recomputed: {e}",
    )


@router.post("", response_model=AccountRead, status_code=status.HTTP_201_CREATED)
def create_account(data: AccountCreate, service: AccountService = Depends(get_account_service)) -> AccountRead:
    try:
        account = service.create_account(data.email, role=data.role)
    except AccountError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return AccountRead.model_validate(account)


@router.get("", response_model=list[AccountRead])
def list_accounts(
    skip: int = 0,
    limit: int = Query(100, ge=1, le=1000),
    service: AccountService = Depends(get_account_service),
) -> list[AccountRead]:
    return [AccountRead.model_validate(a) for a in service.list_accounts(skip=skip, limit=limit)]


@router.get("/{uid}", response_model=AccountWithLabels)
def get_account(uid: str, service: AccountService = Depends(get_account_service)) -> AccountWithLabels:
    return AccountWithLabels.model_validate(_get_account_or_404(uid, service))


@router.get("/{uid}/labels", response_model=list[LabelRead])
def list_labels(
    uid: str,
    scope: LabelScope | None = None,
    accounts: AccountService = Depends(get_account_service),
    labels: LabelService = Depends(get_label_service),
) -> list[LabelRead]:
    account = _get_account_or_404(uid, accounts)
    return [LabelRead.model_validate(l) for l in labels.list_labels(account, scope.value if scope else None)]


@router.post("/{uid}/labels", response_model=LabelRead, status_code=status.HTTP_201_CREATED)
def create_label(
    uid: str,
    data: LabelCreate,
    accounts: AccountService = Depends(get_account_service),
    labels: LabelService = Depends(get_label_service),
) -> LabelRead:
    account = _get_account_or_404(uid, accounts)
    try:
        label = labels.create_label(account, data.key, data.value, data.scope.value)
    except LabelValidationError as e:
        raise _invalid(e)
    except PolicyError as e:
        raise _policy_unavailable(e)
    return LabelRead.model_validate(label)


@router.put("/{uid}/labels/{key}", response_model=LabelRead)
def update_label(
    uid: str,
    key: str,
    data: LabelUpdate,
    scope: LabelScope = LabelScope.PUBLIC,
    accounts: AccountService = Depends(get_account_service),
    labels: LabelService = Depends(get_label_service),
) -> LabelRead:
    account = _get_account_or_404(uid, accounts)
    label = _get_label_or_404(account, key, scope, labels)
    try:
        label = labels.update_label(
            label, value=data.value, scope=data.scope.value if data.scope else None
        )
    except LabelValidationError as e:
        raise _invalid(e)
    except PolicyError as e:
        raise _policy_unavailable(e)
    return LabelRead.model_validate(label)


@router.delete("/{uid}/labels/{key}", status_code=status.HTTP_204_NO_CONTENT)
def delete_label(
    uid: str,
    key: str,
    scope: LabelScope = LabelScope.PUBLIC,
    accounts: AccountService = Depends(get_account_service),
    labels: LabelService = Depends(get_label_service),
) -> Response:
    account = _get_account_or_404(uid, accounts)
    label = _get_label_or_404(account, key, scope, labels)
    try:
        labels.delete_label(label)
    except PolicyError as e:
        raise _policy_unavailable(e)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
