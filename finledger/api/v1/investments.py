"""/v1/investments - DPS, FDR and loan schemas"""

from typing import Optional, Union

from fastapi import APIRouter, Depends, Query, Response

from finledger.api.dependencies import get_current_user_id, get_investment_service
from finledger.api.v1.schemas import (
    DpsResponse,
    FdrResponse,
    InvestmentCreate,
    InvestmentListResponse,
    InvestmentStatsResponse,
    InvestmentUpdate,
    LoanResponse,
)
from finledger.domain.models import SchemaKind
from finledger.engine.investments import InvestmentService, schema_progress
from finledger.infrastructure.database.repositories import InvestmentSchema

router = APIRouter()

SchemaResponse = Union[DpsResponse, FdrResponse, LoanResponse]

_RESPONSE_MODELS = {
    SchemaKind.DPS: DpsResponse,
    SchemaKind.FDR: FdrResponse,
    SchemaKind.LOAN: LoanResponse,
}


def to_response(kind: SchemaKind, schema: InvestmentSchema) -> SchemaResponse:
    response = _RESPONSE_MODELS[kind].model_validate(schema)
    if kind != SchemaKind.FDR:
        response = response.model_copy(update={"progress_percentage": schema_progress(kind, schema)})
    return response


@router.get("/investments/stats", response_model=InvestmentStatsResponse)
def investment_stats(
    user_id: int = Depends(get_current_user_id),
    service: InvestmentService = Depends(get_investment_service),
):
    return InvestmentStatsResponse(**service.stats(user_id))


@router.get("/investments", response_model=InvestmentListResponse)
def list_investments(
    type: Optional[SchemaKind] = Query(None),
    user_id: int = Depends(get_current_user_id),
    service: InvestmentService = Depends(get_investment_service),
):
    by_kind = service.list(user_id, type)
    return InvestmentListResponse(
        **{kind.value: [to_response(kind, s) for s in schemas] for kind, schemas in by_kind.items()}
    )


@router.post("/investments", response_model=SchemaResponse, status_code=201)
def create_investment(
    request_body: InvestmentCreate,
    user_id: int = Depends(get_current_user_id),
    service: InvestmentService = Depends(get_investment_service),
):
    """
    Open a DPS, FDR or loan. Maturity date/amount (DPS, FDR) and end date,
    total payable and outstanding balance (loan) are derived here, once.
    """
    fields = request_body.model_dump(exclude={"type"})
    schema = service.create(user_id, request_body.type, **fields)
    return to_response(request_body.type, schema)


@router.get("/investments/{kind}/{schema_id}", response_model=SchemaResponse)
def get_investment(
    kind: SchemaKind,
    schema_id: int,
    user_id: int = Depends(get_current_user_id),
    service: InvestmentService = Depends(get_investment_service),
):
    return to_response(kind, service.get(user_id, kind, schema_id))


@router.patch("/investments/{kind}/{schema_id}", response_model=SchemaResponse)
def update_investment(
    kind: SchemaKind,
    schema_id: int,
    request_body: InvestmentUpdate,
    user_id: int = Depends(get_current_user_id),
    service: InvestmentService = Depends(get_investment_service),
):
    schema = service.update(user_id, kind, schema_id, **request_body.model_dump(exclude_unset=True))
    return to_response(kind, schema)


@router.delete("/investments/{kind}/{schema_id}", status_code=204)
def delete_investment(
    kind: SchemaKind,
    schema_id: int,
    user_id: int = Depends(get_current_user_id),
    service: InvestmentService = Depends(get_investment_service),
):
    service.delete(user_id, kind, schema_id)
    return Response(status_code=204)
