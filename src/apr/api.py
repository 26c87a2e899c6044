"""FastAPI application exposing the yyJOE APR calculation."""

import logging
from typing import List, Optional

from fastapi import FastAPI, HTTPException, Query, Request, Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, generate_latest
from pydantic import BaseModel, Field

from .config import settings
from .errors import AprComputationError, AprError, GraphQueryError
from .service import calculate_apr_async


app = FastAPI(title=settings.api_title)

logger = logging.getLogger(__name__)

# Prometheus counter to track API requests by method, endpoint and status code
REQUEST_COUNTER = Counter(
    "api_requests_total",
    "Total API requests",
    ["method", "endpoint", "status"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log incoming requests and their outcomes while updating metrics."""
    logger.info("request %s %s", request.method, request.url.path)
    try:
        response = await call_next(request)
        REQUEST_COUNTER.labels(
            method=request.method,
            endpoint=request.url.path,
            status=str(response.status_code),
        ).inc()
        logger.info(
            "response %s %s status %s",
            request.method,
            request.url.path,
            response.status_code,
        )
        return response
    except Exception:
        REQUEST_COUNTER.labels(
            method=request.method,
            endpoint=request.url.path,
            status="500",
        ).inc()
        logger.exception(
            "error handling %s %s", request.method, request.url.path
        )
        raise


class PoolRewardResponse(BaseModel):
    """Yearly JOE earned by yyJOE in one pool."""

    pool_id: str
    name: Optional[str] = None
    regular_per_year: float = Field(0.0, description="JOE from the regular share")
    boosted_per_year: float = Field(0.0, description="JOE from the veJOE boosted share")


class AprResponse(BaseModel):
    """Response schema for an APR calculation."""

    source: str
    block_number: int
    apr_at_par: float = Field(..., description="APR assuming 1 yyJOE = 1 JOE")
    apr_market_adjusted: float = Field(..., description="APR using the pair's JOE:yyJOE ratio")
    total_reward_per_year: float
    reward_to_holders_per_year: float
    staked: float
    exchange_ratio: float
    pools: List[PoolRewardResponse]


@app.get("/apr", response_model=AprResponse)
async def get_apr(source: str = Query("chain", pattern="^(chain|graph)$")):
    """Compute the current yyJOE APR from the requested data source."""

    try:
        result = await calculate_apr_async(source)
    except GraphQueryError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    except AprComputationError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except AprError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    return AprResponse(**result.to_dict())


@app.get("/metrics")
def metrics() -> Response:
    """Expose Prometheus metrics."""

    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
