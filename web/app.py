"""
FastAPI application for the AVM engine.

Exposes each core operation as a JSON endpoint plus a full valuation
endpoint. Production deployment configuration via environment variables.
"""

import logging
import os
from datetime import date
from typing import Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from core.avm import (
    AVMValuationEngine,
    Comparable,
    ComparableFilters,
    Coordinates,
    Subject,
    ValuationError,
    adjust,
    combine,
    confidence,
    distance_meters,
    similarity,
    stats,
)
from utils.config import Config


logger = logging.getLogger(__name__)

# =============================================================================
# Environment Configuration
# =============================================================================

IS_PRODUCTION = os.getenv("PRODUCTION", "").lower() == "true"

ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "").split(",") if os.getenv("ALLOWED_ORIGINS") else []
if not ALLOWED_ORIGINS and not IS_PRODUCTION:
    # Development fallback only
    ALLOWED_ORIGINS = ["http://localhost:8000", "http://127.0.0.1:8000"]

APP_VERSION = "1.0.0"


# =============================================================================
# Request Models
# =============================================================================

class CoordinatesIn(BaseModel):
    lat: float
    lng: float

    def to_domain(self) -> Coordinates:
        return Coordinates(lat=self.lat, lng=self.lng)


class SubjectIn(BaseModel):
    """Subject property as submitted by a client."""
    id: str
    coordinates: CoordinatesIn
    area: float
    building_year: int
    rooms: int
    bathrooms: int
    condition: str
    property_type: str
    floor: Optional[int] = None
    features: List[str] = []
    address: str = ""

    def to_domain(self) -> Subject:
        return Subject(
            id=self.id,
            coordinates=self.coordinates.to_domain(),
            area=self.area,
            building_year=self.building_year,
            rooms=self.rooms,
            bathrooms=self.bathrooms,
            condition=self.condition,
            property_type=self.property_type,
            floor=self.floor,
            features=tuple(self.features),
            address=self.address,
        )


class ComparableIn(BaseModel):
    """Comparable sale as submitted by a client."""
    id: str
    coordinates: CoordinatesIn
    area: float
    building_year: int
    rooms: int
    bathrooms: int
    sale_price: int
    sale_date: date
    days_on_market: int = 0
    condition: str
    property_type: str
    floor: Optional[int] = None
    address: str = ""
    source: str = "manual"
    verified: bool = False
    reliability: float = 1.0

    def to_domain(self) -> Comparable:
        return Comparable(
            id=self.id,
            coordinates=self.coordinates.to_domain(),
            area=self.area,
            building_year=self.building_year,
            rooms=self.rooms,
            bathrooms=self.bathrooms,
            sale_price=self.sale_price,
            sale_date=self.sale_date,
            days_on_market=self.days_on_market,
            condition=self.condition,
            property_type=self.property_type,
            floor=self.floor,
            address=self.address,
            source=self.source,
            verified=self.verified,
            reliability=self.reliability,
        )


class FiltersIn(BaseModel):
    min_price: Optional[int] = None
    max_price: Optional[int] = None
    min_area: Optional[float] = None
    max_area: Optional[float] = None
    min_rooms: Optional[int] = None
    max_rooms: Optional[int] = None
    min_year: Optional[int] = None
    max_year: Optional[int] = None
    condition: Optional[str] = None
    property_type: Optional[str] = None
    max_distance_km: Optional[float] = None
    max_age_months: Optional[float] = None
    verified_only: bool = False
    sources: Optional[List[str]] = None

    def to_domain(self) -> ComparableFilters:
        return ComparableFilters(**self.model_dump())


class PairRequest(BaseModel):
    subject: SubjectIn
    comparable: ComparableIn


class StatisticsRequest(BaseModel):
    comparables: List[ComparableIn]


class ConfidenceRequest(BaseModel):
    subject: SubjectIn
    comparables: List[ComparableIn]
    reference_date: Optional[date] = None


class ModelEstimateIn(BaseModel):
    """The parts of a model result the ensemble reads."""
    model_config = ConfigDict(protected_namespaces=())

    model_id: str
    estimated_value: float
    confidence: float = Field(ge=0, le=1)


class EnsembleRequest(BaseModel):
    results: List[ModelEstimateIn]
    weights: Dict[str, float] = {}


class ValuationRequestIn(BaseModel):
    model_config = ConfigDict(protected_namespaces=())

    subject: SubjectIn
    comparables: List[ComparableIn]
    model_ids: Optional[List[str]] = None
    filters: Optional[FiltersIn] = None
    reference_date: Optional[date] = None


# =============================================================================
# Application
# =============================================================================

def create_app(config: Config = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    config = config or Config.load()

    app = FastAPI(
        title="AVM Engine",
        description="Comparable-based automated valuation",
        version=APP_VERSION,
        docs_url=None if IS_PRODUCTION else "/docs",
        redoc_url=None if IS_PRODUCTION else "/redoc",
        openapi_url=None if IS_PRODUCTION else "/openapi.json",
        debug=config.debug and not IS_PRODUCTION,
    )

    @app.get("/health", include_in_schema=False)
    def health():
        """Health endpoint. No dependencies, no IO."""
        return {"status": "healthy", "version": APP_VERSION}

    if ALLOWED_ORIGINS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=ALLOWED_ORIGINS,
            allow_credentials=True,
            allow_methods=["GET", "POST"],
            allow_headers=["*"],
        )

    @app.exception_handler(ValuationError)
    async def valuation_error_handler(request: Request, exc: ValuationError):
        logger.info("Rejected %s: %s", request.url.path, exc)
        return JSONResponse(
            status_code=422,
            content={"error": type(exc).__name__, "detail": str(exc)},
        )

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError):
        logger.info("Rejected %s: %s", request.url.path, exc)
        return JSONResponse(
            status_code=422,
            content={"error": "ValueError", "detail": str(exc)},
        )

    @app.post("/api/similarity")
    def similarity_endpoint(body: PairRequest):
        """Similarity score and distance between a subject and one comparable."""
        subject = body.subject.to_domain()
        comp = body.comparable.to_domain()
        return {
            "similarity": similarity(subject, comp),
            "distance_m": round(distance_meters(subject.coordinates, comp.coordinates), 1),
        }

    @app.post("/api/adjustments")
    def adjustments_endpoint(body: PairRequest):
        """Adjusted price and percentage breakdown for one comparable."""
        adjusted_price, breakdown = adjust(body.comparable.to_domain(), body.subject.to_domain())
        return {"adjusted_price": adjusted_price, "breakdown": breakdown.to_dict()}

    @app.post("/api/statistics")
    def statistics_endpoint(body: StatisticsRequest):
        return stats([c.to_domain() for c in body.comparables]).to_dict()

    @app.post("/api/confidence")
    def confidence_endpoint(body: ConfidenceRequest):
        value = confidence(
            [c.to_domain() for c in body.comparables],
            body.subject.to_domain(),
            body.reference_date,
        )
        return {"confidence": value}

    @app.post("/api/ensemble")
    def ensemble_endpoint(body: EnsembleRequest):
        return combine(body.results, body.weights).to_dict()

    @app.post("/api/valuation")
    def valuation_endpoint(body: ValuationRequestIn):
        """
        Full valuation: select comparables, run models, combine.

        Returns the report with per-model results and the weighted value.
        """
        engine = AVMValuationEngine(settings=config.avm, reference_date=body.reference_date)
        report = engine.valuate(
            body.subject.to_domain(),
            [c.to_domain() for c in body.comparables],
            model_ids=body.model_ids,
            filters=body.filters.to_domain() if body.filters else None,
        )
        return report.to_dict()

    return app


# Create app instance for uvicorn
app = create_app()
