from partsflow.schemas.requirement import (
    BOMRow,
    AvailabilitySnapshot,
    StationUsage,
    RequirementLine,
    ShortageSummary,
    RequirementReport,
)
from partsflow.schemas.production_plan import (
    ProductionPlanCreate,
    ProductionPlanUpdate,
    ProductionPlanResponse,
    ConsumptionLine,
    ProductionStartResponse,
)
from partsflow.schemas.reservation import (
    ReservationRequest,
    ReservationResponse,
    ReservationStatusResponse,
    ReleaseResponse,
    ReservationIntegrityReport,
)
from partsflow.schemas.inventory import (
    StockAdjustmentRequest,
    StockMovementResponse,
    ReceiptReceiveResponse,
)
from partsflow.schemas.shortage_report import (
    ShortageReportLine,
    ShortageReport,
    SupplierShortageGroup,
)
