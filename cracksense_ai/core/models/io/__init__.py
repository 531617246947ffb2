"""
I/O models for API requests and responses.

This package contains Pydantic-based I/O schemas that define the contract
between API endpoints and the web client. Request and envelope schemas use
camelCase keys; the ``*Read`` schemas mirror database entities.

Modules:
- analyses: Homeowner analysis, history and PDF export models
- credits: Credit balance, history and purchase models
- conversations: Conversation, message and chat models
- cracks: Crack record models
- recommendations: Product recommendation models
- professionals: Professional finder models
- health: Service status models
"""

from .analyses import (
    AnalysisListResponse,
    AnalyzeHomeownerRequest,
    AnalyzeHomeownerResponse,
    CrackAnalysisDetail,
    CrackAnalysisRead,
    ExportPdfRequest,
    ExportPdfResponse,
    PdfExportRead,
)
from .base import ApiSchema
from .conversations import (
    CHAT_MODELS,
    DEFAULT_CHAT_MODEL,
    AgentResultEvent,
    ChatChunkEvent,
    ChatDoneEvent,
    ChatErrorEvent,
    ChatRequest,
    ChatStartEvent,
    ConversationCreate,
    ConversationListResponse,
    ConversationMessageRead,
    ConversationMessagesResponse,
    ConversationRead,
    ConversationResponse,
)
from .cracks import (
    CrackListResponse,
    CrackRecordCreate,
    CrackRecordRead,
    CrackRecordUpdate,
    CrackResponse,
)
from .credits import (
    CreditBalanceResponse,
    CreditHistoryResponse,
    CreditTransactionRead,
    PurchaseCreditsRequest,
    PurchaseCreditsResponse,
)
from .health import HealthResponse, VersionResponse
from .professionals import (
    ProfessionalDetailResponse,
    ProfessionalDisplay,
    ProfessionalFinderRequest,
    ProfessionalFinderResponse,
    ProfessionalSearchData,
    SearchMetadata,
)
from .recommendations import (
    ProductRecommendationRead,
    RecommendationRequest,
    RecommendationResponse,
    RepairProductRead,
    StoredRecommendationRead,
    StoredRecommendationsResponse,
    TrackInteractionRequest,
)

__all__ = [
    "AnalysisListResponse",
    "AnalyzeHomeownerRequest",
    "AnalyzeHomeownerResponse",
    "AgentResultEvent",
    "ApiSchema",
    "CHAT_MODELS",
    "ChatChunkEvent",
    "ChatDoneEvent",
    "ChatErrorEvent",
    "ChatRequest",
    "ChatStartEvent",
    "ConversationCreate",
    "ConversationListResponse",
    "ConversationMessageRead",
    "ConversationMessagesResponse",
    "ConversationRead",
    "ConversationResponse",
    "CrackAnalysisDetail",
    "CrackAnalysisRead",
    "CrackListResponse",
    "CrackRecordCreate",
    "CrackRecordRead",
    "CrackRecordUpdate",
    "CrackResponse",
    "CreditBalanceResponse",
    "CreditHistoryResponse",
    "CreditTransactionRead",
    "DEFAULT_CHAT_MODEL",
    "ExportPdfRequest",
    "ExportPdfResponse",
    "HealthResponse",
    "PdfExportRead",
    "ProductRecommendationRead",
    "ProfessionalDetailResponse",
    "ProfessionalDisplay",
    "ProfessionalFinderRequest",
    "ProfessionalFinderResponse",
    "ProfessionalSearchData",
    "PurchaseCreditsRequest",
    "PurchaseCreditsResponse",
    "RecommendationRequest",
    "RecommendationResponse",
    "RepairProductRead",
    "SearchMetadata",
    "StoredRecommendationRead",
    "StoredRecommendationsResponse",
    "TrackInteractionRequest",
    "VersionResponse",
]
