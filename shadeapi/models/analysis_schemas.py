from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional

ZONES = ("Cervical Third", "Middle Third", "Incisal Third")
ZONAL_FIELDS = ("zone", "vita_classical", "vita_3d_master", "notes")
LAYER_FIELDS = ("dentin_layer", "enamel_layer", "cervical_tint")
RECOMMENDATION_KEY = "final_recommendation"

class AnalysisRequest(BaseModel):
    # Built only after validate_analysis_request has accepted the raw body
    dentistName: str
    dentistMobileNumber: str
    patientName: Optional[str] = None
    toothImage1: str
    toothImage2: str

class ValidationResult(BaseModel):
    is_valid: bool
    errors: List[str] = Field(default_factory=list)

# Model output. Extra keys returned by the model are kept as-is.
class ZonalAnalysis(BaseModel):
    model_config = ConfigDict(extra="allow", frozen=True)

    zone: str
    vita_classical: str
    vita_3d_master: str
    notes: str

class LayeredRecommendation(BaseModel):
    model_config = ConfigDict(extra="allow", frozen=True)

    dentin_layer: str
    enamel_layer: str
    cervical_tint: str

class FinalRecommendation(BaseModel):
    model_config = ConfigDict(extra="allow", frozen=True)

    estimated_tooth_type: str
    zonal_analysis: List[ZonalAnalysis] = Field(..., min_length=1)
    general_suggestion: str
    layered_recommendation: LayeredRecommendation

class AnalysisResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    final_recommendation: FinalRecommendation

class AnalysisRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    dentistName: str
    dentistMobileNumber: str
    patientName: Optional[str] = None
    toothImage1: str
    toothImage2: str
    date: str
    analysis: AnalysisResult

    def to_response(self) -> dict:
        """Serialize for the client, leaving patientName out when it was never given."""
        return self.model_dump(exclude_unset=True)

class AnalysisResponse(BaseModel):
    record: AnalysisRecord
