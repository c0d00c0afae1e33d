import json

from shadeapi.models.analysis_schemas import AnalysisRequest, RECOMMENDATION_KEY, ZONES

def _zone_entry(zone: str, with_examples: bool) -> dict:
    if with_examples:
        return {
            "zone": zone,
            "vita_classical": "string (e.g., 'A3', 'B2', etc.)",
            "vita_3d_master": "string (e.g., '2M2', '3L1.5', etc.)",
            "notes": "string (detailed observations for this zone)",
        }
    return {"zone": zone, "vita_classical": "string", "vita_3d_master": "string", "notes": "string"}

# The contract the response parser enforces. Keep both in step.
OUTPUT_SCHEMA = json.dumps(
    {
        RECOMMENDATION_KEY: {
            "estimated_tooth_type": "string (e.g., 'Central Incisor', 'Canine', etc.)",
            "zonal_analysis": [_zone_entry(zone, i == 0) for i, zone in enumerate(ZONES)],
            "general_suggestion": "string (overall recommendations and observations)",
            "layered_recommendation": {
                "dentin_layer": "string (recommended dentin shade)",
                "enamel_layer": "string (recommended enamel shade)",
                "cervical_tint": "string (recommended cervical tint)",
            },
        }
    },
    indent=2,
)

INSTRUCTIONS = """Important:
1. Analyze both images carefully for color, translucency, and surface characteristics
2. Provide accurate VITA Classical and VITA 3D-Master shade recommendations
3. Consider lighting conditions and image quality in your analysis
4. Provide practical layering recommendations for composite restorations
5. Return ONLY valid JSON in the exact format specified above"""


def build_analysis_prompt(request: AnalysisRequest) -> str:
    """Render the instruction sent alongside the two tooth images."""
    lines = [
        "You are a dental shade analysis expert. Analyze the provided tooth images "
        "and provide detailed shade recommendations.",
        "",
        "Dentist Information:",
        f"- Name: {request.dentistName}",
        f"- Mobile: {request.dentistMobileNumber}",
    ]
    if request.patientName and request.patientName.strip():
        lines.append(f"- Patient: {request.patientName}")

    lines += [
        "",
        "Please analyze both tooth images and provide a comprehensive shade analysis "
        "in the following JSON format:",
        "",
        OUTPUT_SCHEMA,
        "",
        INSTRUCTIONS,
    ]
    return "\n".join(lines)
