# neuro_core/recommendations.py
from __future__ import annotations
from typing import Dict, List

RECOMMENDATIONS: Dict[str, Dict[str, List[str]]] = {
    "cognitive": {
        "low": [
            "Continue regular monitoring with monthly assessments",
            "Maintain a healthy lifestyle with regular exercise",
            "Practice brain-training exercises and mental stimulation",
            "Consider annual comprehensive cognitive evaluations",
        ],
        "moderate": [
            "Increase physical activity and brain training exercises",
            "Maintain a balanced diet rich in omega-3 fatty acids",
            "Consider discussing results with your healthcare provider",
            "Schedule follow-up assessments in 3-6 months",
        ],
        "high": [
            "Schedule an appointment with your healthcare provider",
            "Consider comprehensive neurological evaluation",
            "Bring these results to your medical consultation",
            "Implement lifestyle modifications as recommended by your doctor",
        ],
    },
    "motor": {
        "low": [
            "Continue regular physical activity",
            "Maintain fine motor skill exercises",
            "Monitor for any changes in coordination",
            "Consider regular movement assessments",
        ],
        "moderate": [
            "Increase physical therapy and coordination exercises",
            "Consider occupational therapy evaluation",
            "Practice fine motor skill activities daily",
            "Discuss results with your healthcare provider",
        ],
        "high": [
            "Seek immediate evaluation by a neurologist",
            "Consider comprehensive movement disorder assessment",
            "Implement safety measures for daily activities",
            "Follow up with healthcare provider promptly",
        ],
    },
    "speech": {
        "low": [
            "Continue regular speech practice",
            "Maintain vocal exercises and breathing techniques",
            "Monitor for any changes in speech clarity",
            "Consider annual speech evaluations",
        ],
        "moderate": [
            "Practice speech exercises daily",
            "Consider speech therapy evaluation",
            "Focus on articulation and breathing exercises",
            "Discuss results with your healthcare provider",
        ],
        "high": [
            "Seek immediate speech therapy evaluation",
            "Consider comprehensive communication assessment",
            "Implement communication aids if needed",
            "Follow up with healthcare provider promptly",
        ],
    },
    "behavioral": {
        "low": [
            "Continue current lifestyle and stress management",
            "Maintain regular social connections",
            "Practice mindfulness and relaxation techniques",
            "Monitor mood and behavior patterns",
        ],
        "moderate": [
            "Increase social activities and mental stimulation",
            "Consider counseling or therapy services",
            "Implement stress reduction techniques",
            "Discuss results with your healthcare provider",
        ],
        "high": [
            "Seek immediate mental health evaluation",
            "Consider comprehensive psychological assessment",
            "Implement crisis intervention if needed",
            "Follow up with healthcare provider promptly",
        ],
    },
}

# generic per-domain advice used when the narrative service is unavailable
FALLBACK_ADVICE: Dict[str, List[str]] = {
    "cognitive": [
        "Practice memory exercises daily",
        "Engage in puzzles and brain games",
        "Maintain a regular sleep schedule",
        "Stay mentally active with reading",
        "Consider cognitive training programs",
    ],
    "motor": [
        "Practice fine motor skills exercises",
        "Engage in regular physical activity",
        "Try coordination-based activities",
        "Maintain good posture",
        "Consider occupational therapy if needed",
    ],
    "speech": [
        "Practice reading aloud daily",
        "Engage in conversations regularly",
        "Try tongue twisters and pronunciation exercises",
        "Consider speech therapy if needed",
        "Maintain vocal health",
    ],
    "behavioral": [
        "Practice stress management techniques",
        "Maintain regular social connections",
        "Engage in enjoyable activities",
        "Consider counseling or therapy",
        "Maintain a healthy lifestyle",
    ],
}


def for_risk(domain: str, risk_level: str) -> List[str]:
    table = RECOMMENDATIONS.get(domain)
    if table is None:
        return ["Continue regular monitoring"]
    return list(table.get(risk_level, table["high"]))


def fallback_advice(domain: str) -> List[str]:
    return list(FALLBACK_ADVICE.get(domain, FALLBACK_ADVICE["cognitive"]))
