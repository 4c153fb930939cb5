"""
BTSim Detection Recommendations

Maps a RiskAssessment to user-facing guidance. Deterministic for a given
assessment.
"""

from typing import Dict, List

from btsim.models.detection import RiskAssessment


STRONG_WARNING_CONFIDENCE = 0.8
CAUTION_CONFIDENCE = 0.5

FACTOR_GUIDANCE: Dict[str, str] = {
    'insecure_protocol': "Never enter passwords on non-encrypted (non-HTTPS) pages.",
    'unknown_domain': "Double-check you are on the legitimate website.",
    'urgency_language': "Be suspicious of urgent requests.",
    'ip_address': "Legitimate sign-in pages use a domain name, not a raw network address.",
    'url_shortener': "Expand shortened links before trusting where they lead.",
    'invalid_url': "The page address looks malformed; navigate to the site directly instead.",
    'suspicious_url_pattern': "Addresses asking you to 'verify' or 'confirm' your account are a common lure.",
    'suspicious_spelling': "Spelling mistakes in security notices are a warning sign.",
    'hidden_fields': "This form collects hidden data; avoid submitting it.",
    'rushed_behavior': "Slow down and review the page before submitting credentials.",
}


def get_recommendations(assessment: RiskAssessment) -> List[str]:
    """
    Build guidance strings for an assessment.

    Args:
        assessment: Detection result

    Returns:
        Ordered, de-duplicated list of recommendations
    """
    recommendations: List[str] = []

    if assessment.confidence > STRONG_WARNING_CONFIDENCE:
        recommendations.append("This page shows strong signs of a phishing attempt.")
        recommendations.append("Do not enter any credentials.")
    elif assessment.confidence > CAUTION_CONFIDENCE:
        recommendations.append("Exercise caution on this page.")
        recommendations.append("Verify the URL is correct before entering credentials.")

    for factor in assessment.risk_factors:
        guidance = FACTOR_GUIDANCE.get(factor.type)
        if guidance and guidance not in recommendations:
            recommendations.append(guidance)

    return recommendations
