"""
AI analysis payloads.

Parses the text returned by the analysis service into the structured
assessment stored on an idea, and defines the deterministic fallback used
whenever the service cannot produce one. Nothing here talks to the network.
"""

import copy
import json
import re
from typing import Any, Dict, List

from ideaengine.errors import ExternalServiceFailure

MAX_SIMILAR_SOLUTIONS = 5
MAX_RECOMMENDATIONS = 3
MAX_RISKS = 3
SCORE_MIN = 1
SCORE_MAX = 10

FALLBACK_ANALYSIS = {
    'similarSolutions': ['Market research needed'],
    'marketOpportunity': {'score': 5, 'explanation': 'Analysis pending'},
    'recommendations': ['Conduct user research', 'Validate assumptions', 'Build MVP'],
    'risks': ['Market competition', 'Technical feasibility', 'User adoption'],
}

ASSISTANT_FALLBACK = "I'm having trouble processing your question right now. Please try again later."

_FENCE_RE = re.compile(r'```(?:json)?[ \t]*\n?', re.IGNORECASE)


def fallback_analysis() -> Dict[str, Any]:
    """Return a fresh copy of the fallback payload."""
    return copy.deepcopy(FALLBACK_ANALYSIS)


def strip_code_fences(text: str) -> str:
    """Remove markdown code-fence markup (```json ... ```) around a payload."""
    return _FENCE_RE.sub('', text).strip()


def _string_list(value: Any, field: str, limit: int) -> List[str]:
    if not isinstance(value, list):
        raise ExternalServiceFailure(f'{field} must be a list')
    items = []
    for item in value:
        if not isinstance(item, str):
            raise ExternalServiceFailure(f'{field} must contain only strings')
        items.append(item.strip())
    return items[:limit]


def _score(value: Any) -> int:
    # JSON has one number type; accept 7.0 but not 7.5 or true
    if isinstance(value, bool):
        raise ExternalServiceFailure('marketOpportunity.score must be an integer')
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if not isinstance(value, int) or not SCORE_MIN <= value <= SCORE_MAX:
        raise ExternalServiceFailure(
            f'marketOpportunity.score must be an integer between {SCORE_MIN} and {SCORE_MAX}'
        )
    return value


def normalize_analysis(data: Any) -> Dict[str, Any]:
    """
    Validate a decoded analysis object and coerce it to the stored shape.

    Lists longer than their caps are truncated. A payload missing any part,
    or with a part of the wrong type, is rejected as a whole; partial
    analyses are never stored.

    Raises:
        ExternalServiceFailure: the payload does not match the schema.
    """
    if not isinstance(data, dict):
        raise ExternalServiceFailure('Analysis must be a JSON object')
    try:
        opportunity = data['marketOpportunity']
        if not isinstance(opportunity, dict):
            raise ExternalServiceFailure('marketOpportunity must be an object')
        explanation = opportunity['explanation']
        if not isinstance(explanation, str):
            raise ExternalServiceFailure('marketOpportunity.explanation must be a string')
        return {
            'similarSolutions': _string_list(data['similarSolutions'], 'similarSolutions', MAX_SIMILAR_SOLUTIONS),
            'marketOpportunity': {
                'score': _score(opportunity['score']),
                'explanation': explanation.strip(),
            },
            'recommendations': _string_list(data['recommendations'], 'recommendations', MAX_RECOMMENDATIONS),
            'risks': _string_list(data['risks'], 'risks', MAX_RISKS),
        }
    except KeyError as e:
        raise ExternalServiceFailure(f'Analysis is missing field {e.args[0]}') from None


def parse_analysis(text: str) -> Dict[str, Any]:
    """
    Parse raw service output into an analysis payload.

    Raises:
        ExternalServiceFailure: empty output, malformed JSON, or schema mismatch.
    """
    if not text or not text.strip():
        raise ExternalServiceFailure('Empty analysis response')
    try:
        data = json.loads(strip_code_fences(text))
    except json.JSONDecodeError as e:
        raise ExternalServiceFailure(f'Analysis response is not valid JSON: {e.msg}') from None
    except RecursionError:
        raise ExternalServiceFailure('Analysis response is nested too deeply') from None
    return normalize_analysis(data)
