"""
IdeaForge Core Engine

Framework-free domain logic for the idea platform: phase ordering, the
feed read model, social state machines, AI analysis parsing and the error
taxonomy. Persistence and HTTP live in the ``backend`` package.
"""

from ideaengine.errors import IdeaForgeError
from ideaengine.phases import PHASES, DEFAULT_PHASE, phase_index, phase_name, resolve_phase
from ideaengine.feed import IdeaRecord, project_idea, project_feed
from ideaengine.social import CollaborationStatus, toggle_like_state, check_collaboration_request, transition
from ideaengine.analysis import FALLBACK_ANALYSIS, ASSISTANT_FALLBACK, fallback_analysis, parse_analysis, strip_code_fences

__version__ = "0.1.0"
