"""
Idea maturity phases.

An idea moves through five fixed, ordered stages. The index is stored
alongside the name so feeds can be sorted and filtered by maturity; the
two must always agree.
"""

from typing import Optional, Tuple

from ideaengine.errors import ValidationError

PHASES = [
    'Idea Spark',
    'Research & Validate',
    'Plan & Strategy',
    'Build & Test',
    'Launch Ready',
]

DEFAULT_PHASE = PHASES[0]


def phase_index(phase: str) -> int:
    """Return the 0-based position of a named phase."""
    try:
        return PHASES.index(phase)
    except ValueError:
        raise ValidationError(f"Unknown phase '{phase}'") from None


def phase_name(index: int) -> str:
    """Return the phase name at a 0-based position."""
    if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < len(PHASES):
        raise ValidationError(f'Phase index must be between 0 and {len(PHASES) - 1}')
    return PHASES[index]


def resolve_phase(phase: Optional[str] = None, index: Optional[int] = None) -> Tuple[Optional[str], Optional[int]]:
    """
    Reconcile a (phase, phase index) pair supplied by a caller.

    Either value may be omitted; the missing one is derived from the other.
    When both are omitted, (None, None) is returned so partial updates can
    leave the stored phase untouched.

    Raises:
        ValidationError: unknown phase, index out of range, or a pair that
            disagrees with the fixed ordering.
    """
    if phase is None and index is None:
        return None, None
    if phase is None:
        return phase_name(index), index
    derived = phase_index(phase)
    if index is not None and index != derived:
        raise ValidationError(
            f"Phase index {index} does not match phase '{phase}' (expected {derived})"
        )
    return phase, derived
