"""
Tests for idea phase ordering.

Validates:
1. The five stages and their fixed order
2. Name <-> index lookups
3. Reconciling caller-supplied (phase, index) pairs
"""

import pytest
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(__file__))))

from ideaengine.errors import ValidationError
from ideaengine.phases import PHASES, DEFAULT_PHASE, phase_index, phase_name, resolve_phase


class TestPhaseOrdering:
    """Test the fixed stage list."""

    def test_five_stages_in_order(self):
        assert PHASES == [
            'Idea Spark',
            'Research & Validate',
            'Plan & Strategy',
            'Build & Test',
            'Launch Ready',
        ]

    def test_default_is_first_stage(self):
        assert DEFAULT_PHASE == 'Idea Spark'
        assert phase_index(DEFAULT_PHASE) == 0

    def test_index_lookup(self):
        assert phase_index('Build & Test') == 3
        assert phase_name(4) == 'Launch Ready'

    def test_unknown_phase_raises(self):
        with pytest.raises(ValidationError):
            phase_index('Someday')

    @pytest.mark.parametrize('index', [-1, 5, True, '2'])
    def test_bad_index_raises(self, index):
        with pytest.raises(ValidationError):
            phase_name(index)


class TestResolvePhase:
    """Test (phase, index) reconciliation."""

    def test_nothing_supplied(self):
        """Omitting both leaves the stored phase alone."""
        assert resolve_phase() == (None, None)

    def test_index_derived_from_name(self):
        assert resolve_phase('Plan & Strategy') == ('Plan & Strategy', 2)

    def test_name_derived_from_index(self):
        assert resolve_phase(index=1) == ('Research & Validate', 1)

    def test_consistent_pair_accepted(self):
        assert resolve_phase('Launch Ready', 4) == ('Launch Ready', 4)

    def test_inconsistent_pair_rejected(self):
        with pytest.raises(ValidationError, match='does not match'):
            resolve_phase('Launch Ready', 0)
