"""Tests for the viability classification."""

import math
import pytest
from rtrwh.viability import assess_viability, ViabilityCategory, ViabilityAssessment


@pytest.mark.parametrize("bc_ratio,payback,category", [
    (2.0, 5, ViabilityCategory.HIGHLY_VIABLE),
    (1.5, 10, ViabilityCategory.HIGHLY_VIABLE),
    (1.5, 10.1, ViabilityCategory.VIABLE),
    (1.0, 15, ViabilityCategory.VIABLE),
    (0.99, 5, ViabilityCategory.MARGINALLY_VIABLE),
    (0.75, 20, ViabilityCategory.MARGINALLY_VIABLE),
    (0.74, 5, ViabilityCategory.NOT_VIABLE),
    (3.0, 21, ViabilityCategory.NOT_VIABLE),
])
def test_categories(bc_ratio, payback, category):
    assert assess_viability(bc_ratio, payback).category == category


def test_infinite_payback_is_not_viable():
    result = assess_viability(5.0, math.inf)
    assert result.category == ViabilityCategory.NOT_VIABLE
    assert result.is_viable is False


def test_viable_flag_and_recommendation():
    result = assess_viability(1.2, 8)
    assert result.is_viable is True
    assert "Recommended for implementation" in result.recommendation


def test_to_dict():
    d = assess_viability(0.1, 50).to_dict()
    assert d['category'] == "Not Viable"
    assert d['is_viable'] is False
    assert 'subsidy' in d['recommendation']
