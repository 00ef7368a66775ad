"""Test generators - property-based specs and scenarios."""

from .property_based import PropertyAssertion, PropertyBasedTestCase, generate_property_tests
from .scenarios import Scenario, TestScenario, generate_test_scenarios

__all__ = [
    "generate_property_tests",
    "PropertyBasedTestCase",
    "PropertyAssertion",
    "generate_test_scenarios",
    "TestScenario",
    "Scenario",
]
