"""
Tests for the Constraint Gate

Covers per-step checks, blueprint-level checks, and the ok/error rule.
"""

import pytest

from playbook_planner.models.blueprint import Blueprint, RiskTier, StepKind
from playbook_planner.models.plan import ConstraintContext, ConstraintResult, ViolationSeverity
from playbook_planner.orchestrator.constraints import can_blueprint_run, can_step_run
from playbook_planner.orchestrator.policy import (
    BUDGET_UNITS,
    KIND_WEIGHT,
    MAX_CONCURRENCY,
    RISK_MULTIPLIER,
    SEVERITY_WEIGHT,
    TIER_TIME_BUDGET,
    step_capacity,
)
from playbook_planner.orchestrator.validator import parse_blueprint


def _context(tier: RiskTier, budget: float = 120, workload: int = 9) -> ConstraintContext:
    return ConstraintContext(
        service="recovery-platform",
        time_budget_minutes=budget,
        active_workload=workload,
        risk_tier=tier,
    )


def _keys(result: ConstraintResult) -> list[str]:
    return [v.key for v in result.violations]


class TestPolicyTables:
    """Tests for the policy tables."""

    @pytest.mark.parametrize("table", [RISK_MULTIPLIER, BUDGET_UNITS, KIND_WEIGHT])
    def test_kind_tables_complete(self, table):
        assert set(table) == set(StepKind)

    @pytest.mark.parametrize("table", [TIER_TIME_BUDGET, MAX_CONCURRENCY, SEVERITY_WEIGHT])
    def test_tier_tables_complete(self, table):
        assert set(table) == set(RiskTier)

    def test_time_budget_tightens_with_tier(self):
        budgets = [TIER_TIME_BUDGET[tier] for tier in RiskTier]
        assert budgets == sorted(budgets, reverse=True)

    def test_isolate_and_restore_weigh_most(self):
        heavy = min(KIND_WEIGHT[StepKind.ISOLATE], KIND_WEIGHT[StepKind.RESTORE])
        light = max(
            KIND_WEIGHT[kind] for kind in StepKind
            if kind not in (StepKind.ISOLATE, StepKind.RESTORE)
        )
        assert heavy > light

    def test_critical_capacity_is_one_budget_unit(self):
        for kind in StepKind:
            assert step_capacity(kind, RiskTier.CRITICAL) == BUDGET_UNITS[kind]
            assert step_capacity(kind, RiskTier.CRITICAL) <= 3


class TestCanStepRun:
    """Tests for per-step gating."""

    def test_clean_step_passes(self, blueprint, context):
        """Test that a well-sized step has no findings."""
        result = can_step_run(blueprint.steps[0], context)

        assert result.ok
        assert result.violations == ()

    def test_automation_capacity_error(self, make_step, make_blueprint):
        """Test that automation level 10 under critical tier is an error."""
        blueprint = parse_blueprint(make_blueprint(
            [make_step("iso", kind="isolate", automationLevel=10)],
            tier="critical",
        ))

        result = can_step_run(blueprint.steps[0], _context(RiskTier.CRITICAL))

        assert not result.ok
        assert "iso:automation-capacity" in _keys(result)
        assert result.errors[0].severity == ViolationSeverity.ERROR

    def test_projected_duration_warning(self, make_step, make_blueprint):
        """Test that a slow step warns but stays runnable."""
        blueprint = parse_blueprint(make_blueprint(
            [make_step("slow", kind="restore", expectedLatencyMinutes=60)],
        ))

        result = can_step_run(blueprint.steps[0], _context(RiskTier.HIGH))

        assert result.ok
        assert _keys(result) == ["slow:projected-duration"]
        assert result.warnings[0].severity == ViolationSeverity.WARN

    def test_projected_duration_uses_kind_multiplier(self, make_step, make_blueprint):
        """Test that the same latency only warns for heavier kinds."""
        steps = parse_blueprint(make_blueprint([
            make_step("n", kind="notify", expectedLatencyMinutes=80),
            make_step("r", kind="restore", expectedLatencyMinutes=80, automationLevel=1),
        ])).steps

        assert can_step_run(steps[0], _context(RiskTier.HIGH)).violations == ()
        assert _keys(can_step_run(steps[1], _context(RiskTier.HIGH))) == ["r:projected-duration"]

    def test_no_actions_warning(self, make_step, make_blueprint):
        """Test that a step without actions warns."""
        blueprint = parse_blueprint(make_blueprint([make_step("bare", actions=[])]))

        result = can_step_run(blueprint.steps[0], _context(RiskTier.LOW))

        assert result.ok
        assert _keys(result) == ["bare:no-actions"]

    def test_non_positive_latency_error(self, blueprint, context):
        """Test the latency check on steps built without validation."""
        step = blueprint.steps[0].model_copy(update={"expected_latency_minutes": 0})

        result = can_step_run(step, context)

        assert not result.ok
        assert "step-assess:non-positive-latency" in _keys(result)

    def test_inputs_not_mutated(self, blueprint, context):
        before = blueprint.to_dict()
        can_step_run(blueprint.steps[1], context)
        assert blueprint.to_dict() == before


class TestCanBlueprintRun:
    """Tests for blueprint-level gating."""

    def test_failover_blueprint_is_runnable(self, blueprint, context):
        """Test that the failover blueprint passes with advisories."""
        result = can_blueprint_run(blueprint, context)

        assert result.ok
        assert _keys(result) == ["time-budget", "step-count"]
        assert result.warnings[0].key == "time-budget"
        assert result.infos[0].key == "step-count"

    def test_step_errors_aggregate(self, make_step, make_blueprint):
        """Test that a step-level error fails the blueprint."""
        blueprint = parse_blueprint(make_blueprint(
            [make_step("a"), make_step("iso", kind="isolate", dependencies=["a"], automationLevel=10)],
            tier="critical",
        ))

        result = can_blueprint_run(blueprint, _context(RiskTier.CRITICAL))

        assert not result.ok
        assert "iso:automation-capacity" in _keys(result)

    def test_dependency_fanout_warning(self, blueprint):
        """Test that dependencies beyond the active workload warn."""
        result = can_blueprint_run(blueprint, _context(RiskTier.HIGH, budget=500, workload=0))

        fanout = [k for k in _keys(result) if k.endswith(":dependency-fanout")]
        assert len(fanout) == 4
        assert result.ok

    def test_cycle_is_structural_error(self, make_step, make_blueprint):
        """Test that a cycle that slipped past validation is caught."""
        blueprint = parse_blueprint(make_blueprint([
            make_step("a", dependencies=["b"]),
            make_step("b", dependencies=["a"]),
        ]))

        result = can_blueprint_run(blueprint, _context(RiskTier.HIGH))

        assert not result.ok
        assert "unschedulable-graph" in _keys(result)

    def test_dangling_dependency_is_structural_error(self, make_step, make_blueprint):
        """Test that a dependency outside the blueprint blocks scheduling."""
        blueprint = Blueprint.model_validate(make_blueprint([
            make_step("a", dependencies=["ghost"]),
        ]))

        result = can_blueprint_run(blueprint, _context(RiskTier.HIGH))

        assert not result.ok
        assert "unschedulable-graph" in _keys(result)

    def test_invalid_version_error(self, blueprint, context):
        """Test that a non-positive version is an error."""
        result = can_blueprint_run(blueprint.model_copy(update={"version": 0}), context)

        assert not result.ok
        assert "invalid-version" in _keys(result)

    def test_within_time_budget(self, blueprint):
        result = can_blueprint_run(blueprint, _context(RiskTier.HIGH, budget=145))
        assert "time-budget" not in _keys(result)

    def test_step_count_info(self, blueprint):
        """Test the step count note against tier concurrency."""
        assert "step-count" in _keys(can_blueprint_run(blueprint, _context(RiskTier.HIGH)))
        assert "step-count" not in _keys(can_blueprint_run(blueprint, _context(RiskTier.MEDIUM)))

    def test_risk_cap_info(self, blueprint):
        """Test the risk cap note scales with tier severity weight."""
        low_tier = can_blueprint_run(blueprint, _context(RiskTier.NONE, budget=500))
        high_tier = can_blueprint_run(blueprint, _context(RiskTier.HIGH, budget=500))

        assert "risk-cap" in _keys(low_tier)
        assert low_tier.infos[-1].severity == ViolationSeverity.INFO
        assert "risk-cap" not in _keys(high_tier)

    def test_empty_blueprint_has_no_findings(self, make_blueprint):
        blueprint = parse_blueprint(make_blueprint([]))

        result = can_blueprint_run(blueprint, _context(RiskTier.HIGH))

        assert result.ok
        assert result.violations == ()

    def test_ok_iff_no_error(self, blueprint, make_step, make_blueprint):
        """Test that ok tracks the presence of error-severity findings."""
        cyclic = parse_blueprint(make_blueprint([
            make_step("a", dependencies=["b"], actions=[]),
            make_step("b", dependencies=["a"]),
        ]))
        cases = [
            can_blueprint_run(blueprint, _context(RiskTier.HIGH)),
            can_blueprint_run(blueprint, _context(RiskTier.NONE, workload=0)),
            can_blueprint_run(blueprint.model_copy(update={"version": 0}), _context(RiskTier.HIGH)),
            can_blueprint_run(cyclic, _context(RiskTier.CRITICAL)),
        ]

        for result in cases:
            has_error = any(v.severity == ViolationSeverity.ERROR for v in result.violations)
            assert result.ok is not has_error

    def test_result_serializes(self, blueprint, context):
        data = can_blueprint_run(blueprint, context).to_dict()

        assert data["ok"] is True
        assert data["violations"][0] == {
            "key": "time-budget",
            "message": data["violations"][0]["message"],
            "severity": "warn",
        }
