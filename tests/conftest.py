"""
Playbook Planner Test Configuration and Fixtures
"""

import os
import copy
from datetime import datetime, timedelta, timezone

import pytest

# Set test environment variables before importing modules
os.environ["PLAYBOOK_LOG_LEVEL"] = "INFO"
os.environ["PLAYBOOK_DEFAULT_TIME_BUDGET_MINUTES"] = "120"
os.environ["PLAYBOOK_DEFAULT_ACTIVE_WORKLOAD"] = "9"


BASE_TIME = datetime(2026, 2, 23, 10, 0, tzinfo=timezone.utc)


def _iso(dt: datetime) -> str:
    return dt.isoformat().replace("+00:00", "Z")


def make_raw_step(step_id: str, kind: str = "assess", dependencies=None, **overrides) -> dict:
    """Build a raw step record with sensible defaults."""
    step = {
        "id": step_id,
        "title": f"Step {step_id}",
        "kind": kind,
        "scope": "service",
        "ownerTeam": "sre-core",
        "dependencies": list(dependencies or []),
        "expectedLatencyMinutes": 10,
        "riskDelta": 0,
        "automationLevel": 1,
        "metadata": {},
        "actions": [{"type": "probe", "target": "api", "parameters": {}}],
    }
    step.update(overrides)
    return step


def make_raw_blueprint(steps, tier: str = "high", **overrides) -> dict:
    """Build a raw blueprint record around ``steps``."""
    raw = {
        "id": "pb-test",
        "title": "Test Playbook",
        "service": "recovery-platform",
        "severity": "major",
        "tier": tier,
        "timeline": {
            "startAt": _iso(BASE_TIME),
            "endAt": _iso(BASE_TIME + timedelta(hours=2)),
            "timezone": "UTC",
        },
        "owner": "SRE Platform",
        "labels": ["test"],
        "steps": steps,
        "createdAt": _iso(BASE_TIME - timedelta(days=4)),
        "updatedAt": _iso(BASE_TIME),
        "version": 1,
    }
    raw.update(overrides)
    return raw


FAILOVER_BLUEPRINT = {
    "id": "pb-ops-001",
    "title": "Cross-Region Failover Playbook",
    "service": "recovery-platform",
    "severity": "major",
    "tier": "high",
    "timeline": {
        "startAt": _iso(BASE_TIME - timedelta(minutes=30)),
        "endAt": _iso(BASE_TIME + timedelta(minutes=40)),
        "timezone": "UTC",
    },
    "owner": "SRE Platform",
    "labels": ["cross-region", "failover", "high-risk"],
    "steps": [
        {
            "id": "step-assess",
            "title": "Assess blast radius",
            "kind": "assess",
            "scope": "service",
            "ownerTeam": "sre-core",
            "dependencies": [],
            "expectedLatencyMinutes": 18,
            "riskDelta": -5,
            "automationLevel": 1,
            "metadata": {"canary": True, "source": "synthetic"},
            "actions": [{"type": "metric", "target": "region-a", "parameters": {"windowMinutes": 8}}],
        },
        {
            "id": "step-isolate",
            "title": "Isolate impacted cluster",
            "kind": "isolate",
            "scope": "service",
            "ownerTeam": "incident-engineering",
            "dependencies": ["step-assess"],
            "expectedLatencyMinutes": 35,
            "riskDelta": 12,
            "automationLevel": 2,
            "metadata": {"requiresApproval": True},
            "actions": [{"type": "network", "target": "cluster-a", "parameters": {"shutdown": True}}],
        },
        {
            "id": "step-restore",
            "title": "Restore standby cluster",
            "kind": "restore",
            "scope": "region",
            "ownerTeam": "infra-runtime",
            "dependencies": ["step-isolate"],
            "expectedLatencyMinutes": 40,
            "riskDelta": 25,
            "automationLevel": 4,
            "metadata": {"requiresSnapshot": True},
            "actions": [{"type": "restore", "target": "cluster-b", "parameters": {"waitForReady": True}}],
        },
        {
            "id": "step-verify",
            "title": "Verify workload health",
            "kind": "verify",
            "scope": "workload",
            "ownerTeam": "quality-assurance",
            "dependencies": ["step-restore"],
            "expectedLatencyMinutes": 28,
            "riskDelta": -10,
            "automationLevel": 3,
            "metadata": {"synthetic": True},
            "actions": [{"type": "probe", "target": "api", "parameters": {"statusCode": 200}}],
        },
        {
            "id": "step-postmortem",
            "title": "Capture evidence",
            "kind": "postmortem",
            "scope": "global",
            "ownerTeam": "incident-command",
            "dependencies": ["step-verify"],
            "expectedLatencyMinutes": 24,
            "riskDelta": -2,
            "automationLevel": 1,
            "metadata": {"storeArtifacts": True},
            "actions": [{"type": "store", "target": "artifact-bucket", "parameters": {"retentionDays": 90}}],
        },
    ],
    "createdAt": _iso(BASE_TIME - timedelta(days=4)),
    "updatedAt": _iso(BASE_TIME),
    "version": 12,
}


FAILOVER_RUN = {
    "id": "run-2026-02-23",
    "playbookId": "pb-ops-001",
    "triggeredBy": "automation",
    "startedAt": _iso(BASE_TIME),
    "window": {
        "startAt": _iso(BASE_TIME),
        "endAt": _iso(BASE_TIME + timedelta(minutes=35)),
        "timezone": "UTC",
    },
    "status": "active",
    "outcomeByStep": {
        "step-assess": {
            "status": "passed",
            "attempt": 1,
            "startedAt": _iso(BASE_TIME),
            "finishedAt": _iso(BASE_TIME + timedelta(minutes=18)),
            "details": {"checks": "ok"},
            "nextStepIds": ["step-isolate"],
        },
        "step-isolate": {
            "status": "running",
            "attempt": 1,
            "startedAt": _iso(BASE_TIME + timedelta(minutes=18)),
            "details": {"blastRadius": "stabilized"},
            "nextStepIds": ["step-restore"],
        },
        "step-restore": {"status": "pending", "attempt": 0, "details": {}, "nextStepIds": ["step-verify"]},
        "step-verify": {"status": "pending", "attempt": 0, "details": {}, "nextStepIds": ["step-postmortem"]},
        "step-postmortem": {"status": "pending", "attempt": 0, "details": {}, "nextStepIds": []},
    },
    "notes": ["initial synthetic run"],
}


@pytest.fixture
def raw_blueprint():
    """Raw cross-region failover blueprint, safe to mutate."""
    return copy.deepcopy(FAILOVER_BLUEPRINT)


@pytest.fixture
def blueprint(raw_blueprint):
    """Parsed cross-region failover blueprint."""
    from playbook_planner.orchestrator.validator import parse_blueprint

    return parse_blueprint(raw_blueprint)


@pytest.fixture
def raw_run():
    """Raw active run against the failover blueprint, safe to mutate."""
    return copy.deepcopy(FAILOVER_RUN)


@pytest.fixture
def run(raw_run):
    """Parsed active run against the failover blueprint."""
    from playbook_planner.orchestrator.validator import parse_run

    return parse_run(raw_run)


@pytest.fixture
def test_settings():
    """Settings with the default planning context."""
    from playbook_planner.config.settings import Settings

    return Settings(
        log_level="DEBUG",
        default_time_budget_minutes=120,
        default_active_workload=9,
        max_blueprint_steps=500,
    )


@pytest.fixture
def context():
    """Constraint context for the failover blueprint."""
    from playbook_planner.models.blueprint import RiskTier
    from playbook_planner.models.plan import ConstraintContext

    return ConstraintContext(
        service="recovery-platform",
        time_budget_minutes=120,
        active_workload=9,
        risk_tier=RiskTier.HIGH,
    )


@pytest.fixture
def make_step():
    """Factory for raw step records."""
    return make_raw_step


@pytest.fixture
def make_blueprint():
    """Factory for raw blueprint records."""
    return make_raw_blueprint
