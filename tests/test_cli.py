"""Tests for the planshift command line interface and facts loader."""

import json
from datetime import timezone

import pytest
import yaml
from typer.testing import CliRunner

from planshift import __version__
from planshift.cli import app, load_facts
from planshift.exceptions import InvalidFactsError

runner = CliRunner()

AS_OF = "2026-03-01T12:00:00Z"


def _write_yaml(path, document):
    path.write_text(yaml.safe_dump(document), encoding="utf-8")
    return path


@pytest.fixture
def free_facts(tmp_path):
    return _write_yaml(tmp_path / "free.yaml", {
        "organization_id": "org-free",
        "record": {"created_at": "2025-11-01T00:00:00Z"},
        "usage": {
            "total_users": 4,
            "active_users": 3,
            "total_projects": 5,
            "gantt_projects": 2,
            "total_tasks": 80,
        },
    })


@pytest.fixture
def trial_facts(tmp_path):
    return _write_yaml(tmp_path / "trial.yaml", {
        "organization_id": "org-trial",
        "record": {
            "created_at": "2026-02-20T00:00:00Z",
            "trial_expires_at": "2026-03-06T12:00:00Z",
        },
        "usage": {"total_users": 4, "active_users": 3},
    })


# ==============================================================================
# Commands
# ==============================================================================

class TestRecommendCommand:

    def test_json_output(self, free_facts):
        result = runner.invoke(app, ["recommend", str(free_facts), "--as-of", AS_OF, "--json"])

        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert payload["user_analytics"]["organization_id"] == "org-free"
        assert payload["user_analytics"]["user_category"] == "free"
        assert len(payload["recommendations"]) == 6
        assert len(payload["provenance_hash"]) == 64

    def test_table_output(self, free_facts):
        result = runner.invoke(app, ["recommend", str(free_facts), "--as-of", AS_OF])

        assert result.exit_code == 0
        assert "Recommended Plans" in result.stdout
        assert "Migration Summary" in result.stdout

    def test_missing_file(self, tmp_path):
        result = runner.invoke(app, ["recommend", str(tmp_path / "absent.yaml")])

        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_unsupported_format(self, tmp_path):
        path = tmp_path / "facts.txt"
        path.write_text("organization_id: org-1", encoding="utf-8")

        result = runner.invoke(app, ["recommend", str(path)])
        assert result.exit_code == 1

    def test_unknown_organization(self, tmp_path):
        path = _write_yaml(tmp_path / "ghost.yaml", {"organization_id": "org-ghost"})

        result = runner.invoke(app, ["recommend", str(path), "--as-of", AS_OF])
        assert result.exit_code == 1

    def test_bad_timestamp(self, free_facts):
        result = runner.invoke(app, ["recommend", str(free_facts), "--as-of", "yesterday"])
        assert result.exit_code == 2


class TestAnalyzeCommand:

    def test_json_output(self, trial_facts):
        result = runner.invoke(app, [
            "analyze", str(trial_facts), "--tier", "PRO_SMALL", "--as-of", AS_OF, "--json",
        ])

        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert payload["target_tier"] == "PRO_SMALL"
        assert payload["user_category"] == "trial"
        assert len(payload["scenarios"]) == 3

    def test_table_output(self, trial_facts):
        result = runner.invoke(app, [
            "analyze", str(trial_facts), "-t", "business_small", "--as-of", AS_OF,
        ])

        assert result.exit_code == 0
        assert "Migration to BUSINESS_SMALL" in result.stdout

    def test_unknown_tier(self, trial_facts):
        result = runner.invoke(app, ["analyze", str(trial_facts), "--tier", "GOLD"])

        assert result.exit_code == 1
        assert "Error:" in result.output


class TestVersionCommand:

    def test_version(self):
        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert f"PlanShift v{__version__}" in result.stdout


# ==============================================================================
# Facts loading
# ==============================================================================

class TestLoadFacts:

    def test_json_document(self, tmp_path):
        path = tmp_path / "facts.json"
        path.write_text(json.dumps({
            "organization_id": "org-json",
            "record": {
                "created_at": "2026-01-01T00:00:00",
                "appsumo": {"purchase_date": "2026-02-27T00:00:00"},
            },
            "usage": {"total_users": 2},
        }), encoding="utf-8")

        organization_id, record, facts = load_facts(path)

        assert organization_id == "org-json"
        assert record.organization_id == "org-json"
        assert record.created_at.tzinfo == timezone.utc
        assert record.appsumo.purchase_date.tzinfo == timezone.utc
        assert facts.total_users == 2

    def test_missing_record_section(self, tmp_path):
        path = _write_yaml(tmp_path / "facts.yaml", {"organization_id": "org-1"})

        _, record, facts = load_facts(path)

        assert record is None
        assert facts.total_users == 0

    def test_missing_organization_id(self, tmp_path):
        path = _write_yaml(tmp_path / "facts.yaml", {"usage": {"total_users": 2}})

        with pytest.raises(InvalidFactsError, match="no organization_id"):
            load_facts(path)

    def test_document_must_be_mapping(self, tmp_path):
        path = _write_yaml(tmp_path / "facts.yaml", ["org-1", "org-2"])

        with pytest.raises(InvalidFactsError) as exc_info:
            load_facts(path)
        assert exc_info.value.context["document_type"] == "list"

    def test_unparsable_document(self, tmp_path):
        path = tmp_path / "facts.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(InvalidFactsError, match="Could not parse"):
            load_facts(path)

    def test_validation_errors_are_listed(self, tmp_path):
        path = _write_yaml(tmp_path / "facts.yaml", {
            "organization_id": "org-1",
            "usage": {"total_users": -1},
        })

        with pytest.raises(InvalidFactsError) as exc_info:
            load_facts(path)
        assert exc_info.value.context["errors"][0].startswith("total_users")
