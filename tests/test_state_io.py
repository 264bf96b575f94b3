import itertools
import json
from pathlib import Path

import pytest

from fsim_core.domain.models import DEFAULT_SITUATION_CATEGORY
from fsim_core.io.state import data_from_json, data_to_json, load_state, save_state
from fsim_core.services.catalog import delete_situation, duplicate_situation, reorder_situations, resize_scenario

DATA = Path(__file__).parent / "data" / "state.json"


def _payload():
    return json.loads(DATA.read_text(encoding="utf-8"))


def test_load_fixture():
    data = load_state(DATA)
    assert [s.id for s in data.situations] == ["job", "car"]
    salary = data.situation("job").effect("salary")
    assert salary.kind == "recurring"
    assert salary.variance_percent == 10
    assert salary.variance_direction == "±"

    alt = data.scenario("alt")
    assert alt.end_month == "2024-05"
    assert alt.goal_balance == 1500
    assert alt.effect_entries[0].effect_id == "rent"
    assert alt.annotations[0].text == "Buy the car"


def test_blank_category_falls_back_to_default():
    data = load_state(DATA)
    assert data.situation("car").category == DEFAULT_SITUATION_CATEGORY


def test_save_and_reload_keeps_state(tmp_path):
    data = load_state(DATA)
    out = save_state(tmp_path / "nested" / "state.json", data)
    assert out.exists()
    assert load_state(out) == data
    assert json.loads(out.read_text(encoding="utf-8"))["schemaVersion"] == 5


def test_serialized_form_uses_camel_case():
    payload = data_to_json(load_state(DATA))
    scenario = payload["scenarios"][1]
    assert scenario["startMonth"] == "2024-02"
    assert scenario["effectEntries"][0]["effectId"] == "rent"
    assert payload["situations"][0]["effects"][0]["type"] == "recurring"
    assert "goalBalance" not in payload["scenarios"][0]


def test_missing_file():
    with pytest.raises(FileNotFoundError):
        load_state("/nonexistent/state.json")


@pytest.mark.parametrize(
    "payload",
    [
        [],
        {"situations": []},
        {"situations": {}, "scenarios": []},
        {"situations": [{"name": "no id"}], "scenarios": []},
        {"schemaVersion": None, "situations": [], "scenarios": []},
        {"schemaVersion": [5], "situations": [], "scenarios": []},
        {"schemaVersion": "five", "situations": [], "scenarios": []},
        {"situations": [], "scenarios": [{"id": "sc", "startMonth": "2024-01", "durationMonths": "many"}]},
    ],
)
def test_invalid_payloads_are_rejected(payload):
    with pytest.raises(ValueError):
        data_from_json(payload)


def test_legacy_effect_windows_become_disabled_windows():
    payload = {
        "schemaVersion": 4,
        "situations": [
            {
                "id": "job",
                "name": "Job",
                "effects": [{"id": "bonus", "label": "Bonus", "type": "recurring", "category": "income", "amount": 50}],
            }
        ],
        "scenarios": [
            {
                "id": "sc",
                "startMonth": "2024-01",
                "durationMonths": 12,
                "entries": [{"id": "e1", "situationId": "job", "startMonth": "2024-01", "endMonth": "2024-06"}],
                "effectEntries": [
                    {"id": "o1", "situationId": "job", "effectId": "bonus", "startMonth": "2024-02", "endMonth": "2024-03"}
                ],
            }
        ],
    }
    scenario = data_from_json(payload).scenario("sc")
    assert [(e.start_month, e.end_month) for e in scenario.effect_entries] == [
        ("2024-01", "2024-01"),
        ("2024-04", "2024-06"),
    ]


def test_current_schema_keeps_effect_windows():
    scenario = data_from_json(_payload()).scenario("alt")
    assert [(e.start_month, e.end_month) for e in scenario.effect_entries] == [("2024-05", "2024-05")]


def test_duplicate_situation_inserts_copy_after_source():
    counter = itertools.count(1)
    data = duplicate_situation(load_state(DATA), "job", lambda: f"copy-{next(counter)}")
    assert [s.id for s in data.situations] == ["job", "copy-1", "car"]
    copy = data.situations[1]
    assert copy.name == "Job (copy)"
    assert [e.id for e in copy.effects] == ["copy-2", "copy-3"]
    assert [e.amount for e in copy.effects] == [500, 200]


def test_duplicate_unknown_situation_is_a_no_op():
    data = load_state(DATA)
    assert duplicate_situation(data, "ghost") is data


def test_delete_situation_cleans_scenarios():
    data = delete_situation(load_state(DATA), "job")
    assert [s.id for s in data.situations] == ["car"]
    alt = data.scenario("alt")
    assert [e.situation_id for e in alt.entries] == ["car"]
    assert alt.effect_entries == []
    assert data.scenario("base").entries == []


def test_reorder_situations():
    data = reorder_situations(load_state(DATA), 1, 0)
    assert [s.id for s in data.situations] == ["car", "job"]


def test_resize_scenario_clips_entries_and_overrides():
    counter = itertools.count(1)
    alt = load_state(DATA).scenario("alt")
    resized = resize_scenario(alt, duration_months=3, id_factory=lambda: f"r-{next(counter)}")

    assert resized.end_month == "2024-04"
    assert [(e.situation_id, e.start_month, e.end_month) for e in resized.entries] == [
        ("job", "2024-02", "2024-04"),
        ("car", "2024-03", "2024-03"),
    ]
    # the rent override sat in 2024-05 only
    assert resized.effect_entries == []
    assert resized.savings_balance_points == alt.savings_balance_points


def test_resize_scenario_moving_start_drops_situations_outside_axis():
    alt = load_state(DATA).scenario("alt")
    resized = resize_scenario(alt, start_month="2024-04", duration_months=6)
    assert [(e.situation_id, e.start_month, e.end_month) for e in resized.entries] == [("job", "2024-04", "2024-05")]
    assert [(e.effect_id, e.start_month) for e in resized.effect_entries] == [("rent", "2024-05")]


@pytest.mark.parametrize("kwargs", [{"duration_months": 0}, {"start_month": "2024-13"}])
def test_resize_scenario_rejects_bad_axis(kwargs):
    with pytest.raises(ValueError):
        resize_scenario(load_state(DATA).scenario("alt"), **kwargs)
