"""Prompt builder tests."""

import os
import sys

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src")))

from ups_finalizer.project import Countermeasure, ReapplicationArea, UPSProject
from ups_finalizer.prompt_builder import (
    EXTRACTION_FIELDS,
    build_chat_system_prompt,
    build_extraction_prompt,
    build_report_prompt,
    extract_json_block,
)


def _project(**kwargs) -> UPSProject:
    base = dict(project_title="Linie 3", problem_statement="Zu viele Stopps an Maschine 17", root_cause="Sensor")
    base.update(kwargs)
    return UPSProject(**base)


def test_report_prompt_contains_project_data() -> None:
    prompt = build_report_prompt(_project(how_much="12h"))
    assert "Projekt: Linie 3" in prompt
    assert "- Wie viel: 12h" in prompt
    assert "True Root Cause: Sensor" in prompt
    assert "# A3 Summary: [Projekttitel]" in prompt
    assert prompt.endswith("\n")


def test_reapplication_rule_only_without_areas() -> None:
    without = build_report_prompt(_project())
    assert "AUTOMATISCHE REAPPLICATION REGEL" in without
    assert 'Basierend auf dem Problem "Zu viele Stopps an Maschine 17"' in without
    with_areas = build_report_prompt(_project(reapplication_areas=[ReapplicationArea("Linie 4", "Schulz", "Offen")]))
    assert "AUTOMATISCHE REAPPLICATION REGEL" not in with_areas
    assert "1. Linie 4 | Kontakt: Schulz | Status: Offen" in with_areas


def test_countermeasure_lines() -> None:
    prompt = build_report_prompt(
        _project(
            countermeasures=[
                Countermeasure("Reinigen", "Meier", "2024-05-01", "Geplant"),
                Countermeasure("Schulen", "Weber", "", "Erledigt"),
            ]
        )
    )
    assert "1. Reinigen | Verantwortlich: Meier | Termin: 2024-05-01 | Status: Geplant" in prompt
    assert "2. Schulen | Verantwortlich: Weber | Status: Erledigt" in prompt


def test_chat_system_prompt_embeds_summary() -> None:
    prompt = build_chat_system_prompt("# A3 Summary: X\n")
    assert "# A3 Summary: X" in prompt
    assert "VOLLSTÄNDIGEN" in prompt


def test_extraction_prompt_lists_every_field() -> None:
    prompt = build_extraction_prompt()
    for key in EXTRACTION_FIELDS:
        assert f'"{key}"' in prompt
    assert '"countermeasures"' in prompt


def test_extract_json_block() -> None:
    assert extract_json_block('```json\n{"a": 1}\n```') == '{"a": 1}'
    assert extract_json_block('Hier:\n```\n{"b": 2}\n```\nEnde') == '{"b": 2}'
    assert extract_json_block('  {"c": 3} ') == '{"c": 3}'
    assert extract_json_block("") == ""
