"""Finalizer orchestration tests."""

import os
import sys

import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src")))

from ups_finalizer.finalizer import UPSFinalizer, gemini_callable
from ups_finalizer.project import ProjectError, UPSProject


PROJECT = UPSProject(project_title="Linie 3", problem_statement="Stopps", root_cause="Sensor")


def test_missing_fields_raise() -> None:
    with pytest.raises(ProjectError, match="Projekttitel, Problem Statement, Root Cause"):
        UPSFinalizer().generate_summary(UPSProject())


def test_without_callable_returns_prompt() -> None:
    finalizer = UPSFinalizer()
    assert finalizer.generate_summary(PROJECT) == finalizer.create_prompt(PROJECT)
    assert finalizer.last_markdown == ""


def test_with_callable_returns_and_renders_markdown() -> None:
    prompts = []

    def fake_llm(prompt: str) -> str:
        prompts.append(prompt)
        return "# A3 Summary: Linie 3\n<img>"

    finalizer = UPSFinalizer(llm_callable=fake_llm)
    assert finalizer.generate_summary(PROJECT).startswith("# A3 Summary")
    assert "Projekt: Linie 3" in prompts[0]
    assert finalizer.render() == "<p><h1>A3 Summary: Linie 3</h1>\n&lt;img&gt;</p>"
    assert finalizer.render("**x**", escape_html=False) == "<p><strong>x</strong></p>"


def test_gemini_callable_forwards_prompt() -> None:
    class Client:
        def generate_content(self, prompt):
            return f"echo:{prompt}"

    assert gemini_callable(Client())("hi") == "echo:hi"
