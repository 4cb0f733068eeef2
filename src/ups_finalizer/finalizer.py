from __future__ import annotations
import logging
from typing import Callable, Optional
from .gemini_client import GeminiClient
from .markdown_renderer import render_markdown
from .project import ProjectError, UPSProject, missing_required_fields
from .prompt_builder import build_report_prompt
logger = logging.getLogger(__name__)
LLMCallable = Callable[[str], str]
def gemini_callable(client: GeminiClient) -> LLMCallable:
    def _call(prompt: str) -> str:
        return client.generate_content(prompt)
    return _call
class UPSFinalizer:
    def __init__(self, llm_callable: Optional[LLMCallable] = None) -> None:
        self.llm_callable = llm_callable
        self.last_markdown = ""
    def create_prompt(self, project: UPSProject) -> str:
        return build_report_prompt(project)
    def generate_summary(self, project: UPSProject) -> str:
        missing = missing_required_fields(project)
        if missing:
            raise ProjectError("Bitte mindestens ausfüllen: " + ", ".join(missing))
        prompt = self.create_prompt(project)
        if not self.llm_callable:
            return prompt
        logger.info("Generating A3 summary for %r", project.project_title)
        self.last_markdown = self.llm_callable(prompt)
        return self.last_markdown
    def render(self, markdown: Optional[str] = None, *, escape_html: bool = True) -> str:
        return render_markdown(self.last_markdown if markdown is None else markdown, escape_html=escape_html)
