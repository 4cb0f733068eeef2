from .chat_session import ChatMessage, ChatSession
from .file_handler import UploadError, apply_extracted_data, detect_file_type, extract_data_from_file
from .finalizer import UPSFinalizer, gemini_callable
from .gemini_client import GeminiClient, GeminiError
from .markdown_renderer import convert_tables, render_markdown
from .project import Countermeasure, ProjectError, ReapplicationArea, UPSProject, missing_required_fields
from .prompt_builder import (
    build_chat_system_prompt,
    build_extraction_prompt,
    build_report_prompt,
    extract_json_block,
)
from .report_export import ExportError, markdown_to_docx_bytes, markdown_to_pdf_bytes
from .workbook_loader import WorkbookError, extract_gap_analysis, map_to_form_fields
__all__ = [
    "ChatMessage",
    "ChatSession",
    "Countermeasure",
    "ExportError",
    "GeminiClient",
    "GeminiError",
    "ProjectError",
    "ReapplicationArea",
    "UPSFinalizer",
    "UPSProject",
    "UploadError",
    "WorkbookError",
    "apply_extracted_data",
    "build_chat_system_prompt",
    "build_extraction_prompt",
    "build_report_prompt",
    "convert_tables",
    "detect_file_type",
    "extract_data_from_file",
    "extract_gap_analysis",
    "extract_json_block",
    "gemini_callable",
    "map_to_form_fields",
    "markdown_to_docx_bytes",
    "markdown_to_pdf_bytes",
    "missing_required_fields",
    "render_markdown",
]
__version__ = "2.0.0"
