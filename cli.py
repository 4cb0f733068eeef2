from __future__ import annotations
import argparse
import sys
from pathlib import Path
import logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
ROOT = Path(__file__).parent
sys.path.append(str(ROOT / "src"))
from ups_finalizer import UPSFinalizer, gemini_callable, render_markdown  # noqa: E402
from ups_finalizer.credentials import load_credentials, resolve_api_key  # noqa: E402
from ups_finalizer.document_loader import DocumentError, load_report_source  # noqa: E402
from ups_finalizer.gemini_client import GeminiClient, GeminiError  # noqa: E402
from ups_finalizer.project import ProjectError  # noqa: E402
from ups_finalizer.report_export import ExportError, markdown_to_docx_bytes, markdown_to_pdf_bytes  # noqa: E402
from ups_finalizer.storage import project_from_json  # noqa: E402
def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate UPS A3 summaries")
    parser.add_argument("source", type=Path, help="Project JSON file, or a markdown/DOCX report with --render-only")
    parser.add_argument("--output", "-o", type=Path, help="Optional path to write the markdown summary")
    parser.add_argument("--html", type=Path, help="Optional path to write the rendered HTML fragment")
    parser.add_argument("--docx", type=Path, help="Optional path to write the summary as a Word document")
    parser.add_argument("--pdf", type=Path, help="Optional path to write the summary as an A3 PDF")
    parser.add_argument("--prompt-only", action="store_true", help="Print the Gemini prompt instead of calling the API")
    parser.add_argument("--render-only", action="store_true", help="Treat the source as finished markdown")
    parser.add_argument("--api-key", help="Gemini API key (defaults to stored key or GEMINI_API_KEY)")
    parser.add_argument("--model", help="Gemini model name")
    return parser.parse_args(argv)
def _build_finalizer(args: argparse.Namespace) -> UPSFinalizer:
    if args.prompt_only:
        return UPSFinalizer()
    creds = load_credentials()
    api_key = (args.api_key or resolve_api_key(creds)).strip()
    if not api_key:
        raise SystemExit("No Gemini API key configured; pass --api-key or set GEMINI_API_KEY.")
    client = GeminiClient(
        api_key=api_key,
        base_url=creds.base_url or GeminiClient.DEFAULT_BASE_URL,
        model=args.model or creds.model or GeminiClient.DEFAULT_MODEL,
    )
    return UPSFinalizer(llm_callable=gemini_callable(client))
def _markdown_for(args: argparse.Namespace) -> str:
    if args.render_only:
        try:
            return load_report_source(args.source)
        except DocumentError as exc:
            raise SystemExit(str(exc))
    try:
        project = project_from_json(args.source.read_text(encoding="utf-8"))
        return _build_finalizer(args).generate_summary(project)
    except (ProjectError, GeminiError) as exc:
        raise SystemExit(str(exc))
def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    markdown = _markdown_for(args)
    if args.prompt_only:
        print(markdown)
        return
    if args.output:
        args.output.write_text(markdown, encoding="utf-8")
    if args.html:
        args.html.write_text(render_markdown(markdown, escape_html=True), encoding="utf-8")
    try:
        if args.docx:
            args.docx.write_bytes(markdown_to_docx_bytes(markdown))
        if args.pdf:
            args.pdf.write_bytes(markdown_to_pdf_bytes(markdown))
    except ExportError as exc:
        raise SystemExit(str(exc))
    if not any((args.output, args.html, args.docx, args.pdf)):
        print(markdown)
if __name__ == "__main__":
    main()
