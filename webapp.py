from __future__ import annotations
import logging
import os
import sys
import time
from io import BytesIO
from pathlib import Path
from typing import Optional
from flask import Flask, flash, redirect, render_template_string, request, send_file, url_for
from markupsafe import Markup
ROOT = Path(__file__).parent
sys.path.append(str(ROOT / "src"))
from ups_finalizer import __version__ as APP_VERSION  # noqa: E402
from ups_finalizer.credentials import (  # noqa: E402
    StoredCredentials,
    clear_credentials,
    load_credentials,
    resolve_api_key,
    save_credentials,
)
from ups_finalizer.file_handler import UploadError, apply_extracted_data, extract_data_from_file  # noqa: E402
from ups_finalizer.finalizer import UPSFinalizer, gemini_callable  # noqa: E402
from ups_finalizer.gemini_client import GeminiClient, GeminiError  # noqa: E402
from ups_finalizer.markdown_renderer import render_markdown  # noqa: E402
from ups_finalizer.project import (  # noqa: E402
    COUNTERMEASURE_STATUSES,
    REAPPLICATION_STATUSES,
    VALIDATION_OPTIONS,
    WIZARD_STEPS,
    ProjectError,
    UPSProject,
)
from ups_finalizer.report_export import (  # noqa: E402
    ExportError,
    markdown_to_docx_bytes,
    markdown_to_pdf_bytes,
    project_filename,
    report_filename,
)
from ups_finalizer.storage import (  # noqa: E402
    SavedSession,
    clear_session,
    load_session,
    project_from_json,
    project_to_json,
    save_session,
)
from ups_finalizer.telemetry import Timer, log_event  # noqa: E402
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
app = Flask(__name__)
app.secret_key = os.environ.get("FLASK_SECRET_KEY") or os.urandom(24).hex()
app.config["MAX_CONTENT_LENGTH"] = 16 * 1024 * 1024
EXPORT_MIMETYPES = {
    "markdown": ("md", "text/markdown"),
    "docx": ("docx", "application/vnd.openxmlformats-officedocument.wordprocessingml.document"),
    "pdf": ("pdf", "application/pdf"),
}
def _client(creds: Optional[StoredCredentials] = None) -> Optional[GeminiClient]:
    creds = creds or load_credentials()
    api_key = resolve_api_key(creds)
    if not api_key:
        return None
    return GeminiClient(
        api_key=api_key,
        base_url=creds.base_url or GeminiClient.DEFAULT_BASE_URL,
        model=creds.model or GeminiClient.DEFAULT_MODEL,
    )
def _track(action: str, timer: Timer, *, success: bool, error: str = "", payload: Optional[dict] = None) -> None:
    log_event(
        "ui_action",
        action=action,
        app_version=APP_VERSION,
        model=load_credentials().model,
        duration_ms=timer.ms(),
        success=success,
        error=error,
        payload=payload,
    )
def _form_project() -> UPSProject:
    return UPSProject.from_form(request.form)
@app.route("/", methods=["GET"])
def index():
    creds = load_credentials()
    if not resolve_api_key(creds):
        return render_template_string(TEMPLATE, gate=True, app_version=APP_VERSION)
    session = load_session()
    report_html = Markup(render_markdown(session.markdown, escape_html=True)) if session.markdown else ""
    project = session.project
    countermeasures = project.countermeasures or []
    areas = project.reapplication_areas or []
    return render_template_string(
        TEMPLATE,
        gate=False,
        app_version=APP_VERSION,
        steps=WIZARD_STEPS,
        project=project,
        countermeasures=countermeasures,
        areas=areas,
        cm_statuses=COUNTERMEASURE_STATUSES,
        ra_statuses=REAPPLICATION_STATUSES,
        validation_options=VALIDATION_OPTIONS,
        report_html=report_html,
        has_report=bool(session.markdown),
        chat_history=session.chat.history(),
        model=creds.model,
    )
@app.route("/api-key", methods=["POST"])
def api_key():
    key = (request.form.get("api_key") or "").strip()
    if not key:
        flash("Bitte API Key eingeben", "error")
        return redirect(url_for("index"))
    creds = load_credentials()
    creds.api_key = key
    model = (request.form.get("model") or "").strip()
    if model:
        creds.model = model
    client = GeminiClient(api_key=key, base_url=creds.base_url, model=creds.model)
    if not client.validate_key():
        app.logger.info("Rejected API key")
        flash("Ungültiger Key", "error")
        return redirect(url_for("index"))
    save_credentials(creds)
    flash("Key gültig!", "success")
    return redirect(url_for("index"))
@app.route("/settings/clear", methods=["POST"])
def clear_all():
    clear_session()
    clear_credentials()
    flash("Alle gespeicherten Daten wurden gelöscht.", "success")
    return redirect(url_for("index"))
@app.route("/save", methods=["POST"])
def save():
    session = load_session()
    session.project = _form_project()
    save_session(session)
    flash("Formular gespeichert.", "success")
    return redirect(url_for("index"))
@app.route("/generate", methods=["POST"])
def generate():
    session = load_session()
    session.project = _form_project()
    save_session(session)
    client = _client()
    if client is None:
        flash("Bitte geben Sie einen Gemini API Key ein.", "error")
        return redirect(url_for("index"))
    timer = Timer()
    finalizer = UPSFinalizer(llm_callable=gemini_callable(client))
    try:
        markdown = finalizer.generate_summary(session.project)
    except ProjectError as exc:
        flash(str(exc), "error")
        return redirect(url_for("index"))
    except GeminiError as exc:
        app.logger.error("Generation error: %s", exc)
        _track("generate", timer, success=False, error=str(exc))
        flash(f"Fehler bei der Generierung: {exc}", "error")
        return redirect(url_for("index"))
    session.markdown = markdown
    session.chat.init(markdown)
    save_session(session)
    _track("generate", timer, success=True, payload={"project_title": session.project.project_title})
    flash("A3 Summary generiert!", "success")
    return redirect(url_for("index", _anchor="output"))
@app.route("/chat", methods=["POST"])
def chat():
    message = (request.form.get("message") or "").strip()
    if not message:
        return redirect(url_for("index", _anchor="chat"))
    session = load_session()
    client = _client()
    if client is None:
        flash("API Key erforderlich", "error")
        return redirect(url_for("index"))
    if not session.chat.messages:
        session.chat.init(session.markdown)
    timer = Timer()
    try:
        session.chat.send_message(message, client)
    except GeminiError as exc:
        app.logger.error("Chat error: %s", exc)
        _track("chat", timer, success=False, error=str(exc))
        flash(f"Chat error: {exc}", "error")
        return redirect(url_for("index", _anchor="chat"))
    save_session(session)
    _track("chat", timer, success=True)
    return redirect(url_for("index", _anchor="chat"))
@app.route("/chat/apply", methods=["POST"])
def chat_apply():
    session = load_session()
    history = session.chat.history()
    try:
        index = int(request.form.get("index", ""))
        message = history[index]
    except (ValueError, IndexError):
        flash("Nachricht nicht gefunden.", "error")
        return redirect(url_for("index", _anchor="chat"))
    if message.role != "assistant":
        flash("Nur Antworten des Assistenten können übernommen werden.", "error")
        return redirect(url_for("index", _anchor="chat"))
    session.markdown = message.content
    session.chat.update_context(message.content)
    save_session(session)
    flash("Änderungen übernommen!", "success")
    return redirect(url_for("index", _anchor="output"))
@app.route("/chat/clear", methods=["POST"])
def chat_clear():
    session = load_session()
    session.chat.clear()
    save_session(session)
    return redirect(url_for("index", _anchor="chat"))
@app.route("/upload", methods=["POST"])
def upload():
    file_storage = request.files.get("file")
    if not file_storage or not file_storage.filename:
        flash("Keine Datei ausgewählt", "error")
        return redirect(url_for("index"))
    data = file_storage.read()
    timer = Timer()
    try:
        extracted = extract_data_from_file(
            file_storage.filename, data, client=_client(), mimetype=file_storage.mimetype or ""
        )
    except (UploadError, GeminiError) as exc:
        app.logger.warning("Upload of %s failed: %s", file_storage.filename, exc)
        _track("upload", timer, success=False, error=str(exc))
        flash(f"Fehler: {exc}", "error")
        return redirect(url_for("index"))
    session = load_session()
    session.project = apply_extracted_data(session.project, extracted)
    save_session(session)
    _track("upload", timer, success=True, payload={"filename": file_storage.filename})
    flash("Datei analysiert! Felder automatisch ausgefüllt.", "success")
    return redirect(url_for("index"))
@app.route("/project/export", methods=["GET"])
def project_export():
    session = load_session()
    payload = project_to_json(session.project).encode("utf-8")
    return send_file(
        BytesIO(payload),
        mimetype="application/json",
        as_attachment=True,
        download_name=project_filename(session.project.project_title, round(time.time() * 1000)),
    )
@app.route("/project/import", methods=["POST"])
def project_import():
    file_storage = request.files.get("file")
    if not file_storage or not file_storage.filename:
        flash("Keine Datei ausgewählt", "error")
        return redirect(url_for("index"))
    try:
        project = project_from_json(file_storage.read().decode("utf-8", errors="replace"))
    except ProjectError as exc:
        flash(str(exc), "error")
        return redirect(url_for("index"))
    session = load_session()
    session.project = project
    save_session(session)
    flash("Projekt erfolgreich geladen!", "success")
    return redirect(url_for("index"))
@app.route("/export/<fmt>", methods=["GET"])
def export_report(fmt: str):
    if fmt not in EXPORT_MIMETYPES:
        return "Unknown export format", 404
    session: SavedSession = load_session()
    if not session.markdown:
        flash("Noch kein A3 Summary vorhanden.", "error")
        return redirect(url_for("index"))
    title = session.project.project_title
    suffix, mimetype = EXPORT_MIMETYPES[fmt]
    try:
        if fmt == "docx":
            payload = markdown_to_docx_bytes(session.markdown, title=title)
        elif fmt == "pdf":
            payload = markdown_to_pdf_bytes(session.markdown, title=title)
        else:
            payload = session.markdown.encode("utf-8")
    except ExportError as exc:
        app.logger.error("Export %s failed: %s", fmt, exc)
        flash(f"{fmt.upper()} Fehler: {exc}", "error")
        return redirect(url_for("index"))
    return send_file(
        BytesIO(payload),
        mimetype=mimetype,
        as_attachment=True,
        download_name=report_filename(title, suffix),
    )
TEMPLATE = """
<!doctype html>
<html lang="de">
<head>
  <meta charset="utf-8">
  <title>UPS Finalizer</title>
  <style>
    body { font-family: "Segoe UI", Arial, sans-serif; margin: 0; background: #f4f6fa; color: #1d2433; }
    header { background: #1f3a5f; color: #fff; padding: 14px 24px; display: flex; justify-content: space-between; align-items: center; }
    main { max-width: 1100px; margin: 0 auto; padding: 24px; }
    .card { background: #fff; border-radius: 8px; padding: 20px; margin-bottom: 20px; box-shadow: 0 1px 3px rgba(0,0,0,.08); }
    .flash { padding: 10px 14px; border-radius: 6px; margin-bottom: 10px; }
    .flash.error { background: #fde8e8; color: #8a1c1c; }
    .flash.success { background: #e6f6ea; color: #1d6b35; }
    label { display: block; font-weight: 600; margin: 10px 0 4px; }
    input[type=text], input[type=date], input[type=password], textarea, select { width: 100%; box-sizing: border-box; padding: 7px; border: 1px solid #c7cfdb; border-radius: 4px; }
    textarea { min-height: 60px; }
    .grid { display: grid; grid-template-columns: repeat(4, 1fr); gap: 10px; }
    .grid3 { display: grid; grid-template-columns: repeat(3, 1fr); gap: 10px; }
    .form-step { display: none; }
    .form-step.active { display: block; }
    .steps { display: flex; gap: 8px; margin-bottom: 14px; }
    .step-dot { flex: 1; text-align: center; padding: 6px; border-radius: 4px; background: #e3e8f0; font-size: 12px; cursor: pointer; }
    .step-dot.active { background: #1f3a5f; color: #fff; }
    .row-item { border: 1px solid #e3e8f0; border-radius: 6px; padding: 10px; margin-bottom: 10px; }
    button { background: #1f3a5f; color: #fff; border: 0; border-radius: 4px; padding: 8px 14px; cursor: pointer; }
    button.secondary { background: #6b7a90; }
    .actions { display: flex; gap: 8px; flex-wrap: wrap; margin-top: 14px; }
    #outputContent table { border-collapse: collapse; margin: 10px 0; }
    #outputContent th, #outputContent td { border: 1px solid #c7cfdb; padding: 5px 8px; }
    #outputContent blockquote { border-left: 4px solid #1f3a5f; margin: 8px 0; padding-left: 10px; color: #444; }
    .chat-message { padding: 8px 10px; border-radius: 6px; margin-bottom: 8px; white-space: pre-wrap; }
    .chat-message.user { background: #e3e8f0; }
    .chat-message.assistant { background: #eef6ff; }
  </style>
</head>
<body>
  <header>
    <strong>UPS Finalizer</strong>
    <span>v{{ app_version }}</span>
  </header>
  <main>
    {% with messages = get_flashed_messages(with_categories=true) %}
      {% for category, message in messages %}
        <div class="flash {{ category }}">{{ message }}</div>
      {% endfor %}
    {% endwith %}
    {% if gate %}
    <div class="card" id="apiGate">
      <h2>Gemini API Key erforderlich</h2>
      <p>Bitte einen gültigen Google Gemini API Key eingeben, um den UPS Finalizer zu nutzen.</p>
      <form method="post" action="{{ url_for('api_key') }}">
        <label for="api_key">API Key</label>
        <input type="password" id="api_key" name="api_key" autocomplete="off">
        <label for="model">Modell</label>
        <input type="text" id="model" name="model" value="gemini-pro">
        <div class="actions"><button type="submit">Validieren &amp; starten</button></div>
      </form>
    </div>
    {% else %}
    <div class="card">
      <h2>Gap-Analyse importieren</h2>
      <form method="post" action="{{ url_for('upload') }}" enctype="multipart/form-data">
        <input type="file" name="file" accept=".pdf,.xlsx,.xlsm">
        <button type="submit">Analysieren &amp; ausfüllen</button>
      </form>
      <form method="post" action="{{ url_for('project_import') }}" enctype="multipart/form-data" style="margin-top:10px">
        <input type="file" name="file" accept=".json">
        <button type="submit" class="secondary">Projekt laden (JSON)</button>
        <a href="{{ url_for('project_export') }}">Projekt als JSON speichern</a>
      </form>
    </div>
    <form class="card" id="upsForm" method="post" action="{{ url_for('save') }}">
      <div class="steps">
        {% for title in steps %}
          <div class="step-dot{% if loop.first %} active{% endif %}" data-step="{{ loop.index0 }}">{{ title }}</div>
        {% endfor %}
      </div>
      <section class="form-step active">
        <label for="projectTitle">Projekttitel *</label>
        <input type="text" id="projectTitle" name="projectTitle" value="{{ project.project_title }}">
        <label for="teamName">Team</label>
        <input type="text" id="teamName" name="teamName" value="{{ project.team_name }}">
        <label for="businessImpact">Business Impact</label>
        <textarea id="businessImpact" name="businessImpact">{{ project.business_impact }}</textarea>
      </section>
      <section class="form-step">
        <label for="largeVagueProblem">Großes, vages Problem</label>
        <textarea id="largeVagueProblem" name="largeVagueProblem">{{ project.large_vague_problem }}</textarea>
        <div class="grid">
          {% for key, label, value in [("what", "Was", project.what), ("where", "Wo", project.where), ("when", "Wann", project.when), ("who", "Wer", project.who), ("which", "Welches Muster", project.which), ("how", "Wie", project.how), ("howMuch", "Wie viel", project.how_much)] %}
          <div><label for="{{ key }}">{{ label }}</label><input type="text" id="{{ key }}" name="{{ key }}" value="{{ value }}"></div>
          {% endfor %}
        </div>
        <label for="problemStatement">Problem Statement *</label>
        <textarea id="problemStatement" name="problemStatement">{{ project.problem_statement }}</textarea>
      </section>
      <section class="form-step">
        <div class="grid">
          {% for key, label, value in [("ishikawaMensch", "Mensch", project.ishikawa_mensch), ("ishikawaMaschine", "Maschine", project.ishikawa_maschine), ("ishikawaMethode", "Methode", project.ishikawa_methode), ("ishikawaMaterial", "Material", project.ishikawa_material), ("ishikawaUmgebung", "Umgebung", project.ishikawa_umgebung)] %}
          <div><label for="{{ key }}">{{ label }}</label><input type="text" id="{{ key }}" name="{{ key }}" value="{{ value }}"></div>
          {% endfor %}
        </div>
        {% for n, value in [(1, project.why1), (2, project.why2), (3, project.why3), (4, project.why4), (5, project.why5)] %}
          <label for="why{{ n }}">Why {{ n }}</label>
          <input type="text" id="why{{ n }}" name="why{{ n }}" value="{{ value }}">
        {% endfor %}
        <label for="rootCause">True Root Cause *</label>
        <textarea id="rootCause" name="rootCause">{{ project.root_cause }}</textarea>
        <label for="verification">Verifikation</label>
        <textarea id="verification" name="verification">{{ project.verification }}</textarea>
      </section>
      <section class="form-step">
        <div id="countermeasuresList">
          {% for cm in countermeasures + [none] %}
          {% set idx = loop.index0 %}
          <div class="row-item countermeasure-item">
            <strong>Maßnahme {{ idx + 1 }}</strong>
            <div class="grid">
              <div><label>Maßnahme</label><input type="text" name="cm_action_{{ idx }}" value="{{ cm.action if cm else '' }}"></div>
              <div><label>Verantwortlich</label><input type="text" name="cm_responsible_{{ idx }}" value="{{ cm.responsible if cm else '' }}"></div>
              <div><label>Fälligkeitsdatum</label><input type="date" name="cm_dueDate_{{ idx }}" value="{{ cm.due_date if cm else '' }}"></div>
              <div><label>Status</label>
                <select name="cm_status_{{ idx }}">
                  <option value="">Wählen...</option>
                  {% for status in cm_statuses %}
                  <option value="{{ status }}"{% if cm and cm.status == status %} selected{% endif %}>{{ status }}</option>
                  {% endfor %}
                </select>
              </div>
            </div>
          </div>
          {% endfor %}
        </div>
      </section>
      <section class="form-step">
        <label>Validierung</label>
        {% for option in validation_options %}
          <label style="display:inline; font-weight:400"><input type="radio" name="validation" value="{{ option }}"{% if project.validation == option %} checked{% endif %}> {{ option }}</label>
        {% endfor %}
        <label for="beforeAfter">Vorher/Nachher</label>
        <textarea id="beforeAfter" name="beforeAfter">{{ project.before_after }}</textarea>
        <label for="standardization">Standardisierung</label>
        <textarea id="standardization" name="standardization">{{ project.standardization }}</textarea>
        <label for="followUp">Follow-up</label>
        <textarea id="followUp" name="followUp">{{ project.follow_up }}</textarea>
      </section>
      <section class="form-step">
        <div id="reapplicationList">
          {% for ra in areas + [none] %}
          {% set idx = loop.index0 %}
          <div class="row-item reapplication-item">
            <strong>Bereich {{ idx + 1 }}</strong>
            <div class="grid3">
              <div><label>Bereich / Maschine</label><input type="text" name="ra_area_{{ idx }}" value="{{ ra.area if ra else '' }}"></div>
              <div><label>Ansprechpartner</label><input type="text" name="ra_contact_{{ idx }}" value="{{ ra.contact if ra else '' }}"></div>
              <div><label>Transfer Status</label>
                <select name="ra_status_{{ idx }}">
                  <option value="">Wählen...</option>
                  {% for status in ra_statuses %}
                  <option value="{{ status }}"{% if ra and ra.status == status %} selected{% endif %}>{{ status }}</option>
                  {% endfor %}
                </select>
              </div>
            </div>
          </div>
          {% endfor %}
        </div>
      </section>
      <div class="actions">
        <button type="button" class="secondary" id="prevBtn">Zurück</button>
        <button type="button" class="secondary" id="nextBtn">Weiter</button>
        <button type="submit" class="secondary">Speichern</button>
        <button type="submit" formaction="{{ url_for('generate') }}" id="generateBtn">A3 Summary generieren</button>
      </div>
    </form>
    {% if has_report %}
    <div class="card" id="output">
      <h2>A3 Summary</h2>
      <div id="outputContent">{{ report_html }}</div>
      <div class="actions">
        <a href="{{ url_for('export_report', fmt='pdf') }}"><button type="button">PDF (A3)</button></a>
        <a href="{{ url_for('export_report', fmt='docx') }}"><button type="button">Word</button></a>
        <a href="{{ url_for('export_report', fmt='markdown') }}"><button type="button" class="secondary">Markdown</button></a>
      </div>
    </div>
    <div class="card" id="chat">
      <h2>Chat</h2>
      <div id="chatMessages">
        {% for message in chat_history %}
          <div class="chat-message {{ message.role }}">{{ message.content }}
            {% if message.role == 'assistant' %}
            <form method="post" action="{{ url_for('chat_apply') }}">
              <input type="hidden" name="index" value="{{ loop.index0 }}">
              <button type="submit">Anwenden</button>
            </form>
            {% endif %}
          </div>
        {% endfor %}
      </div>
      <form method="post" action="{{ url_for('chat') }}">
        <textarea name="message" placeholder="z.B. Mache das Problem Statement prägnanter"></textarea>
        <div class="actions">
          <button type="submit">Senden</button>
          <button type="submit" class="secondary" formaction="{{ url_for('chat_clear') }}">Verlauf löschen</button>
        </div>
      </form>
    </div>
    {% endif %}
    <form method="post" action="{{ url_for('clear_all') }}" onsubmit="return confirm('Möchten Sie wirklich alle gespeicherten Daten löschen?');">
      <button type="submit" class="secondary">Alle Daten löschen</button>
    </form>
    {% endif %}
  </main>
  <script>
    (function () {
      const steps = document.querySelectorAll('.form-step');
      const dots = document.querySelectorAll('.step-dot');
      const prev = document.getElementById('prevBtn');
      const next = document.getElementById('nextBtn');
      if (!steps.length) return;
      let current = 0;
      function show(idx) {
        current = Math.max(0, Math.min(steps.length - 1, idx));
        steps.forEach((s, i) => s.classList.toggle('active', i === current));
        dots.forEach((d, i) => d.classList.toggle('active', i === current));
        prev.disabled = current === 0;
        next.style.display = current === steps.length - 1 ? 'none' : 'inline-block';
      }
      prev.addEventListener('click', () => show(current - 1));
      next.addEventListener('click', () => show(current + 1));
      dots.forEach(d => d.addEventListener('click', () => show(parseInt(d.dataset.step, 10))));
      show(0);
    })();
  </script>
</body>
</html>
"""
if __name__ == "__main__":
    import socket
    import threading
    import webbrowser
    def _find_open_port(host: str, preferred: int) -> int:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
            s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            try:
                s.bind((host, preferred))
                return preferred
            except OSError:
                pass
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
            s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            s.bind((host, 0))
            return s.getsockname()[1]
    host = os.getenv("UPS_UI_HOST", "127.0.0.1")
    requested_port = int(os.getenv("UPS_UI_PORT", "8000"))
    port = _find_open_port(host, requested_port)
    def _open_browser() -> None:
        time.sleep(1)
        try:
            webbrowser.open(f"http://{host}:{port}")
        except Exception:
            pass
    threading.Thread(target=_open_browser, daemon=True).start()
    app.run(host=host, port=port, debug=False)
