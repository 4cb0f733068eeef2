from __future__ import annotations
import re
from typing import List
from .project import UPSProject
SYSTEM_INSTRUCTION = (
    "Du bist ein erfahrener Lean-Management-Coach und Experte für das UPS "
    "(Unified Problem Solving) Framework. Deine Aufgabe ist es, aus den rohen "
    "Projektdaten eines Teams ein prägnantes, professionelles A3 Summary zu erstellen.\n"
    "Regeln:\n"
    "- Halte den \"Golden Thread\": Problem, Root Cause, Countermeasures und Ergebnisse "
    "müssen logisch aufeinander aufbauen.\n"
    "- Formuliere sachlich, messbar und ohne Füllwörter.\n"
    "- Erfinde keine Zahlen oder Namen, die nicht in den Daten stehen.\n"
    "- Antworte ausschließlich im vorgegebenen Markdown-Format."
)
OUTPUT_TEMPLATE = """# A3 Summary: [Projekttitel]
**Team:** [Teamname]
> [Business Impact in einem Satz]
---
## 1. Problem Statement
[Präzises Problem Statement aus 6W-2H]
| Was | Wo | Wann | Wie viel |
| --- | --- | --- | --- |
| [Was] | [Wo] | [Wann] | [Wie viel] |
## 2. Root Cause
* **Why 1:** [..]
* **Why 2:** [..]
* **Why 3:** [..]
* **Why 4:** [..]
* **Why 5:** [..]
**True Root Cause:** [Grundursache]
**Verifikation:** [Wie wurde die Ursache bestätigt]
## 3. Countermeasures
| Nr. | Maßnahme | Verantwortlich | Termin | Status |
| --- | --- | --- | --- | --- |
| 1 | [Maßnahme] | [Name] | [Datum] | [Status] |
## 4. Sustain Results
**Validierung:** [Ja/Nein/Teilweise]
**Vorher/Nachher:** [Kennzahlenvergleich]
**Standardisierung:** [SOP, OPL, Checkliste]
**Follow-up:** [Termin und Verantwortung]
## 5. Reapplication
| Bereich | Ansprechpartner | Status |
| --- | --- | --- |
| [Bereich] | [Name] | [Status] |
---
**Lessons Learned:** [Ein Satz]"""
REAPPLICATION_RULE = """AUTOMATISCHE REAPPLICATION REGEL:
Da keine Reapplication-Bereiche angegeben wurden, MUSST du die Reapplication Matrix selbst generieren.
Basierend auf dem Problem "{problem}", erstelle 2-3 logische Vorschläge für ähnliche Bereiche im Unternehmen.
Beispiele:
- Wenn Problem an "Maschine 17" -> Vorschlag: "Maschine 18, 19"
- Wenn Problem in "Produktionslinie A" -> Vorschlag: "Produktionslinie B, C"
- Wenn Problem in "Schicht 1" -> Vorschlag: "Schicht 2, Wochenendschicht"
"""
EXTRACTION_FIELDS = [
    "projectTitle",
    "teamName",
    "businessImpact",
    "largeVagueProblem",
    "what",
    "where",
    "when",
    "who",
    "which",
    "how",
    "howMuch",
    "problemStatement",
    "ishikawaMensch",
    "ishikawaMaschine",
    "ishikawaMethode",
    "ishikawaMaterial",
    "ishikawaUmgebung",
    "why1",
    "why2",
    "why3",
    "why4",
    "why5",
    "rootCause",
    "verification",
    "validation",
    "beforeAfter",
    "standardization",
    "followUp",
]
JSON_FENCE_PATTERN = re.compile(r"```(?:json)?\s*\n?([\s\S]*?)\n?```")
def build_report_prompt(project: UPSProject) -> str:
    sections: List[str] = [SYSTEM_INSTRUCTION]
    if not project.filled_reapplication_areas():
        sections.append(REAPPLICATION_RULE.format(problem=project.problem_statement))
    lines = [
        "Input-Daten (Kontext): Hier sind die rohen Projektdaten, die du verarbeiten musst:",
        "",
        f"Projekt: {project.project_title}",
        f"Team: {project.team_name}",
        f"Projekt/Business Case: {project.business_impact}",
        "",
        "Step 1 - Problem Statement (aus 6W-2H):",
        f"Großes, vages Problem: {project.large_vague_problem}",
        f"- Was: {project.what}",
        f"- Wo (ON THE FLOOR): {project.where}",
        f"- Wann: {project.when}",
        f"- Wer: {project.who}",
        f"- Welches Muster: {project.which}",
        f"- Wie: {project.how}",
        f"- Wie viel: {project.how_much}",
        f"Problem Statement: {project.problem_statement}",
        "",
        "Step 2 - Root Cause (aus 5-Why/Ishikawa):",
        "Ishikawa Kategorien:",
        f"- Mensch: {project.ishikawa_mensch}",
        f"- Maschine: {project.ishikawa_maschine}",
        f"- Methode: {project.ishikawa_methode}",
        f"- Material: {project.ishikawa_material}",
        f"- Umgebung: {project.ishikawa_umgebung}",
        "5-Why Kette:",
        f"1. {project.why1}",
        f"2. {project.why2}",
        f"3. {project.why3}",
        f"4. {project.why4}",
        f"5. {project.why5}",
        f"True Root Cause: {project.root_cause}",
        f"Verifikation: {project.verification}",
        "",
        "Step 3 - Countermeasures (Action Plan):",
    ]
    for idx, cm in enumerate(project.filled_countermeasures(), start=1):
        due = f" | Termin: {cm.due_date}" if cm.due_date else ""
        lines.append(f"{idx}. {cm.action} | Verantwortlich: {cm.responsible}{due} | Status: {cm.status}")
    lines.extend(
        [
            "",
            "Step 4 - Sustain Results (Check):",
            f"Validierung: {project.validation}",
            f"Vorher/Nachher: {project.before_after}",
            f"Standardisierung: {project.standardization}",
            f"Follow-up: {project.follow_up}",
            "",
            "Step 5 - Reapplication Potential:",
        ]
    )
    for idx, ra in enumerate(project.filled_reapplication_areas(), start=1):
        lines.append(f"{idx}. {ra.area} | Kontakt: {ra.contact} | Status: {ra.status}")
    sections.append("\n".join(lines))
    sections.append(
        "Output-Format: Generiere den Output exakt im folgenden Markdown-Format:\n\n" + OUTPUT_TEMPLATE
    )
    sections.append(
        "Fülle alle Platzhalter mit den bereitgestellten Daten aus und stelle sicher, "
        "dass der \"Golden Thread\" konsistent ist."
    )
    return "\n\n".join(sections).strip() + "\n"
def build_chat_system_prompt(summary: str) -> str:
    return (
        "Du bist ein Assistent für die Bearbeitung von A3 Summaries im UPS Framework.\n"
        "Der User hat folgendes A3 Summary generiert:\n\n"
        f"{(summary or '').strip()}\n\n"
        "Deine Aufgaben:\n"
        "1. Hilf dem User, dieses Summary zu verbessern\n"
        "2. Bei Änderungswünschen: Gib den VOLLSTÄNDIGEN neuen Abschnitt zurück\n"
        "3. Sei präzise und professionell\n"
        "4. Halte dich an Lean Management Standards\n\n"
        "Der User kann Anfragen stellen wie:\n"
        "- \"Mache das Problem Statement prägnanter\"\n"
        "- \"Ändere den Verantwortlichen bei Maßnahme 1 auf Herr Müller\"\n"
        "- \"Füge eine weitere Reapplication Area hinzu\"\n\n"
        "Antworte immer mit dem vollständigen Markdown-Text der geänderten Sektion."
    )
def build_extraction_prompt() -> str:
    keys = ",\n".join(f'  "{key}": ""' for key in EXTRACTION_FIELDS)
    return (
        "Du analysierst eine Gap-Analyse bzw. ein Problemlösungsdokument im UPS/A3 Format.\n"
        "Extrahiere alle Informationen, die zu den folgenden Feldern passen. "
        "Lasse Felder leer, wenn das Dokument keine Angabe enthält; erfinde nichts.\n\n"
        "Antworte NUR mit gültigem JSON in genau dieser Struktur:\n"
        "{\n"
        f"{keys},\n"
        '  "countermeasures": [{"action": "", "responsible": "", "dueDate": "", "status": ""}],\n'
        '  "reapplicationAreas": [{"area": "", "contact": "", "status": ""}]\n'
        "}"
    )
def extract_json_block(text: str) -> str:
    if not text:
        return ""
    match = JSON_FENCE_PATTERN.search(text)
    if match:
        return match.group(1).strip()
    return text.strip()
