"""
CSV export of an analysis.

Fields are written with csv.writer (doubled quotes, quoting only when a
comma or quote is present) after every line break inside a field has been
flattened to a single space.
"""
import csv
import io
import re
from typing import Iterable, List, Optional

from impact_tester.core.models import AnalysisResult, TestScenario


EXPORT_HEADERS = ["ID de Jira", "Característica", "Escenario", "Dado", "Cuando", "Entonces", "Prioridad"]

PRIMARY_SECTION_MARKER = "### Casos de Prueba ###"
REGRESSION_SECTION_MARKER = "### Casos de Prueba de Regresión ###"
IMPACTS_SECTION_MARKER = "### Impactos Sugeridos ###"
SUGGESTIONS_SECTION_MARKER = "### Pruebas de Regresión Sugeridas ###"

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


def flatten_line_breaks(value: Optional[str]) -> str:
    """
    Replace every line break with a single space

    Example:
        >>> flatten_line_breaks("Paso 1\\r\\nPaso 2")
        'Paso 1 Paso 2'
    """
    return _LINE_BREAK.sub(" ", value or "")


def _flat(values: Iterable[Optional[str]]) -> List[str]:
    return [flatten_line_breaks(v) for v in values]


def export_analysis(
    primary_scenarios: List[TestScenario],
    regression_scenarios: Optional[List[TestScenario]],
    impact_notes: str,
    regression_suggestions: str,
) -> str:
    """
    Serialize an analysis into one CSV document.

    Args:
        primary_scenarios: Stage 1 scenarios
        regression_scenarios: Stage 2 scenarios (None or empty to omit)
        impact_notes: Impacts text, one impact per line
        regression_suggestions: Regression suggestions text, one per line

    Returns:
        Header row followed by every non-empty section, each introduced by
        a blank line and its marker line
    """
    output = io.StringIO()
    writer = csv.writer(output, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    # impacts and suggestions are always written as one quoted block
    block_writer = csv.writer(output, quoting=csv.QUOTE_ALL, lineterminator="\n")

    def start_section(marker: str) -> None:
        writer.writerow([])
        writer.writerow([marker])

    writer.writerow(EXPORT_HEADERS)

    if primary_scenarios:
        start_section(PRIMARY_SECTION_MARKER)
        writer.writerows(_flat(s.to_row()) for s in primary_scenarios)
    if regression_scenarios:
        start_section(REGRESSION_SECTION_MARKER)
        writer.writerows(_flat(s.to_row()) for s in regression_scenarios)
    if impact_notes and impact_notes.strip():
        start_section(IMPACTS_SECTION_MARKER)
        block_writer.writerow(_flat([impact_notes]))
    if regression_suggestions and regression_suggestions.strip():
        start_section(SUGGESTIONS_SECTION_MARKER)
        block_writer.writerow(_flat([regression_suggestions]))

    return output.getvalue()


def export_result(result: AnalysisResult) -> str:
    """Export a whole AnalysisResult"""
    return export_analysis(
        result.primary_scenarios,
        result.regression_scenarios,
        result.impact_notes,
        result.regression_suggestions,
    )


def export_filename(ticket_id: str = "") -> str:
    """Download name for an export, e.g. analisis_PROJ-123.csv"""
    safe_id = re.sub(r"[^A-Za-z0-9_\-]", "", ticket_id or "")
    return f"analisis_{safe_id or 'jira'}.csv"
