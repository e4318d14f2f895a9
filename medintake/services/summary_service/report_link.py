"""Report hand-off link.

The report view is stateless: the questionnaire and its analysis travel in
the URL as URL-encoded JSON query parameters `data` and `analysis`.
Nothing is stored server-side.
"""
import json
from typing import Any, Dict, Optional, Tuple
from urllib.parse import parse_qs, quote, urlsplit

from medintake.shared.errors import ValidationError

DEFAULT_REPORT_PATH = "/report"

# Characters left unescaped, as in a browser's encodeURIComponent
_URI_COMPONENT_SAFE = "-_.!~*'()"


def _encode(payload: Any) -> str:
    return quote(json.dumps(payload, separators=(",", ":")), safe=_URI_COMPONENT_SAFE)


def build_report_link(
    data: Dict[str, Any],
    analysis: Optional[Dict[str, Any]] = None,
    base_path: str = DEFAULT_REPORT_PATH,
) -> str:
    """Build the report URL for a questionnaire.

    Args:
        data: Questionnaire payload as sent by the client
        analysis: Analysis dict, if one was produced
        base_path: Path (or absolute URL) of the report view

    Returns:
        URL of the form {base_path}?data=...&analysis=...
    """
    encoded_analysis = _encode(analysis) if analysis is not None else ""
    return f"{base_path}?data={_encode(data)}&analysis={encoded_analysis}"


def parse_report_link(url: str) -> Tuple[Dict[str, Any], Optional[Dict[str, Any]]]:
    """Recover the questionnaire and analysis from a report URL.

    Raises:
        ValidationError: If `data` is missing or either parameter is not JSON
    """
    params = parse_qs(urlsplit(url).query)
    raw_data = params.get("data", [""])[0]
    raw_analysis = params.get("analysis", [""])[0]

    if not raw_data:
        raise ValidationError.single("data", "Report data is missing")
    try:
        data = json.loads(raw_data)
    except json.JSONDecodeError as e:
        raise ValidationError.single("data", f"Report data is not valid JSON: {e}") from e

    analysis = None
    if raw_analysis:
        try:
            analysis = json.loads(raw_analysis)
        except json.JSONDecodeError as e:
            raise ValidationError.single("analysis", f"Analysis is not valid JSON: {e}") from e

    return data, analysis
