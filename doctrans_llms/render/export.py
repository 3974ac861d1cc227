"""
Serialization of translated text into export artifacts.

Three strategies, selected by ExportKind:
- PLAIN: the text as UTF-8 with a byte-order mark and a MIME type from a
  fixed table (unknown extensions are text/plain)
- RICH: an HTML envelope that Word opens as a native document, one
  direction-aware paragraph per line
- PRINT: a standalone styled HTML page handed to the host print dialog;
  complex-script shaping is left to the browser engine

Direction is detected from the Arabic block (U+0600-U+06FF): the document's
font follows the whole text, while every paragraph carries the direction of
its own line, so mixed documents render line by line correctly.
"""

from __future__ import annotations

import html
import logging

from doctrans_llms.models import Artifact, ExportKind, ExportSpec, normalize_extension
from doctrans_llms.utils import is_rtl, text_direction

logger = logging.getLogger(__name__)

BOM = "\ufeff"

PLAIN_MIME_TYPES = {
    ".json": "application/json",
    ".html": "text/html",
    ".csv": "text/csv",
    ".xml": "text/xml",
    ".md": "text/markdown",
}
DEFAULT_MIME_TYPE = "text/plain"

WORD_MIME_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
PRINT_MIME_TYPE = "text/html"

RTL_FONT = "'Vazirmatn', sans-serif"
LTR_FONT = "'Inter', sans-serif"


def mime_type_for(extension: str) -> str:
    """MIME type of a plain-family extension."""
    return PLAIN_MIME_TYPES.get(normalize_extension(extension), DEFAULT_MIME_TYPE)


def _alignment(direction: str) -> str:
    return "right" if direction == "rtl" else "left"


def word_paragraph(line: str) -> str:
    """One Word paragraph; blank lines keep their vertical space."""
    if not line.strip():
        return "<p>&nbsp;</p>"
    direction = text_direction(line)
    align = _alignment(direction)
    return (
        f'<p align="{align}" dir="{direction}" '
        f'style="text-align:{align}; direction:{direction}; unicode-bidi:embed">'
        f"{html.escape(line, quote=False)}</p>"
    )


def print_paragraph(line: str) -> str:
    if not line.strip():
        return "<br>"
    direction = text_direction(line)
    return f'<p dir="{direction}">{html.escape(line, quote=False)}</p>'


def build_word_html(content: str) -> str:
    """Word-compatible HTML document for the rich export."""
    rtl = is_rtl(content)
    rtl_font = (
        'font-family: "Vazirmatn", "Arial", sans-serif; mso-bidi-font-family: "Arial";'
        if rtl else ""
    )
    header = (
        "<html xmlns:o='urn:schemas-microsoft-com:office:office' "
        "xmlns:w='urn:schemas-microsoft-com:office:word' "
        "xmlns='http://www.w3.org/TR/REC-html40'>\n"
        "<head>\n"
        "<meta charset='utf-8'>\n"
        "<style>\n"
        "body { font-family: 'Arial', sans-serif; }\n"
        "p.MsoNormal {\n"
        '  mso-style-parent: "";\n'
        "  margin-bottom: .0001pt;\n"
        '  font-family: "Arial", "sans-serif";\n'
        f"  {rtl_font}\n"
        "}\n"
        "</style>\n"
        "</head>\n"
        "<body lang=EN-US style='tab-interval:.5in'>\n"
    )
    paragraphs = "\n".join(word_paragraph(line) for line in content.split("\n"))
    return f"{header}{paragraphs}\n</body></html>"


def build_print_html(content: str, title: str) -> str:
    """Standalone page that opens the print dialog once loaded."""
    direction = text_direction(content)
    align = _alignment(direction)
    font = RTL_FONT if direction == "rtl" else LTR_FONT
    body = "\n".join(print_paragraph(line) for line in content.split("\n"))
    return f"""<!DOCTYPE html>
<html lang="en" dir="{direction}">
<head>
<meta charset="UTF-8">
<title>{html.escape(title)}</title>
<link href="https://fonts.googleapis.com/css2?family=Inter:wght@400;600&family=Vazirmatn:wght@400;700&display=swap" rel="stylesheet">
<style>
  body {{
    font-family: {font};
    padding: 40px;
    line-height: 1.8;
    color: #1a1a1a;
    max-width: 800px;
    margin: 0 auto;
    text-align: {align};
  }}
  p {{ margin-bottom: 10px; text-align: justify; }}
  @media print {{
    body {{ padding: 0; margin: 2cm; }}
    @page {{ margin: 2cm; }}
  }}
</style>
</head>
<body>
{body}
<script>
  window.onload = function() {{
    setTimeout(function() {{ window.print(); }}, 500);
  }};
</script>
</body>
</html>
"""


def export_spec(spec: ExportSpec) -> Artifact:
    """Serialize an ExportSpec into an Artifact."""
    extension = normalize_extension(spec.extension)
    filename = f"{spec.base_name}{extension}"

    match spec.kind:
        case ExportKind.PRINT:
            page = build_print_html(spec.content, spec.base_name)
            artifact = Artifact(
                filename=filename,
                mime_type=PRINT_MIME_TYPE,
                payload=page.encode("utf-8"),
                kind=ExportKind.PRINT,
            )
        case ExportKind.RICH:
            document = build_word_html(spec.content)
            artifact = Artifact(
                filename=filename,
                mime_type=WORD_MIME_TYPE,
                payload=(BOM + document).encode("utf-8"),
                kind=ExportKind.RICH,
            )
        case _:
            artifact = Artifact(
                filename=filename,
                mime_type=f"{mime_type_for(extension)};charset=utf-8",
                payload=(BOM + spec.content).encode("utf-8"),
                kind=ExportKind.PLAIN,
            )

    logger.debug(
        "Exported %s as %s (%d bytes)", filename, artifact.kind.value, len(artifact.payload)
    )
    return artifact


def export(content: str, base_name: str, extension: str) -> Artifact:
    """Export text to the format named by an extension.

    Args:
        content: Final translated text
        base_name: Filename without extension
        extension: Export extension, with or without the leading dot

    Returns:
        Artifact with filename, MIME type and payload
    """
    return export_spec(ExportSpec(base_name=base_name, extension=extension, content=content))
