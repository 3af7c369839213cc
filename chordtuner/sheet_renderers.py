"""Renderer implementations for chord-history sheet output."""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from dataclasses import asdict
from typing import Any, cast

from chordtuner.sheet_models import ScoreDocument


def _escape_html(text: str) -> str:
    """Escape the three characters that are unsafe in HTML text content."""
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


class SheetRenderer(ABC):
    """Abstract sheet renderer."""

    @property
    @abstractmethod
    def default_extension(self) -> str:
        """Default filename extension for this renderer."""

    @abstractmethod
    def render(
        self,
        *,
        title: str,
        musicxml_bytes: bytes | None = None,
        score_document: ScoreDocument | None = None,
    ) -> str:
        """Render output into a file content string."""


class VerovioHtmlRenderer(SheetRenderer):
    """Engrave MusicXML with verovio and wrap the SVG pages in one HTML file."""

    # verovio layout units (~0.1 mm); landscape-ish page so a line holds many chords
    _PAGE_WIDTH: int = 2800
    _PAGE_HEIGHT: int = 2000
    _SCALE: int = 45
    _PAGE_MARGIN: int = 80

    @property
    def default_extension(self) -> str:
        return ".html"

    def render(
        self,
        *,
        title: str,
        musicxml_bytes: bytes | None = None,
        score_document: ScoreDocument | None = None,
    ) -> str:
        if musicxml_bytes is None:
            raise ValueError("musicxml_bytes is required for HTML rendering.")

        return self.build_html(title, self.render_svgs(musicxml_bytes))

    def render_svgs(self, musicxml_bytes: bytes) -> list[str]:
        """
        Engrave MusicXML into one SVG string per page.

        System breaks encoded in the MusicXML (one per notation line) are
        honoured, so each notation line starts a new system.

        Raises:
            ValueError: If verovio cannot load the MusicXML data.
        """
        import verovio

        tk = verovio.toolkit()
        tk.setOptions(
            {
                "pageWidth": self._PAGE_WIDTH,
                "pageHeight": self._PAGE_HEIGHT,
                "scale": self._SCALE,
                "pageMarginTop": self._PAGE_MARGIN,
                "pageMarginBottom": self._PAGE_MARGIN,
                "pageMarginLeft": self._PAGE_MARGIN,
                "pageMarginRight": self._PAGE_MARGIN,
                "adjustPageHeight": True,
                "breaks": "encoded",
            }
        )

        if not tk.loadData(musicxml_bytes.decode("utf-8")):
            raise ValueError("verovio could not load the MusicXML data.")

        return [self._render_page_svg(tk, page_no) for page_no in range(1, tk.getPageCount() + 1)]

    def _render_page_svg(self, toolkit: Any, page_no: int) -> str:
        # Older verovio bindings reject keyword arguments.
        try:
            return cast(str, toolkit.renderToSVG(pageNo=page_no, xmlDeclaration=False))
        except TypeError:
            return cast(str, toolkit.renderToSVG(page_no))

    def build_html(self, title: str, svgs: list[str]) -> str:
        """
        Wrap SVG pages in a standalone HTML document.

        Each SVG is placed in its own ``.page`` div. The stylesheet includes
        both screen styles (white cards on a grey background) and print styles
        (``page-break-after: always`` per page, no drop shadows).
        """
        title_safe = _escape_html(title)
        heading = f"  <h1>{title_safe}</h1>\n" if title else ""
        pages = "\n".join(f'  <div class="page">{svg}</div>' for svg in svgs)

        return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1.0" />
  <title>{title_safe}</title>
  <style>
    *, *::before, *::after {{ box-sizing: border-box; }}
    body {{
      font-family: Georgia, serif;
      background: #f0f0f0;
      margin: 0;
      padding: 2rem;
    }}
    h1 {{
      text-align: center;
      font-size: 1.6rem;
      margin-bottom: 2rem;
      color: #222;
    }}
    .page {{
      background: #fff;
      box-shadow: 0 2px 8px rgba(0, 0, 0, 0.15);
      margin: 0 auto 3rem;
      max-width: 860px;
      padding: 1rem;
    }}
    .page svg {{
      display: block;
      width: 100%;
      height: auto;
    }}
    @media print {{
      body {{
        background: #fff;
        padding: 0;
        margin: 0;
      }}
      h1 {{
        margin-top: 1rem;
      }}
      .page {{
        box-shadow: none;
        page-break-after: always;
        max-width: 100%;
        padding: 0;
        margin: 0;
      }}
      .page:last-child {{
        page-break-after: avoid;
      }}
    }}
  </style>
</head>
<body>
{heading}{pages}
</body>
</html>"""



class VexflowMarkdownRenderer(SheetRenderer):
    """Render notation lines into Markdown that draws them with VexFlow in the browser."""

    # Pixel layout shared with NotationLineLayout's default spacing.
    NOTE_SPACING = 80
    LINE_SPACING = 120
    TOP_MARGIN = 20

    @property
    def default_extension(self) -> str:
        return ".md"

    def render(
        self,
        *,
        title: str,
        musicxml_bytes: bytes | None = None,
        score_document: ScoreDocument | None = None,
    ) -> str:
        if score_document is None:
            raise ValueError("score_document is required for md-vexflow rendering.")

        title_safe = _escape_html(title)
        score_json = json.dumps(asdict(score_document), separators=(",", ":"))
        score_json = score_json.replace("</", "<\\/")

        return f"""# {title_safe}

Chord history at {score_document.tempo_bpm:g} BPM. Open in a Markdown viewer that runs embedded JavaScript.

<div id="chordtuner-score"></div>
<script id="chordtuner-score-data" type="application/json">{score_json}</script>
<script type="module">
  import {{
    Accidental,
    Annotation,
    Formatter,
    Renderer,
    Stave,
    StaveNote
  }} from "https://cdn.jsdelivr.net/npm/vexflow@4.2.5/build/esm/entry/vexflow.js";

  const host = document.getElementById("chordtuner-score");
  const payloadNode = document.getElementById("chordtuner-score-data");
  if (!host || !payloadNode) {{
    throw new Error("Missing chordtuner score container.");
  }}

  const payload = JSON.parse(payloadNode.textContent || "{{}}");
  const lines = Array.isArray(payload.lines) ? payload.lines : [];
  const noteSpacing = {self.NOTE_SPACING};
  const lineSpacing = {self.LINE_SPACING};
  const topMargin = {self.TOP_MARGIN};

  const longest = lines.reduce((acc, line) => Math.max(acc, line.notes.length), 1);
  const width = longest * noteSpacing + 40;

  const renderer = new Renderer(host, Renderer.Backends.SVG);
  renderer.resize(width, lines.length * lineSpacing + topMargin);
  const context = renderer.getContext();

  lines.forEach((line, index) => {{
    const stave = new Stave(10, topMargin + index * lineSpacing, line.notes.length * noteSpacing + 20);
    stave.addClef("treble").setContext(context).draw();

    const notes = line.notes.map((entry) => {{
      const note = new StaveNote({{ clef: "treble", keys: entry.keys, duration: entry.duration }});
      entry.accidentals.forEach((symbol, keyIndex) => {{
        if (symbol) {{
          note.addModifier(new Accidental(symbol), keyIndex);
        }}
      }});
      if (entry.label) {{
        note.addModifier(new Annotation(entry.label).setVerticalJustification(Annotation.VerticalJustify.TOP), 0);
      }}
      return note;
    }});

    Formatter.FormatAndDraw(context, stave, notes);
  }});
</script>
"""
