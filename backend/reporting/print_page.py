"""
Print-ready HTML for a stored project: one fixed A3 landscape page per slide.

The page emits the render-completion signal the PDF export waits for
(window.__printReady plus a one-shot "print-ready" event) once every image has
loaded or failed and web fonts are resolved.
"""
from __future__ import annotations

import html
import re
from pathlib import Path

from exporting.readiness import READY_EVENT, READY_FLAG
from models import Project, Slide

_TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"
_PRINT_HTML = (_TEMPLATE_DIR / "print.html").read_text(encoding="utf-8")

_PLACEHOLDER_RE = re.compile(r"__(DECK_TITLE|PAGES_HTML|READY_SCRIPT)__")

MAX_MEDIA_URL_LEN = 4096

READY_SCRIPT = """
(function () {
  var fired = false;
  function ready() {
    if (fired) return;
    fired = true;
    window.%(flag)s = true;
    console.log("Print ready: all resources loaded");
    window.dispatchEvent(new Event("%(event)s"));
  }
  function waitForAssets() {
    var pending = Array.prototype.slice.call(document.images).map(function (img) {
      if (img.complete) return Promise.resolve();
      return new Promise(function (resolve) {
        img.addEventListener("load", resolve, { once: true });
        img.addEventListener("error", resolve, { once: true });
      });
    });
    if (document.fonts && document.fonts.ready) {
      pending.push(document.fonts.ready);
    }
    Promise.all(pending).then(ready, ready);
  }
  if (document.readyState === "loading") {
    document.addEventListener("DOMContentLoaded", waitForAssets);
  } else {
    waitForAssets();
  }
})();
""" % {"flag": READY_FLAG, "event": READY_EVENT}


def _esc(value: object) -> str:
    return html.escape(str(value or ""), quote=True)


def safe_media_url(raw: str | None) -> str:
    """Allow http(s), root-relative and inline image URLs only."""
    value = (raw or "").strip()
    if not value or len(value) > MAX_MEDIA_URL_LEN:
        return ""
    if value.startswith(("https://", "http://", "data:image/")):
        return value
    if value.startswith("/") and not value.startswith("//"):
        return value
    return ""


def _body_html(body: str) -> str:
    paragraphs = [p.strip() for p in re.split(r"\n\s*\n", body or "") if p.strip()]
    return "".join(
        "<p>" + "<br />".join(_esc(line) for line in p.splitlines()) + "</p>"
        for p in paragraphs
    )


def _slide_html(slide: Slide, page_no: int, total_pages: int, project: Project) -> str:
    subtitle = f'<p class="slide-subtitle">{_esc(slide.subtitle)}</p>' if slide.subtitle else ""
    image_src = safe_media_url(slide.image_url)
    figure = ""
    if image_src:
        caption = f"<figcaption>{_esc(slide.caption)}</figcaption>" if slide.caption else ""
        figure = f'<figure class="slide-figure"><img src="{_esc(image_src)}" alt="{_esc(slide.caption or slide.title)}" />{caption}</figure>'
    footer_left = " · ".join(_esc(v) for v in (project.customer_name, project.name) if v)
    return f"""    <div class="zoom-wrap print-zoom-wrap">
      <section class="page-a3 print-page" data-page="{page_no}">
        <div class="safe">
          <header class="slide-header">
            <h1 class="slide-title">{_esc(slide.title)}</h1>
            {subtitle}
          </header>
          <div class="slide-main">
            <div class="slide-body">{_body_html(slide.body)}</div>
            {figure}
          </div>
          <footer class="slide-footer"><span>{footer_left}</span><span>{page_no} / {total_pages}</span></footer>
        </div>
      </section>
    </div>"""


def build_print_html(project: Project) -> str:
    """Full print-ready document for `project`. A deck with no slides prints one placeholder page."""
    total = len(project.slides)
    if total:
        pages_html = "\n".join(
            _slide_html(slide, i, total, project)
            for i, slide in enumerate(project.slides, start=1)
        )
    else:
        pages_html = (
            '    <div class="zoom-wrap print-zoom-wrap">'
            '<section class="page-a3 print-page" data-page="1">'
            '<div class="empty-deck">No slides.</div></section></div>'
        )
    values = {
        "DECK_TITLE": _esc(project.name or project.id),
        "PAGES_HTML": pages_html,
        "READY_SCRIPT": READY_SCRIPT,
    }
    # Single pass so slide text is never re-scanned for placeholders.
    return _PLACEHOLDER_RE.sub(lambda m: values[m.group(1)], _PRINT_HTML)
