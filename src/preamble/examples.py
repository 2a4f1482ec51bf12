"""
Example registry for LaTeX, Beamer and HTML export.

Shows the typical mix of providers:
    - constant fragments (inputenc, html-charset)
    - control providers returning booleans from document inspection
      (has-code, has-images, has-links, has-math)
    - option flags read from the pass metadata (use-minted, no-hyperref)
    - a veto: beamer-overrides prevents hyperref and xcolor
"""
import re
from dataclasses import dataclass, field
from typing import Any, Dict

from preamble.model import Registry, Snippet
from preamble.snippets import defsnippet


@dataclass(frozen=True)
class ExportPass:
    """
    Pass metadata as a host might supply it.

    Properties:
        backend: Target backend name
        text: Raw document source
        options: Export options (e.g. {"minted": True})
    """

    backend: str
    text: str = ""
    options: Dict[str, Any] = field(default_factory=dict)


def text_matches(meta: ExportPass, pattern: str) -> bool:
    """True if the raw document text matches a regular expression."""
    return re.search(pattern, meta.text, re.MULTILINE | re.IGNORECASE) is not None


def build_example_registry() -> Registry:
    registry = Registry()

    # Document inspection
    registry.register(defsnippet(
        "has-code", lambda meta, ctx: text_matches(meta, r"^\s*#\+begin_src"),
        description="Document contains source blocks",
    ))
    registry.register(defsnippet(
        "has-images", lambda meta, ctx: text_matches(meta, r"\[\[file:[^]]+\.(png|jpe?g|pdf|svg)\]\]"),
    ))
    registry.register(defsnippet(
        "has-links", lambda meta, ctx: text_matches(meta, r"https?://"),
    ))
    registry.register(defsnippet(
        "has-math", lambda meta, ctx: text_matches(meta, r"\\\(|\$\$"),
    ))

    # Option flags
    registry.register(defsnippet("use-minted", lambda meta, ctx: bool(meta.options.get("minted"))))
    registry.register(defsnippet("no-hyperref", lambda meta, ctx: bool(meta.options.get("no_hyperref"))))

    # LaTeX
    registry.register(defsnippet("inputenc", "\\usepackage[utf8]{inputenc}"))
    registry.register(defsnippet(
        "minted",
        Snippet("\\usepackage{minted}", {"highlighter": "minted"}),
        requires="has-code & use-minted",
        description="Pygments highlighting, needs -shell-escape",
    ))
    registry.register(defsnippet(
        "listings",
        Snippet("\\usepackage{listings}", {"highlighter": "listings"}),
        requires="has-code & !use-minted",
    ))
    registry.register(defsnippet("graphicx", "\\usepackage{graphicx}", requires="has-images"))
    registry.register(defsnippet(
        "hyperref", "\\usepackage{hyperref}",
        requires=["and", "has-links", ["not", "no-hyperref"]],
    ))
    registry.register(defsnippet("xcolor", "\\usepackage{xcolor}", requires=["or", "minted", "listings"]))

    # Beamer loads hyperref and xcolor itself
    registry.register(defsnippet(
        "beamer-overrides", None, prevents=["hyperref", "xcolor"],
        description="Vetoes packages the beamer class already loads",
    ))

    # HTML
    registry.register(defsnippet("html-charset", '<meta charset="utf-8">'))
    registry.register(defsnippet(
        "html-highlight", '<link rel="stylesheet" href="highlight.css">', requires="has-code",
    ))
    registry.register(defsnippet(
        "mathjax",
        lambda meta, ctx: '<script src="{}"></script>'.format(
            meta.options.get("mathjax_url", "https://cdn.jsdelivr.net/npm/mathjax@3/es5/tex-chtml.js")
        ),
        requires="has-math",
    ))

    registry.add_backend("latex", ["inputenc", "minted", "listings", "graphicx", "hyperref", "xcolor"])
    registry.add_backend("beamer", ["beamer-overrides", "inputenc", "minted", "listings", "graphicx", "hyperref", "xcolor"])
    registry.add_backend("html", ["html-charset", "html-highlight", "mathjax"])

    return registry
