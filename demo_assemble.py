#!/usr/bin/env python3
"""
Demo: Assemble LaTeX and HTML preambles for a sample document.

Shows the fragments of each backend and the raw cache of the LaTeX pass.
"""

from preamble.assembler import assemble, assemble_pass
from preamble.examples import ExportPass, build_example_registry
from preamble.serialization import pass_result_to_yaml


DOCUMENT = """\
#+title: Demo
See https://example.org for details, and \\(x^2\\).

[[file:plot.png]]

#+begin_src python
print("hello")
#+end_src
"""


def main():
    registry = build_example_registry()

    runs = [("latex", {"minted": True}), ("latex", {}), ("beamer", {}), ("html", {})]
    for backend, options in runs:
        meta = ExportPass(backend=backend, text=DOCUMENT, options=options)
        print("=" * 80)
        print(f"{backend.upper()} PREAMBLE  options={options}")
        print("-" * 80)
        for fragment in assemble(registry, backend, meta):
            print(fragment)

    print("=" * 80)
    print("RAW CACHE (latex, minted)")
    print("-" * 80)
    result = assemble_pass(registry, "latex", ExportPass("latex", DOCUMENT, {"minted": True}))
    print(pass_result_to_yaml(result))


if __name__ == "__main__":
    main()
