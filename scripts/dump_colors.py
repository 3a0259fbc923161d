#!/usr/bin/env python3
"""List the device color instructions found on each page of a PDF."""
import argparse
import json
import sys
from collections import Counter
from pathlib import Path

from pdf_recolor.core.errors import RecolorError
from pdf_recolor.core.pdf_document import load_document
from pdf_recolor.utils.color_operators import iter_color_instructions
from pdf_recolor.utils.content_scanner import scan_content


def collect_colors(pdf_bytes: bytes) -> list:
    document = load_document(pdf_bytes)
    report = []
    for page in document.pages():
        content = page.get_content_bytes()
        entry = {"page": page.index + 1, "has_content": content is not None, "operators": {}, "colors": []}
        if content is not None:
            counts = Counter()
            for instruction in iter_color_instructions(scan_content(content)):
                keyword = instruction.operator.keyword
                counts[keyword] += 1
                entry["colors"].append(f"{' '.join(t.text for t in instruction.operands)} {keyword}")
            entry["operators"] = dict(counts)
        report.append(entry)
    return report


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("pdf", type=Path, help="Path to the PDF to inspect")
    parser.add_argument("--json", action="store_true", help="Emit the report as JSON")
    args = parser.parse_args()

    try:
        report = collect_colors(args.pdf.read_bytes())
    except RecolorError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(report, indent=2))
        return 0

    for entry in report:
        if not entry["has_content"]:
            print(f"Page {entry['page']}: no content stream")
            continue
        summary = ", ".join(f"{op}={n}" for op, n in sorted(entry["operators"].items())) or "none"
        print(f"Page {entry['page']}: {summary}")
        for color in sorted(set(entry["colors"])):
            print(f"  {color}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
